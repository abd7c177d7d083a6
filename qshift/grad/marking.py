"""Marking differentiable gates and deriving their generators."""

from __future__ import annotations

import logging

from ..blocks import AbstractBlock, BlockKind, ControlBlock, PrimitiveGate
from ..logging import get_logger
from .marker import Diff, is_controlled_phase
from .params import diff_blocks

logger = get_logger(__name__)


def _mark(block: AbstractBlock) -> AbstractBlock:
    kind = block.kind
    if kind is BlockKind.ROTATION or is_controlled_phase(block):
        return Diff(block)
    if kind is BlockKind.CONTROL:
        # Generic controlled gates are not differentiable targets.
        return block
    if kind is BlockKind.TAG:
        return block

    children = block.subblocks()
    if not children:
        return block
    return block.chsubblocks([_mark(child) for child in children])


def markdiff(block: AbstractBlock) -> AbstractBlock:
    """
    Wrap every rotation gate and controlled phase gate of a tree in :class:`Diff`.

    Generic control blocks are returned untouched, including their content.
    Nodes that are already marked are kept as they are, so marking a marked
    tree changes nothing.

    Args:
        block: Root of the circuit tree.

    Returns:
        The rewritten tree; ``block`` itself when nothing needed marking
        at the root.
    """
    marked = _mark(block)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("markdiff: %d differentiable node(s)", len(diff_blocks(marked)))
    return marked


def generator(block: AbstractBlock) -> AbstractBlock:
    """
    Hermitian generator of a differentiable gate.

    * rotation exp(-iθP/2): the Pauli ``P`` on the gate's qubit;
    * controlled phase shift: the same controls and configuration with ``Z``
      on the target qubit;
    * :class:`Diff`: the generator of its content.

    Raises:
        TypeError: For blocks without a defined generator.
    """
    if block.kind is BlockKind.TAG:
        return generator(block.subblocks()[0])
    if block.kind is BlockKind.ROTATION:
        return PrimitiveGate(block.n_qubits, block.axis, block.qubits)
    if is_controlled_phase(block):
        return ControlBlock(
            block.n_qubits,
            block.ctrl_qubits,
            PrimitiveGate(block.n_qubits, "Z", block.qubits),
            block.ctrl_config,
        )
    raise TypeError(f"No generator defined for {block.kind.value} block {block!r}")
