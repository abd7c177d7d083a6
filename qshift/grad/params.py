"""Reading and writing the parameters of marked nodes."""

from __future__ import annotations

from typing import Iterable, List

from ..blocks import AbstractBlock, BlockKind, iter_postorder
from ..blocks.dispatch import Combinator
from ..logging import get_logger
from .marker import Diff

logger = get_logger(__name__)


def diff_blocks(circuit: AbstractBlock) -> List[Diff]:
    """
    All :class:`Diff` nodes of a tree in post-order.

    This is the one traversal behind both :func:`parameters_of_diff` and
    :func:`dispatch_to_diff`, which keeps their orders identical.
    """
    return [blk for blk in iter_postorder(circuit) if blk.kind is BlockKind.TAG]


def parameters_of_diff(circuit: AbstractBlock) -> List[float]:
    """Current parameters of every marked node, concatenated in post-order."""
    out: List[float] = []
    for blk in diff_blocks(circuit):
        out.extend(blk.parameters())
    return out


def dispatch_to_diff(
    circuit: AbstractBlock,
    params: Iterable[float],
    op: Combinator = None,
) -> None:
    """
    Write ``params`` into the marked nodes of ``circuit``.

    Values are consumed in the order of :func:`parameters_of_diff`, one slice
    of ``nparameters`` values per node.

    Args:
        circuit: Root of a marked tree.
        params: Flat sequence of values (a list, tuple or 1-D tensor).
        op: Dispatch combinator; None or "replace" overwrites, "add" and
            "subtract" update in place, a callable gets ``(old, new)``.

    Raises:
        ValueError: If the number of values does not match; no node is
            modified in that case.
    """
    nodes = diff_blocks(circuit)
    values = [float(v) for v in params]
    expected = sum(blk.nparameters for blk in nodes)
    if len(values) != expected:
        raise ValueError(
            f"circuit has {expected} differentiable parameter(s), got {len(values)} value(s)"
        )

    offset = 0
    for blk in nodes:
        count = blk.nparameters
        blk.dispatch(values[offset:offset + count], op)
        offset += count
    logger.debug("dispatch_to_diff: wrote %d value(s) into %d node(s)", offset, len(nodes))
