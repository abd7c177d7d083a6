"""The differentiable marker block."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import torch

from ..blocks import AbstractBlock, BlockKind, iter_preorder
from ..blocks.dispatch import Combinator

DIFF_ANNOTATION = "[∂] "


def is_controlled_phase(block: AbstractBlock) -> bool:
    """True for a control block whose controlled content is a phase shift."""
    return block.kind is BlockKind.CONTROL and block.subblocks()[0].kind is BlockKind.SHIFT


class Diff(AbstractBlock):
    """
    Mark a block as a target of parameter-shift differentiation.

    The marker is transparent: application, matrices, adjoints, parameters
    and the back-propagation hook all go to the wrapped content. It holds
    no parameters of its own.

    Args:
        block: The content. Must not be or contain a marker, and must not be
            a plain control block (controlled phase gates are allowed).

    Raises:
        TypeError: For content holding a marker or for a plain control block.
    """

    kind = BlockKind.TAG

    def __init__(self, block: AbstractBlock) -> None:
        if any(node.kind is BlockKind.TAG for node in iter_preorder(block)):
            raise TypeError("Diff markers cannot be stacked; unwrap the block first.")
        if block.kind is BlockKind.CONTROL and not is_controlled_phase(block):
            raise TypeError(
                "Only controlled phase gates can be marked among control blocks."
            )
        super().__init__(block.n_qubits)
        self._block = block

    @property
    def content(self) -> AbstractBlock:
        return self._block

    def unwrap(self) -> AbstractBlock:
        """Return the wrapped block."""
        return self._block

    def rewrap(self, block: AbstractBlock) -> "Diff":
        """Return a new marker around a replacement content."""
        return Diff(block)

    def subblocks(self) -> Tuple[AbstractBlock, ...]:
        return (self._block,)

    def chsubblocks(self, blocks: Sequence[AbstractBlock]) -> "Diff":
        (block,) = blocks
        return self.rewrap(block)

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        return self._block.apply(state)

    def mat(
        self,
        dtype: torch.dtype = torch.complex64,
        device: Optional[torch.device] = None,
    ) -> torch.Tensor:
        return self._block.mat(dtype=dtype, device=device)

    def adjoint(self) -> "Diff":
        return self.rewrap(self._block.adjoint())

    def parameters(self) -> Tuple[float, ...]:
        return self._block.parameters()

    @property
    def nparameters(self) -> int:
        return self._block.nparameters

    def dispatch(self, values: Sequence[float], op: Combinator = None) -> None:
        self._block.dispatch(values, op)

    def mat_back(self, dtype: torch.dtype, adjm: torch.Tensor, collector: List[float]) -> None:
        self._block.mat_back(dtype, adjm, collector)

    def label(self) -> str:
        return DIFF_ANNOTATION + self._block.label()

    def render_lines(self, depth: int = 0, annotation: str = "") -> List[str]:
        return self._block.render_lines(depth, annotation + DIFF_ANNOTATION)
