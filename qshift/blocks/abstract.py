"""Base class and variant tags for circuit blocks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import torch

from .dispatch import Combinator, combine


class BlockKind(Enum):
    """
    Closed set of block variants.

    Passes over a block tree branch on ``block.kind`` rather than on the
    Python class, so adding a variant means extending this enum.
    """

    PRIMITIVE = "primitive"
    ROTATION = "rotation"
    SHIFT = "shift"
    CONTROL = "control"
    COMPOSITE = "composite"
    TAG = "tag"


class AbstractBlock(ABC):
    """
    A node of a circuit tree acting on a register of ``n_qubits`` qubits.

    Blocks are structurally immutable: a tree rewrite builds new parents via
    :meth:`chsubblocks`. Only scalar parameters change in place, through
    :meth:`dispatch`.
    """

    kind: BlockKind = BlockKind.COMPOSITE

    def __init__(self, n_qubits: int) -> None:
        if n_qubits < 1:
            raise ValueError(f"n_qubits must be >= 1, got {n_qubits}")
        self._n_qubits = int(n_qubits)

    @property
    def n_qubits(self) -> int:
        """Size of the register this block acts on."""
        return self._n_qubits

    # -- tree structure -----------------------------------------------------

    def subblocks(self) -> Tuple["AbstractBlock", ...]:
        """Return the direct children of this block (empty for leaves)."""
        return ()

    def chsubblocks(self, blocks: Sequence["AbstractBlock"]) -> "AbstractBlock":
        """Return a block of the same shape with ``blocks`` as its children."""
        if len(blocks) != 0:
            raise ValueError(f"{type(self).__name__} has no subblocks to replace")
        return self

    # -- simulation ---------------------------------------------------------

    @abstractmethod
    def apply(self, state: torch.Tensor) -> torch.Tensor:
        """Return the state obtained by applying this block to ``state``."""

    @abstractmethod
    def adjoint(self) -> "AbstractBlock":
        """Return a new block implementing the Hermitian adjoint."""

    def mat(
        self,
        dtype: torch.dtype = torch.complex64,
        device: Optional[torch.device] = None,
    ) -> torch.Tensor:
        """
        Full ``2**n x 2**n`` matrix of this block.

        Built by applying the block to every basis state at once, so it
        costs one batched simulation.
        """
        dim = 2**self._n_qubits
        basis = torch.eye(dim, dtype=dtype, device=device)
        return self.apply(basis).transpose(0, 1)

    # -- parameters ---------------------------------------------------------

    def parameters(self) -> Tuple[float, ...]:
        """Current scalar parameters, children first to last."""
        return tuple(p for child in self.subblocks() for p in child.parameters())

    @property
    def nparameters(self) -> int:
        return len(self.parameters())

    def dispatch(self, values: Sequence[float], op: Combinator = None) -> None:
        """
        Write ``values`` into this block's parameters.

        Each parameter becomes ``op(old, new)``; ``op`` is ``None``/"replace",
        "add", "subtract" or a binary callable.

        Raises:
            ValueError: If ``len(values)`` differs from :attr:`nparameters`.
        """
        values = tuple(values)
        if len(values) != self.nparameters:
            raise ValueError(
                f"{type(self).__name__} expects {self.nparameters} parameter(s), "
                f"got {len(values)}"
            )
        offset = 0
        for child in self.subblocks():
            count = child.nparameters
            if count:
                child.dispatch(values[offset:offset + count], op)
                offset += count

    def mat_back(
        self,
        dtype: torch.dtype,
        adjm: torch.Tensor,
        collector: List[float],
    ) -> None:
        """
        Back-propagation hook.

        ``adjm`` is the gradient of a real loss with respect to this block's
        full matrix (PyTorch's complex convention). Implementations append the
        gradient of each own parameter to ``collector``. Composite blocks leave
        this to the surrounding AD system.
        """
        if self.nparameters == 0:
            return
        raise NotImplementedError(
            f"{type(self).__name__} does not implement mat_back"
        )

    # -- rendering ----------------------------------------------------------

    @abstractmethod
    def label(self) -> str:
        """One-line description used when rendering trees."""

    def render_lines(self, depth: int = 0, annotation: str = "") -> List[str]:
        lines = ["  " * depth + annotation + self.label()]
        for child in self.subblocks():
            lines.extend(child.render_lines(depth + 1))
        return lines

    def print_tree(self) -> str:
        """Multi-line rendering of the tree rooted here."""
        return "\n".join(self.render_lines())

    def __str__(self) -> str:
        return self.print_tree()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label()}>"


def combine_values(
    old: Sequence[float], new: Sequence[float], op: Combinator
) -> Tuple[float, ...]:
    """Combine current and incoming parameter values element-wise."""
    fn: Callable[[float, float], float] = combine(op)
    return tuple(float(fn(o, n)) for o, n in zip(old, new))
