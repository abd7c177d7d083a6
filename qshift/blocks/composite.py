"""Blocks built from other blocks."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import torch

from ..backend.statevector import apply_controlled
from .abstract import AbstractBlock, BlockKind
from .primitive import GateBlock, ParametricGate

_GATE_KINDS = (BlockKind.PRIMITIVE, BlockKind.ROTATION, BlockKind.SHIFT)


def _check_width(n_qubits: int, blocks: Sequence[AbstractBlock]) -> None:
    for blk in blocks:
        if blk.n_qubits != n_qubits:
            raise ValueError(
                f"Subblock {blk!r} acts on {blk.n_qubits} qubits, expected {n_qubits}"
            )


class ControlBlock(AbstractBlock):
    """
    Apply a single gate when the control qubits match ``ctrl_config``.

    ``ctrl_config`` holds one 0/1 entry per control qubit and defaults to all
    ones. The controlled content must be a leaf gate.
    """

    kind = BlockKind.CONTROL

    def __init__(
        self,
        n_qubits: int,
        ctrl_qubits: Sequence[int],
        content: AbstractBlock,
        ctrl_config: Optional[Sequence[int]] = None,
    ) -> None:
        super().__init__(n_qubits)
        if content.kind not in _GATE_KINDS:
            raise TypeError(
                f"ControlBlock content must be a gate, got {content.kind.value} block"
            )
        _check_width(n_qubits, (content,))

        ctrls = tuple(int(q) for q in ctrl_qubits)
        if not ctrls:
            raise ValueError("ControlBlock needs at least one control qubit.")
        for q in ctrls:
            if q < 0 or q >= n_qubits:
                raise ValueError(
                    f"Control qubit {q} is out of range (n_qubits={n_qubits})."
                )
        if set(ctrls) & set(content.qubits):
            raise ValueError(
                f"control qubits {ctrls} overlap target qubits {content.qubits}"
            )
        config = (1,) * len(ctrls) if ctrl_config is None else tuple(int(c) for c in ctrl_config)
        if len(config) != len(ctrls) or any(c not in (0, 1) for c in config):
            raise ValueError(
                f"ctrl_config must hold one 0/1 entry per control qubit, got {config}"
            )

        self._ctrl_qubits = ctrls
        self._ctrl_config = config
        self._content: GateBlock = content

    @property
    def ctrl_qubits(self) -> Tuple[int, ...]:
        return self._ctrl_qubits

    @property
    def ctrl_config(self) -> Tuple[int, ...]:
        return self._ctrl_config

    @property
    def content(self) -> AbstractBlock:
        return self._content

    @property
    def qubits(self) -> Tuple[int, ...]:
        """Target qubits of the controlled gate."""
        return self._content.qubits

    def subblocks(self) -> Tuple[AbstractBlock, ...]:
        return (self._content,)

    def chsubblocks(self, blocks: Sequence[AbstractBlock]) -> "ControlBlock":
        (content,) = blocks
        return ControlBlock(self.n_qubits, self._ctrl_qubits, content, self._ctrl_config)

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        gate = self._content.local_matrix(dtype=state.dtype, device=state.device)
        return apply_controlled(
            state, gate, self._ctrl_qubits, self._ctrl_config, self.qubits, self.n_qubits
        )

    def adjoint(self) -> "ControlBlock":
        return self.chsubblocks((self._content.adjoint(),))

    def mat_back(self, dtype: torch.dtype, adjm: torch.Tensor, collector: List[float]) -> None:
        if not isinstance(self._content, ParametricGate):
            super().mat_back(dtype, adjm, collector)
            return
        dim = 2**self.n_qubits
        basis = torch.eye(dim, dtype=dtype, device=adjm.device)
        dlocal = self._content.local_derivative(dtype=dtype, device=adjm.device)
        args = (self._ctrl_qubits, self._ctrl_config, self.qubits, self.n_qubits)
        # Controlled(dU) minus Controlled(0) keeps dU on the active subspace only.
        active = apply_controlled(basis, dlocal, *args, check_norm=False)
        idle = apply_controlled(basis, torch.zeros_like(dlocal), *args, check_norm=False)
        dmat = (active - idle).transpose(0, 1)
        collector.append(float((adjm.conj() * dmat).sum().real.item()))

    def label(self) -> str:
        return f"control(ctrl={self._ctrl_qubits}, config={self._ctrl_config})"


class ChainBlock(AbstractBlock):
    """Apply subblocks one after another, first to last."""

    kind = BlockKind.COMPOSITE

    def __init__(self, n_qubits: int, blocks: Sequence[AbstractBlock]) -> None:
        super().__init__(n_qubits)
        self._blocks = tuple(blocks)
        _check_width(n_qubits, self._blocks)

    def subblocks(self) -> Tuple[AbstractBlock, ...]:
        return self._blocks

    def chsubblocks(self, blocks: Sequence[AbstractBlock]) -> "ChainBlock":
        return ChainBlock(self.n_qubits, blocks)

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        for blk in self._blocks:
            state = blk.apply(state)
        return state

    def adjoint(self) -> "ChainBlock":
        return ChainBlock(self.n_qubits, [blk.adjoint() for blk in reversed(self._blocks)])

    def __len__(self) -> int:
        return len(self._blocks)

    def __getitem__(self, index: int) -> AbstractBlock:
        return self._blocks[index]

    def label(self) -> str:
        return f"chain(n_qubits={self.n_qubits})"


class AddBlock(AbstractBlock):
    """Sum of terms. Not unitary in general; meant for observables."""

    kind = BlockKind.COMPOSITE

    def __init__(self, n_qubits: int, blocks: Sequence[AbstractBlock]) -> None:
        super().__init__(n_qubits)
        self._blocks = tuple(blocks)
        if not self._blocks:
            raise ValueError("AddBlock needs at least one term.")
        _check_width(n_qubits, self._blocks)

    def subblocks(self) -> Tuple[AbstractBlock, ...]:
        return self._blocks

    def chsubblocks(self, blocks: Sequence[AbstractBlock]) -> "AddBlock":
        return AddBlock(self.n_qubits, blocks)

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        total = self._blocks[0].apply(state)
        for blk in self._blocks[1:]:
            total = total + blk.apply(state)
        return total

    def adjoint(self) -> "AddBlock":
        return AddBlock(self.n_qubits, [blk.adjoint() for blk in self._blocks])

    def label(self) -> str:
        return f"add(n_qubits={self.n_qubits})"


class ScaleBlock(AbstractBlock):
    """A block multiplied by a constant factor."""

    kind = BlockKind.COMPOSITE

    def __init__(self, factor: complex, block: AbstractBlock) -> None:
        super().__init__(block.n_qubits)
        self._factor = factor
        self._block = block

    @property
    def factor(self) -> complex:
        return self._factor

    def subblocks(self) -> Tuple[AbstractBlock, ...]:
        return (self._block,)

    def chsubblocks(self, blocks: Sequence[AbstractBlock]) -> "ScaleBlock":
        (block,) = blocks
        return ScaleBlock(self._factor, block)

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        return self._factor * self._block.apply(state)

    def adjoint(self) -> "ScaleBlock":
        return ScaleBlock(complex(self._factor).conjugate(), self._block.adjoint())

    def label(self) -> str:
        return f"scale({self._factor})"
