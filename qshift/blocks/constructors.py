"""Shorthand constructors for common blocks."""

from __future__ import annotations

from typing import Sequence, Union

from .abstract import AbstractBlock
from .composite import AddBlock, ChainBlock, ControlBlock, ScaleBlock
from .primitive import PrimitiveGate, RotationGate, ShiftGate

Qubits = Union[int, Sequence[int]]


def _as_tuple(qubits: Qubits) -> tuple:
    if isinstance(qubits, int):
        return (qubits,)
    return tuple(qubits)


def put(n_qubits: int, qubits: Qubits, name: str) -> PrimitiveGate:
    """Place a named fixed gate, e.g. ``put(3, 0, "H")`` or ``put(3, (0, 2), "SWAP")``."""
    return PrimitiveGate(n_qubits, name, _as_tuple(qubits))


def rx(n_qubits: int, qubit: int, theta: float = 0.0) -> RotationGate:
    return RotationGate(n_qubits, "X", qubit, theta)


def ry(n_qubits: int, qubit: int, theta: float = 0.0) -> RotationGate:
    return RotationGate(n_qubits, "Y", qubit, theta)


def rz(n_qubits: int, qubit: int, theta: float = 0.0) -> RotationGate:
    return RotationGate(n_qubits, "Z", qubit, theta)


def shift(n_qubits: int, qubit: int, theta: float = 0.0) -> ShiftGate:
    return ShiftGate(n_qubits, qubit, theta)


def control(
    n_qubits: int,
    ctrl_qubits: Qubits,
    content: AbstractBlock,
    ctrl_config: Sequence[int] | None = None,
) -> ControlBlock:
    return ControlBlock(n_qubits, _as_tuple(ctrl_qubits), content, ctrl_config)


def cnot(n_qubits: int, ctrl: int, target: int) -> ControlBlock:
    return ControlBlock(n_qubits, (ctrl,), PrimitiveGate(n_qubits, "X", (target,)))


def cphase(n_qubits: int, ctrl: Qubits, target: int, theta: float = 0.0) -> ControlBlock:
    """Controlled phase shift: a control block whose content is a :class:`ShiftGate`."""
    return ControlBlock(n_qubits, _as_tuple(ctrl), ShiftGate(n_qubits, target, theta))


def chain(*blocks: AbstractBlock) -> ChainBlock:
    """
    Sequential composition.

    Raises:
        ValueError: If called without blocks.
    """
    if not blocks:
        raise ValueError("chain() needs at least one block; use ChainBlock(n, []) for an empty chain.")
    return ChainBlock(blocks[0].n_qubits, blocks)


def add(*blocks: AbstractBlock) -> AddBlock:
    """Sum of blocks, e.g. a Hamiltonian built from Pauli strings."""
    if not blocks:
        raise ValueError("add() needs at least one block.")
    return AddBlock(blocks[0].n_qubits, blocks)


def scale(factor: complex, block: AbstractBlock) -> ScaleBlock:
    return ScaleBlock(factor, block)
