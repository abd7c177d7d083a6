"""Leaf gate blocks."""

from __future__ import annotations

import cmath
from typing import List, Optional, Sequence, Tuple

import torch

from ..backend.statevector import apply_matrix
from ..gates import standard as stdgates
from .abstract import AbstractBlock, BlockKind, combine_values
from .dispatch import Combinator


def embed(
    local: torch.Tensor,
    qubits: Sequence[int],
    n_qubits: int,
    dtype: torch.dtype,
    device: Optional[torch.device] = None,
) -> torch.Tensor:
    """Lift a local (possibly non-unitary) matrix to the full register."""
    basis = torch.eye(2**n_qubits, dtype=dtype, device=device)
    return apply_matrix(basis, local.to(dtype), qubits, n_qubits, check_norm=False).transpose(0, 1)


class GateBlock(AbstractBlock):
    """A leaf applying a fixed-size local matrix to a set of qubits."""

    def __init__(self, n_qubits: int, qubits: Sequence[int]) -> None:
        super().__init__(n_qubits)
        q_tuple = tuple(int(q) for q in qubits)
        if not q_tuple:
            raise ValueError("A gate must act on at least one qubit.")
        for q in q_tuple:
            if q < 0 or q >= n_qubits:
                raise ValueError(
                    f"Qubit index {q} is out of range for this block (n_qubits={n_qubits})."
                )
        if len(set(q_tuple)) != len(q_tuple):
            raise ValueError(f"Gate qubits must be distinct, got {q_tuple}")
        self._qubits = q_tuple

    @property
    def qubits(self) -> Tuple[int, ...]:
        return self._qubits

    def local_matrix(
        self,
        dtype: torch.dtype = torch.complex64,
        device: Optional[torch.device] = None,
    ) -> torch.Tensor:
        raise NotImplementedError

    def apply(self, state: torch.Tensor) -> torch.Tensor:
        gate = self.local_matrix(dtype=state.dtype, device=state.device)
        return apply_matrix(state, gate, self._qubits, self.n_qubits)


class PrimitiveGate(GateBlock):
    """
    A parameter-free named gate (I, X, Y, Z, H, S, T on one qubit, SWAP on two).

    ``dagger=True`` stores the adjoint, e.g. S† and T†.
    """

    kind = BlockKind.PRIMITIVE

    def __init__(
        self,
        n_qubits: int,
        name: str,
        qubits: Sequence[int],
        dagger: bool = False,
    ) -> None:
        super().__init__(n_qubits, qubits)
        width = stdgates.fixed_gate_width(name)
        if len(self.qubits) != width:
            raise ValueError(
                f"Gate {name.upper()} acts on {width} qubit(s), got qubits {self.qubits}"
            )
        self._name = name.upper()
        self._dagger = bool(dagger)

    @property
    def name(self) -> str:
        return self._name

    def local_matrix(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        gate = stdgates.fixed_gate(self._name, dtype=dtype, device=device)
        if self._dagger:
            gate = gate.conj().transpose(0, 1)
        return gate

    def adjoint(self) -> "PrimitiveGate":
        # Every supported gate except S and T is Hermitian.
        if self._name in ("S", "T"):
            return PrimitiveGate(self.n_qubits, self._name, self.qubits, not self._dagger)
        return PrimitiveGate(self.n_qubits, self._name, self.qubits, self._dagger)

    def label(self) -> str:
        suffix = "†" if self._dagger else ""
        return f"{self._name}{suffix} @ {self.qubits}"


class ParametricGate(GateBlock):
    """A single-qubit leaf with one real parameter ``theta``."""

    def __init__(self, n_qubits: int, qubit: int, theta: float) -> None:
        super().__init__(n_qubits, (qubit,))
        self._theta = float(theta)

    @property
    def qubit(self) -> int:
        return self.qubits[0]

    @property
    def theta(self) -> float:
        return self._theta

    def parameters(self) -> Tuple[float, ...]:
        return (self._theta,)

    @property
    def nparameters(self) -> int:
        return 1

    def dispatch(self, values: Sequence[float], op: Combinator = None) -> None:
        values = tuple(values)
        if len(values) != 1:
            raise ValueError(
                f"{type(self).__name__} expects 1 parameter, got {len(values)}"
            )
        (self._theta,) = combine_values((self._theta,), values, op)

    def local_derivative(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        """Derivative of :meth:`local_matrix` with respect to ``theta``."""
        raise NotImplementedError

    def mat_back(self, dtype: torch.dtype, adjm: torch.Tensor, collector: List[float]) -> None:
        dmat = embed(
            self.local_derivative(dtype=dtype, device=adjm.device),
            self.qubits,
            self.n_qubits,
            dtype,
            adjm.device,
        )
        collector.append(float((adjm.conj() * dmat).sum().real.item()))


class RotationGate(ParametricGate):
    """Rotation exp(-iθP/2) about the Pauli axis P on one qubit."""

    kind = BlockKind.ROTATION

    def __init__(self, n_qubits: int, axis: str, qubit: int, theta: float = 0.0) -> None:
        if axis.upper() not in stdgates.PAULI_AXES:
            raise ValueError(
                f"Rotation axis must be one of {stdgates.PAULI_AXES}, got {axis!r}."
            )
        super().__init__(n_qubits, qubit, theta)
        self._axis = axis.upper()

    @property
    def axis(self) -> str:
        return self._axis

    def local_matrix(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        return stdgates.rotation(self._axis, self._theta, dtype=dtype, device=device)

    def local_derivative(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        pauli = stdgates.fixed_gate(self._axis, dtype=dtype, device=device)
        return -0.5j * (pauli @ self.local_matrix(dtype=dtype, device=device))

    def adjoint(self) -> "RotationGate":
        return RotationGate(self.n_qubits, self._axis, self.qubit, -self._theta)

    def label(self) -> str:
        return f"R{self._axis}({self._theta:.6g}) @ {self.qubit}"


class ShiftGate(ParametricGate):
    """Phase shift diag(1, exp(iθ)) on one qubit."""

    kind = BlockKind.SHIFT

    def __init__(self, n_qubits: int, qubit: int, theta: float = 0.0) -> None:
        super().__init__(n_qubits, qubit, theta)

    def local_matrix(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        return stdgates.P(self._theta, dtype=dtype, device=device)

    def local_derivative(self, dtype=torch.complex64, device=None) -> torch.Tensor:
        phase = 1.0j * cmath.exp(1.0j * self._theta)
        return torch.tensor([[0.0, 0.0], [0.0, phase]], dtype=dtype, device=device)

    def adjoint(self) -> "ShiftGate":
        return ShiftGate(self.n_qubits, self.qubit, -self._theta)

    def label(self) -> str:
        return f"shift({self._theta:.6g}) @ {self.qubit}"
