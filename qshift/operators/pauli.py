"""Pauli strings and sums, compiled to observable blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from ..blocks import AbstractBlock, AddBlock, ChainBlock, PrimitiveGate, ScaleBlock

_VALID_PAULI_LABELS = {"I", "X", "Y", "Z"}


@dataclass(frozen=True)
class PauliTerm:
    """
    A coefficient times a tensor product of Pauli operators.

    ``paulis[i]`` acts on qubit ``i``.

    Args:
        coeff: Real coefficient.
        paulis: One label from {"I", "X", "Y", "Z"} per qubit.

    Example:
        >>> PauliTerm(0.5, ("Z", "Z")).to_block()  # 0.5 * Z0 Z1
    """

    coeff: float
    paulis: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "coeff", float(self.coeff))
        object.__setattr__(self, "paulis", tuple(p.upper() for p in self.paulis))

        if len(self.paulis) < 1:
            raise ValueError(f"paulis must have length >= 1, got {len(self.paulis)}")
        invalid = [p for p in self.paulis if p not in _VALID_PAULI_LABELS]
        if invalid:
            raise ValueError(
                f"Invalid Pauli labels: {invalid}. All labels must be in {_VALID_PAULI_LABELS}"
            )

    def n_qubits(self) -> int:
        return len(self.paulis)

    def is_identity(self) -> bool:
        return all(p == "I" for p in self.paulis)

    def to_block(self) -> AbstractBlock:
        """Observable block ``coeff * P_0 P_1 ...``."""
        n = self.n_qubits()
        gates = [
            PrimitiveGate(n, label, (q,))
            for q, label in enumerate(self.paulis)
            if label != "I"
        ]
        if not gates:
            gates = [PrimitiveGate(n, "I", (0,))]
        body = gates[0] if len(gates) == 1 else ChainBlock(n, gates)
        return ScaleBlock(self.coeff, body)


@dataclass
class PauliSum:
    """
    A sum of :class:`PauliTerm` objects acting on the same number of qubits.

    Example:
        >>> h = PauliSum.from_terms([PauliTerm(1.0, ("Z",)), PauliTerm(0.5, ("X",))])
        >>> h.n_qubits()
        1
    """

    terms: List[PauliTerm] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.terms:
            n_qubits = self.terms[0].n_qubits()
            for i, term in enumerate(self.terms):
                if term.n_qubits() != n_qubits:
                    raise ValueError(
                        f"All terms must have the same n_qubits. "
                        f"Term 0 has {n_qubits} qubits, but term {i} has {term.n_qubits()} qubits."
                    )

    @classmethod
    def from_terms(cls, terms: Iterable[PauliTerm]) -> "PauliSum":
        return cls(terms=list(terms))

    def n_qubits(self) -> int:
        """Number of qubits, or 0 for an empty sum."""
        return self.terms[0].n_qubits() if self.terms else 0

    def __len__(self) -> int:
        return len(self.terms)

    def to_block(self) -> AbstractBlock:
        """
        Observable block for the whole sum.

        Raises:
            ValueError: If the sum has no terms.
        """
        if not self.terms:
            raise ValueError("Cannot build an observable from an empty PauliSum.")
        return AddBlock(self.n_qubits(), [term.to_block() for term in self.terms])
