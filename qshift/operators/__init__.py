"""Observables and expectation values."""

from .expectation import ObservableLike, as_observable, expect
from .pauli import PauliSum, PauliTerm

__all__ = ["PauliTerm", "PauliSum", "ObservableLike", "as_observable", "expect"]
