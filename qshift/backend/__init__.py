"""Statevector simulation backend."""

from .statevector import (
    apply_controlled,
    apply_matrix,
    measure_probs,
    product_state,
    zero_state,
)

__all__ = [
    "zero_state",
    "product_state",
    "apply_matrix",
    "apply_controlled",
    "measure_probs",
]
