"""Gate matrices."""

from .standard import (
    PAULI_AXES,
    RX,
    RY,
    RZ,
    SWAP,
    H,
    I,
    P,
    S,
    T,
    X,
    Y,
    Z,
    fixed_gate,
    fixed_gate_width,
    is_unitary,
    rotation,
)

__all__ = [
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "T",
    "SWAP",
    "RX",
    "RY",
    "RZ",
    "P",
    "PAULI_AXES",
    "fixed_gate",
    "fixed_gate_width",
    "rotation",
    "is_unitary",
]
