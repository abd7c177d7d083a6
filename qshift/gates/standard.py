"""Standard gate matrices.

All functions return complex tensors. ``dtype`` defaults to
``torch.complex64`` and ``device`` to the CPU.
"""

from __future__ import annotations

import cmath
import math
from typing import Callable, Dict, Tuple

import torch


def _defaults(
    dtype: torch.dtype | None, device: torch.device | None
) -> Tuple[torch.dtype, torch.device]:
    if dtype is None:
        dtype = torch.complex64
    if device is None:
        device = torch.device("cpu")
    return dtype, device


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Single-qubit identity."""
    dtype, device = _defaults(dtype, device)
    return torch.eye(2, dtype=dtype, device=device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X (bit flip)."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[0.0, 1.0], [1.0, 0.0]], dtype=dtype, device=device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Y."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[0.0, -1.0j], [1.0j, 0.0]], dtype=dtype, device=device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z (phase flip)."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[1.0, 0.0], [0.0, -1.0]], dtype=dtype, device=device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard."""
    dtype, device = _defaults(dtype, device)
    s = 1.0 / math.sqrt(2.0)
    return torch.tensor([[s, s], [s, -s]], dtype=dtype, device=device)


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S gate, the square root of Z."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[1.0, 0.0], [0.0, 1.0j]], dtype=dtype, device=device)


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T gate, the square root of S."""
    dtype, device = _defaults(dtype, device)
    phase = cmath.exp(1.0j * math.pi / 4.0)
    return torch.tensor([[1.0, 0.0], [0.0, phase]], dtype=dtype, device=device)


def SWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Two-qubit SWAP."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=dtype,
        device=device,
    )


def RX(theta: float, dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    Rotation about X: RX(θ) = exp(-iθX/2).

        [[cos(θ/2), -i sin(θ/2)],
         [-i sin(θ/2), cos(θ/2)]]
    """
    dtype, device = _defaults(dtype, device)
    c = math.cos(float(theta) / 2.0)
    s = math.sin(float(theta) / 2.0)
    return torch.tensor([[c, -1.0j * s], [-1.0j * s, c]], dtype=dtype, device=device)


def RY(theta: float, dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    Rotation about Y: RY(θ) = exp(-iθY/2).

        [[cos(θ/2), -sin(θ/2)],
         [sin(θ/2), cos(θ/2)]]
    """
    dtype, device = _defaults(dtype, device)
    c = math.cos(float(theta) / 2.0)
    s = math.sin(float(theta) / 2.0)
    return torch.tensor([[c, -s], [s, c]], dtype=dtype, device=device)


def RZ(theta: float, dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Rotation about Z: RZ(θ) = diag(exp(-iθ/2), exp(iθ/2))."""
    dtype, device = _defaults(dtype, device)
    half = float(theta) / 2.0
    return torch.tensor(
        [[cmath.exp(-1.0j * half), 0.0], [0.0, cmath.exp(1.0j * half)]],
        dtype=dtype,
        device=device,
    )


def P(theta: float, dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Phase shift: P(θ) = diag(1, exp(iθ))."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor(
        [[1.0, 0.0], [0.0, cmath.exp(1.0j * float(theta))]],
        dtype=dtype,
        device=device,
    )


PAULI_AXES = ("X", "Y", "Z")

_ROTATIONS: Dict[str, Callable[..., torch.Tensor]] = {"X": RX, "Y": RY, "Z": RZ}

_FIXED: Dict[str, Tuple[Callable[..., torch.Tensor], int]] = {
    "I": (I, 1),
    "X": (X, 1),
    "Y": (Y, 1),
    "Z": (Z, 1),
    "H": (H, 1),
    "S": (S, 1),
    "T": (T, 1),
    "SWAP": (SWAP, 2),
}


def fixed_gate(
    name: str, dtype: torch.dtype | None = None, device: torch.device | None = None
) -> torch.Tensor:
    """
    Look up a parameter-free gate by name.

    Raises:
        ValueError: If the name is unknown.
    """
    key = name.upper()
    if key not in _FIXED:
        raise ValueError(
            f"Unsupported gate name {name!r}. Supported gates: {sorted(_FIXED)}."
        )
    return _FIXED[key][0](dtype=dtype, device=device)


def fixed_gate_width(name: str) -> int:
    """Number of qubits a named parameter-free gate acts on."""
    key = name.upper()
    if key not in _FIXED:
        raise ValueError(
            f"Unsupported gate name {name!r}. Supported gates: {sorted(_FIXED)}."
        )
    return _FIXED[key][1]


def rotation(
    axis: str,
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation exp(-iθP/2) about the Pauli axis "X", "Y" or "Z".

    Raises:
        ValueError: If axis is not a Pauli axis.
    """
    key = axis.upper()
    if key not in _ROTATIONS:
        raise ValueError(f"Rotation axis must be one of {PAULI_AXES}, got {axis!r}.")
    return _ROTATIONS[key](theta, dtype=dtype, device=device)


def is_unitary(matrix: torch.Tensor, atol: float = 1e-6) -> bool:
    """
    Check U†U = I within ``atol``.

    Args:
        matrix: Tensor of shape (..., n, n).
    """
    if matrix.shape[-1] != matrix.shape[-2]:
        return False

    product = torch.matmul(matrix.conj().transpose(-1, -2), matrix)
    identity = torch.eye(matrix.shape[-1], dtype=matrix.dtype, device=matrix.device)
    if product.ndim > 2:
        identity = identity.expand(product.shape)

    return bool(torch.all(torch.abs(product - identity) < atol).item())
