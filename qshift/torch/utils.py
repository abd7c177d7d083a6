"""Utility functions for PyTorch integration with qshift."""

from __future__ import annotations

from typing import Any

import torch


def validate_params_shape(params: torch.Tensor, expected_len: int) -> None:
    """
    Validate that a parameter tensor has the expected shape.

    Parameters
    ----------
    params:
        Parameter tensor to validate.
    expected_len:
        Expected length of the 1D parameter vector.

    Raises
    ------
    ValueError
        If params is not 1D or has incorrect length.
    """
    if params.ndim != 1:
        raise ValueError(f"params must be 1D, got shape {tuple(params.shape)}")
    if params.shape[0] != expected_len:
        raise ValueError(
            f"params length {params.shape[0]} does not match expected length {expected_len}"
        )


def as_cpu_float64(values: Any) -> torch.Tensor:
    """Detached float64 CPU copy of a parameter vector (tensor or sequence)."""
    if isinstance(values, torch.Tensor):
        return values.detach().cpu().to(dtype=torch.float64).clone()
    return torch.tensor(list(values), dtype=torch.float64)


__all__ = ["validate_params_shape", "as_cpu_float64"]
