"""Checks on states and operators."""

from __future__ import annotations

import torch


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """
    Compute the L2 norm of a statevector along its last dimension.

    Parameters
    ----------
    state:
        Complex tensor with shape (..., dim).

    Returns
    -------
    torch.Tensor
        Real tensor with shape (...).

    Raises
    ------
    ValueError
        If state is a 0-d tensor.
    """
    if state.dim() < 1:
        raise ValueError("state_norm expects a tensor with at least 1 dimension.")

    norm_sq = (state.conj() * state).sum(dim=-1).real
    return torch.sqrt(norm_sq)


def assert_normalized(state: torch.Tensor, atol: float = 1e-5) -> None:
    """
    Raise if a statevector does not have unit norm.

    Raises
    ------
    ValueError
        If any norm is non-finite or differs from 1 by more than atol.
    """
    norms = state_norm(state)
    if not torch.all(torch.isfinite(norms)):
        raise ValueError("State norm contains non-finite values.")

    if not torch.allclose(norms, torch.ones_like(norms), atol=atol, rtol=0.0):
        raise ValueError(
            f"State is not normalized within tolerance {atol}. "
            f"Norms found: {norms.detach().cpu().tolist()}"
        )


def is_hermitian(mat: torch.Tensor, atol: float = 1e-6) -> bool:
    """Return True if ``mat`` (shape (..., n, n)) equals its conjugate transpose."""
    if mat.dim() < 2 or mat.shape[-1] != mat.shape[-2]:
        return False

    max_dev = (mat - mat.conj().transpose(-2, -1)).abs().max()
    if not torch.isfinite(max_dev):
        return False

    return bool(max_dev <= atol)


def assert_hermitian(mat: torch.Tensor, atol: float = 1e-6) -> None:
    """
    Raise if ``mat`` is not Hermitian.

    Raises
    ------
    ValueError
        If the matrix is not Hermitian within the tolerance.
    """
    if not is_hermitian(mat, atol=atol):
        raise ValueError(f"Matrix is not Hermitian within tolerance {atol}.")
