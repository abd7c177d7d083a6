"""Drawing measurement outcomes from probability vectors."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import torch


def sample_outcomes(
    probs: torch.Tensor,
    n_shots: int,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Sample computational-basis outcome indices.

    Parameters
    ----------
    probs:
        Tensor of shape (..., dim) with non-negative entries, typically from
        :func:`qshift.backend.measure_probs`. Rows are normalised before
        sampling to absorb float drift.
    n_shots:
        Number of draws per batch element.
    generator:
        Optional torch.Generator for reproducibility.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (..., n_shots) with values in [0, dim).

    Raises
    ------
    ValueError
        If n_shots is not positive or a row has zero total mass.
    """
    if probs.dim() < 1:
        raise ValueError("probs must have at least one dimension.")
    if n_shots <= 0:
        raise ValueError("n_shots must be a positive integer.")

    dim = probs.shape[-1]
    rows = probs.reshape(-1, dim).to(torch.float64)
    sums = rows.sum(dim=-1, keepdim=True)
    if not torch.all(sums > 0):
        raise ValueError("Probability distribution has zero total mass.")

    indices = torch.multinomial(
        rows / sums,
        num_samples=n_shots,
        replacement=True,
        generator=generator,
    )
    return indices.reshape(probs.shape[:-1] + (n_shots,))


def outcomes_to_bits(
    indices: torch.Tensor,
    n_qubits: int,
    qubits: Optional[Sequence[int]] = None,
) -> torch.Tensor:
    """
    Expand outcome indices into bits, qubit 0 being the least significant.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (..., len(qubits)).
    """
    if qubits is None:
        qubits_tuple: Tuple[int, ...] = tuple(range(n_qubits))
    else:
        qubits_tuple = tuple(int(q) for q in qubits)
    if not qubits_tuple:
        raise ValueError("qubits must be non-empty if provided.")
    for q in qubits_tuple:
        if q < 0 or q >= n_qubits:
            raise ValueError(
                f"Requested qubit index {q} is out of bounds for n_qubits={n_qubits}."
            )

    indices = indices.to(torch.int64)
    shifts = torch.tensor(qubits_tuple, dtype=torch.int64, device=indices.device)
    return (indices.unsqueeze(-1) >> shifts) & 1
