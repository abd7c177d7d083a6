"""Expectation values of observables."""

from __future__ import annotations

from typing import Union

import torch

from ..blocks import AbstractBlock
from .pauli import PauliSum, PauliTerm

ObservableLike = Union[AbstractBlock, PauliTerm, PauliSum]


def as_observable(op: ObservableLike) -> AbstractBlock:
    """
    Return ``op`` as a block, compiling Pauli terms and sums.

    Raises:
        TypeError: For unsupported observable types.
    """
    if isinstance(op, AbstractBlock):
        return op
    if isinstance(op, (PauliTerm, PauliSum)):
        return op.to_block()
    raise TypeError(
        f"observable must be a block, PauliTerm or PauliSum, got {type(op)}"
    )


def expect(op: ObservableLike, state: torch.Tensor) -> torch.Tensor:
    """
    Compute ⟨ψ|O|ψ⟩.

    Args:
        op: Observable as a block (e.g. ``put(n, 0, "Z")``) or a Pauli term/sum.
        state: Statevector of shape (..., 2**n).

    Returns:
        Complex tensor with the batch shape of ``state``. Take ``.real`` for
        Hermitian observables.

    Raises:
        ValueError: If the observable and state sizes disagree.
    """
    obs = as_observable(op)
    if state.shape[-1] != 2**obs.n_qubits:
        raise ValueError(
            f"observable acts on {obs.n_qubits} qubits but state dimension is {state.shape[-1]}"
        )
    return (state.conj() * obs.apply(state)).sum(dim=-1)
