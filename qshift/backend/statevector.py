"""Statevector backend for pure states.

Convention: qubit 0 is the least significant bit of the computational basis
index. States have shape ``(*batch, 2**n_qubits)`` and a complex dtype.

A ``2**k x 2**k`` gate acting on ``qubits = (q_0, ..., q_{k-1})`` is indexed
with ``q_0`` as its most significant bit, so a CNOT matrix applied to
``(control, target)`` reads in the usual textbook order.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import torch

from ..core.device import Device, resolve_device
from ..diagnostics import assert_normalized, is_debug_enabled


def _resolve_n_qubits(state: torch.Tensor, n_qubits: int | None) -> int:
    dim = state.shape[-1]
    if n_qubits is None:
        n_qubits = int(round(math.log2(dim))) if dim > 0 else 0
        if n_qubits < 1 or 2**n_qubits != dim:
            raise ValueError(
                f"state dimension {dim} is not a power of 2. "
                "Please specify n_qubits explicitly."
            )
    elif 2**n_qubits != dim:
        raise ValueError(
            f"state dimension {dim} does not match 2**n_qubits = {2**n_qubits}"
        )
    return n_qubits


def _check_qubits(qubits: Sequence[int], n_qubits: int, what: str = "qubit") -> Tuple[int, ...]:
    q_tuple = tuple(int(q) for q in qubits)
    for q in q_tuple:
        if q < 0 or q >= n_qubits:
            raise ValueError(f"{what} index {q} out of range [0, {n_qubits})")
    if len(set(q_tuple)) != len(q_tuple):
        raise ValueError(f"{what} indices must be distinct, got {q_tuple}")
    return q_tuple


def _axis(qubit: int, n_qubits: int) -> int:
    # Axis of a qubit in a (batch, 2, ..., 2) view; axis 1 holds the MSB.
    return n_qubits - qubit


def _contract(tensor: torch.Tensor, matrix: torch.Tensor, axes: Sequence[int]) -> torch.Tensor:
    """Contract a 2**k x 2**k matrix into the given size-2 axes of ``tensor``."""
    k = len(axes)
    gate = matrix.reshape((2,) * (2 * k))
    out = torch.tensordot(gate, tensor, dims=(list(range(k, 2 * k)), list(axes)))
    return torch.movedim(out, list(range(k)), list(axes))


def zero_state(
    n_qubits: int,
    batch_shape: tuple[int, ...] | None = None,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the all-zero state |0...0⟩.

    Args:
        n_qubits: Number of qubits. Must be >= 1.
        batch_shape: Optional leading batch dimensions.
        device: Device specification, see :func:`qshift.core.resolve_device`.
        dtype: Complex dtype; defaults to the device's complex dtype.

    Returns:
        Complex tensor of shape (*batch_shape, 2**n_qubits).

    Raises:
        ValueError: If n_qubits < 1.
    """
    return product_state(n_qubits, 0, batch_shape=batch_shape, device=device, dtype=dtype)


def product_state(
    n_qubits: int,
    index: int,
    batch_shape: tuple[int, ...] | None = None,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the computational basis state with the given integer index.

    Raises:
        ValueError: If n_qubits < 1 or index is out of range.
    """
    if n_qubits < 1:
        raise ValueError(f"n_qubits must be >= 1, got {n_qubits}")
    dim = 2**n_qubits
    if index < 0 or index >= dim:
        raise ValueError(f"basis index {index} out of range [0, {dim})")

    qdevice = resolve_device(device)
    if dtype is None:
        dtype = qdevice.complex_dtype
    if batch_shape is None:
        batch_shape = ()

    state = torch.zeros((*batch_shape, dim), dtype=dtype, device=qdevice.as_torch_device())
    state[..., index] = 1.0 + 0.0j
    return state


def apply_matrix(
    state: torch.Tensor,
    matrix: torch.Tensor,
    qubits: Sequence[int],
    n_qubits: int | None = None,
    check_norm: bool = True,
) -> torch.Tensor:
    """
    Apply a k-qubit matrix to the given qubits.

    Args:
        state: Tensor of shape (..., 2**n_qubits) with complex dtype.
        matrix: Tensor of shape (2**k, 2**k).
        qubits: Target qubits, ``qubits[0]`` being the matrix's MSB.
        n_qubits: Inferred from the state when None.
        check_norm: In debug mode, assert the result is normalised. Pass
            False for non-unitary operators.

    Returns:
        A new state tensor.

    Raises:
        ValueError: On dtype, shape or qubit index problems.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    n_qubits = _resolve_n_qubits(state, n_qubits)
    targets = _check_qubits(qubits, n_qubits)
    k = len(targets)
    if k == 0:
        raise ValueError("apply_matrix needs at least one target qubit.")
    if tuple(matrix.shape) != (2**k, 2**k):
        raise ValueError(
            f"matrix must have shape {(2**k, 2**k)} for {k} qubit(s), got {tuple(matrix.shape)}"
        )

    batch_shape = state.shape[:-1]
    batch_size = math.prod(batch_shape) if batch_shape else 1
    psi = state.reshape((batch_size,) + (2,) * n_qubits)
    gate = matrix.to(dtype=state.dtype, device=state.device)

    out = _contract(psi, gate, [_axis(q, n_qubits) for q in targets])
    new_state = out.reshape(*batch_shape, 2**n_qubits)

    if check_norm and is_debug_enabled():
        assert_normalized(new_state, atol=1e-4)
    return new_state


def apply_controlled(
    state: torch.Tensor,
    matrix: torch.Tensor,
    ctrl_qubits: Sequence[int],
    ctrl_config: Sequence[int],
    qubits: Sequence[int],
    n_qubits: int | None = None,
    check_norm: bool = True,
) -> torch.Tensor:
    """
    Apply ``matrix`` to ``qubits`` on the subspace where every control qubit
    equals its entry in ``ctrl_config`` (0 or 1).

    Raises:
        ValueError: If control and target qubits overlap, configurations are
            not 0/1, or shapes disagree.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    n_qubits = _resolve_n_qubits(state, n_qubits)
    ctrls = _check_qubits(ctrl_qubits, n_qubits, what="control qubit")
    targets = _check_qubits(qubits, n_qubits)
    if set(ctrls) & set(targets):
        raise ValueError(
            f"control qubits {ctrls} and target qubits {targets} must be disjoint"
        )
    config = tuple(int(c) for c in ctrl_config)
    if len(config) != len(ctrls) or any(c not in (0, 1) for c in config):
        raise ValueError(
            f"ctrl_config must hold one 0/1 entry per control qubit, got {config}"
        )
    k = len(targets)
    if tuple(matrix.shape) != (2**k, 2**k):
        raise ValueError(
            f"matrix must have shape {(2**k, 2**k)} for {k} qubit(s), got {tuple(matrix.shape)}"
        )

    batch_shape = state.shape[:-1]
    batch_size = math.prod(batch_shape) if batch_shape else 1
    psi = state.reshape((batch_size,) + (2,) * n_qubits)

    index: list = [slice(None)] * (n_qubits + 1)
    for q, c in zip(ctrls, config):
        index[_axis(q, n_qubits)] = c
    ctrl_axes = {_axis(q, n_qubits) for q in ctrls}
    remaining = [ax for ax in range(1, n_qubits + 1) if ax not in ctrl_axes]
    sub_axes = [1 + remaining.index(_axis(q, n_qubits)) for q in targets]

    gate = matrix.to(dtype=state.dtype, device=state.device)
    sub = psi[tuple(index)]
    out = psi.clone()
    out[tuple(index)] = _contract(sub, gate, sub_axes)
    new_state = out.reshape(*batch_shape, 2**n_qubits)

    if check_norm and is_debug_enabled():
        assert_normalized(new_state, atol=1e-4)
    return new_state


def measure_probs(state: torch.Tensor, n_qubits: int | None = None) -> torch.Tensor:
    """
    Born-rule probabilities ``|state[i]|**2`` over the computational basis.

    The result is returned as computed, without renormalisation.

    Raises:
        ValueError: If state is not complex or its dimension is not a power of 2.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    _resolve_n_qubits(state, n_qubits)
    return (state.abs() ** 2).contiguous()


__all__ = [
    "zero_state",
    "product_state",
    "apply_matrix",
    "apply_controlled",
    "measure_probs",
]
