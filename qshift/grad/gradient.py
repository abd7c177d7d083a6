"""
Whole-circuit gradients.

Each function differentiates with respect to every marked node of a circuit
and returns a 1-D float64 tensor aligned with :func:`parameters_of_diff`.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import torch

from ..blocks import AbstractBlock
from ..operators import ObservableLike
from .params import diff_blocks
from .shift import DEFAULT_SHIFT_RULE, ShiftRule, numdiff, opdiff, statdiff
from .stat import StatFunctional


def _as_float(value: Any) -> float:
    if isinstance(value, torch.Tensor) and value.numel() != 1:
        raise ValueError(
            f"gradient entries must be scalars, got a tensor of shape {tuple(value.shape)}"
        )
    return float(value)


def opgrad(
    psifunc: Callable[[], torch.Tensor],
    circuit: AbstractBlock,
    op: ObservableLike,
    rule: ShiftRule = DEFAULT_SHIFT_RULE,
) -> torch.Tensor:
    """
    Gradient of ``<ψ|op|ψ>`` with respect to all marked nodes of ``circuit``.

    Args:
        psifunc: Zero-argument callable returning an unbatched state that
            depends on ``circuit``'s current parameters.
        circuit: Marked circuit (see :func:`markdiff`).
        op: Hermitian observable.
        rule: Shift rule passed to :func:`opdiff`.

    Returns:
        1-D float64 tensor, one entry per marked node in post-order.
    """
    nodes = diff_blocks(circuit)
    grad = torch.empty(len(nodes), dtype=torch.float64)
    for k, node in enumerate(nodes):
        grad[k] = _as_float(opdiff(psifunc, node, op, rule=rule))
    return grad


def statgrad(
    probfunc: Callable[[], Any],
    circuit: AbstractBlock,
    stat: StatFunctional,
    initial: Optional[Any] = None,
) -> torch.Tensor:
    """
    Gradient of a statistical functional with respect to all marked nodes.

    For arity-2 functionals the reference distribution is taken once, at the
    current parameters, unless ``initial`` is given.
    """
    if stat.arity == 2 and initial is None:
        initial = probfunc()
    nodes = diff_blocks(circuit)
    grad = torch.empty(len(nodes), dtype=torch.float64)
    for k, node in enumerate(nodes):
        grad[k] = _as_float(statdiff(probfunc, node, stat, initial=initial))
    return grad


def numgrad(
    loss: Callable[[], Any],
    circuit: AbstractBlock,
    delta: float = 1e-2,
) -> torch.Tensor:
    """Central finite-difference gradient of ``loss`` over all marked nodes."""
    nodes = diff_blocks(circuit)
    grad = torch.empty(len(nodes), dtype=torch.float64)
    for k, node in enumerate(nodes):
        grad[k] = _as_float(numdiff(loss, node, delta=delta))
    return grad
