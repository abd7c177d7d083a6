"""Autograd Function computing circuit gradients with the parameter-shift rule."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Optional

import torch

from ..grad import dispatch_to_diff, opgrad
from .utils import as_cpu_float64

if TYPE_CHECKING:
    from .layers import CircuitExpectationLayer


def _layer(layer_ref: "weakref.ref[CircuitExpectationLayer]") -> "CircuitExpectationLayer":
    layer = layer_ref()
    if layer is None:
        raise RuntimeError("CircuitExpectationLayer was garbage collected")
    return layer


class ShiftExpectation(torch.autograd.Function):
    """
    Expectation value of a marked circuit with a parameter-shift backward.

    The forward pass writes the parameter vector into the circuit's marked
    nodes and evaluates ``real(<0|U† O U|0>)``. The backward pass writes the
    same vector again and computes the exact gradient with :func:`opgrad`,
    so the result integrates with any ``torch.optim`` optimizer.
    """

    @staticmethod
    def forward(
        ctx: torch.autograd.function.FunctionCtx,
        layer_ref: weakref.ref,
        params: torch.Tensor,
    ) -> torch.Tensor:
        layer = _layer(layer_ref)
        values = as_cpu_float64(params)
        dispatch_to_diff(layer.circuit, values)
        expectation = layer.expectation()

        ctx.values = values
        ctx.layer_ref = layer_ref
        return torch.tensor(expectation, dtype=params.dtype, device=params.device)

    @staticmethod
    def backward(
        ctx: torch.autograd.function.FunctionCtx, grad_output: torch.Tensor
    ) -> tuple[Optional[torch.Tensor], Optional[torch.Tensor]]:
        values = ctx.values
        layer = _layer(ctx.layer_ref)

        # An optimizer step may have run between forward and backward.
        dispatch_to_diff(layer.circuit, values)
        grad_vector = opgrad(layer.state, layer.circuit, layer.observable)
        grad_vector = grad_vector.to(dtype=grad_output.dtype, device=grad_output.device)

        return None, grad_output * grad_vector


__all__ = ["ShiftExpectation"]
