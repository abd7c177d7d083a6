"""
Parameter-shift derivatives of single marked nodes.

For a gate exp(-iθG/2) whose generator G has eigenvalues ±1, any expectation
f(θ) is a sinusoid in θ, so

    df/dθ = (1/2) [f(θ + π/2) − f(θ − π/2)]

holds exactly. This is what ``shift=π/2`` and ``prefactor=0.5`` encode.
A plain central finite difference with a small step is provided as
:func:`numdiff` for losses that are not of that form and for checking.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

import torch

from ..blocks import AbstractBlock, BlockKind
from ..diagnostics import is_debug_enabled
from ..logging import get_logger
from ..operators import ObservableLike, expect
from .stat import StatFunctional, as_weights

logger = get_logger(__name__)

Evaluator = Callable[[], Any]


@dataclass(frozen=True)
class ShiftRule:
    """
    Parameter-shift rule configuration.

    Args:
        shift: Offset s applied in both directions.
        prefactor: Factor applied to ``f(θ + s) - f(θ - s)``.
    """

    shift: float
    prefactor: float

    def __post_init__(self) -> None:
        if not isinstance(self.shift, (int, float)):
            raise TypeError(f"shift must be a number, got {type(self.shift)}")
        if not isinstance(self.prefactor, (int, float)):
            raise TypeError(f"prefactor must be a number, got {type(self.prefactor)}")
        if not math.isfinite(self.shift) or self.shift == 0:
            raise ValueError(f"shift must be finite and non-zero, got {self.shift}")
        if not math.isfinite(self.prefactor):
            raise ValueError(f"prefactor must be finite, got {self.prefactor}")

    def combine(self, r1: Any, r2: Any) -> Any:
        """Combine the evaluations at ``-shift`` (r1) and ``+shift`` (r2)."""
        return self.prefactor * (r2 - r1)


DEFAULT_SHIFT_RULE = ShiftRule(shift=math.pi / 2, prefactor=0.5)


def _require_diff(node: AbstractBlock) -> Tuple[float, ...]:
    if not isinstance(node, AbstractBlock) or node.kind is not BlockKind.TAG:
        raise TypeError(
            f"parameter-shift differentiation needs a Diff node, got {type(node).__name__}"
        )
    original = node.parameters()
    if len(original) != 1:
        raise ValueError(
            f"parameter-shift differentiation needs a node with exactly one parameter, "
            f"got {len(original)}"
        )
    return original


@contextmanager
def shifted(node: AbstractBlock, offset: float) -> Iterator[AbstractBlock]:
    """
    Temporarily move a marked node's parameter by ``offset``.

    On exit the original value is written back with a replace dispatch,
    whether or not the body raised.

    Example:
        >>> with shifted(node, math.pi / 2):
        ...     value = loss()
    """
    original = _require_diff(node)
    node.dispatch([original[0] + offset])
    try:
        yield node
    finally:
        node.dispatch(original)


def _perturb(evaluate: Evaluator, node: AbstractBlock, delta: float) -> Tuple[Any, Any]:
    """
    Evaluate at ``θ - delta`` and ``θ + delta``, then restore ``θ``.

    Exactly two evaluations happen. Both target values are written as
    absolute values computed from the saved original, and the original is
    written back afterwards, also when ``evaluate`` raises.

    Returns:
        ``(r1, r2)``: the results at ``θ - delta`` and ``θ + delta``.

    Raises:
        TypeError: If ``node`` is not a Diff marker.
        ValueError: If ``node`` does not hold exactly one parameter.
        RuntimeError: In debug mode, if ``evaluate`` changed the node's
            parameter.
    """
    original = _require_diff(node)
    theta = original[0]
    logger.debug("perturb %r by +/-%g", node, delta)

    try:
        node.dispatch([theta - delta])
        r1 = evaluate()
        if is_debug_enabled():
            _check_untouched(node, theta - delta)
        node.dispatch([theta + delta])
        r2 = evaluate()
        if is_debug_enabled():
            _check_untouched(node, theta + delta)
    finally:
        node.dispatch(original)
    return r1, r2


def _check_untouched(node: AbstractBlock, expected: float) -> None:
    (current,) = node.parameters()
    if current != expected:
        raise RuntimeError(
            f"evaluator modified the parameter of {node!r} "
            f"(expected {expected!r}, found {current!r})"
        )


def _scalar(value: Any) -> Any:
    """Real single-element tensors become Python floats; anything else passes."""
    if isinstance(value, torch.Tensor) and value.numel() == 1 and not value.is_complex():
        return float(value.item())
    return value


def numdiff(loss: Evaluator, node: AbstractBlock, delta: float = 1e-2) -> Any:
    """
    Central finite difference ``(L(θ+δ) - L(θ-δ)) / (2δ)``.

    Args:
        loss: Zero-argument callable evaluating the loss with the circuit's
            current parameters.
        node: The marked node to differentiate.
        delta: Finite-difference step.
    """
    r1, r2 = _perturb(loss, node, delta)
    return _scalar((r2 - r1) / (2 * delta))


def opdiff(
    psifunc: Callable[[], torch.Tensor],
    node: AbstractBlock,
    op: ObservableLike,
    rule: ShiftRule = DEFAULT_SHIFT_RULE,
) -> Any:
    """
    Exact derivative of ``<ψ|op|ψ>`` with respect to ``node``.

    Args:
        psifunc: Zero-argument callable returning the current state.
        node: The marked node to differentiate.
        op: Hermitian observable (block, PauliTerm or PauliSum).
        rule: Shift rule; the default suits rotation and phase gates.

    Returns:
        A float for unbatched states, otherwise a real tensor with the
        state's batch shape.
    """
    r1, r2 = _perturb(lambda: expect(op, psifunc()).real, node, rule.shift)
    return _scalar(rule.combine(r1, r2))


def statdiff(
    probfunc: Callable[[], Any],
    node: AbstractBlock,
    stat: StatFunctional,
    initial: Optional[Any] = None,
) -> Any:
    """
    Exact derivative of a statistical functional with respect to ``node``.

    For arity 2 the functional compares the shifted distribution against a
    fixed reference, and the derivative of a symmetric pairwise functional
    picks up a factor of two from its two arguments.

    Args:
        probfunc: Zero-argument callable returning either a probability
            vector (tensor functionals) or a sample sequence (kernels).
        node: The marked node to differentiate.
        stat: The functional.
        initial: Reference distribution for arity 2. Defaults to
            ``probfunc()`` at the unshifted parameters. Ignored for arity 1.

    Returns:
        ``(r2 - r1) * arity / 2``.
    """
    _require_diff(node)

    def _prepare(dist: Any) -> Any:
        return dist if stat.is_kernel else as_weights(dist)

    if stat.arity == 2:
        reference = _prepare(probfunc() if initial is None else initial)

        def evaluate() -> Any:
            return stat.expect(_prepare(probfunc()), reference)

    else:

        def evaluate() -> Any:
            return stat.expect(_prepare(probfunc()))

    r1, r2 = _perturb(evaluate, node, DEFAULT_SHIFT_RULE.shift)
    return _scalar((r2 - r1) * stat.arity / 2)
