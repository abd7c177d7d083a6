"""Combinators used when dispatching parameter values into blocks."""

from __future__ import annotations

import operator
from typing import Callable, Dict, Optional, Union

BinaryOp = Callable[[float, float], float]
Combinator = Optional[Union[str, BinaryOp]]


def _replace(old: float, new: float) -> float:
    return new


_NAMED: Dict[str, BinaryOp] = {
    "replace": _replace,
    "add": operator.add,
    "subtract": operator.sub,
}


def combine(op: Combinator) -> BinaryOp:
    """
    Resolve a dispatch combinator to a binary function ``f(old, new)``.

    Args:
        op: None (replace), one of "replace", "add", "subtract", or a callable.

    Raises:
        ValueError: For an unknown name.
        TypeError: For anything that is neither a name nor callable.
    """
    if op is None:
        return _replace
    if isinstance(op, str):
        try:
            return _NAMED[op]
        except KeyError:
            raise ValueError(
                f"Unknown dispatch combinator {op!r}. Expected one of {sorted(_NAMED)}"
            ) from None
    if callable(op):
        return op
    raise TypeError(f"Dispatch combinator must be a name or callable, got {type(op)}")
