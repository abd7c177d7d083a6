"""
Statistical functionals over measured distributions.

A :class:`StatFunctional` is either

* a dense real tensor ``A`` of rank 1 or 2 on a finite outcome space, whose
  expectation is ``sum_i A[i] p[i]`` or ``sum_ij p[i] A[i, j] q[j]``; or
* a kernel function ``F`` of one or two samples, whose expectation is the
  U-statistic ``1/C(N, r) sum F(x_i, ...)`` over sample tuples.

Reference: U-statistics, e.g. Serfling, *Approximation Theorems of
Mathematical Statistics*, chapter 5.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

import torch

Kernel = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class Weights:
    """
    A probability vector used as-is.

    Nothing is renormalised; callers pass a valid distribution.
    """

    values: torch.Tensor

    def __post_init__(self) -> None:
        values = torch.as_tensor(self.values)
        if values.dim() != 1:
            raise ValueError(f"Weights must be 1-D, got shape {tuple(values.shape)}")
        if values.is_complex():
            raise ValueError("Weights must be real.")
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return self.values.shape[0]

    def sum(self) -> torch.Tensor:
        return self.values.sum()


def as_weights(probs: Union[Weights, torch.Tensor, Sequence[float]]) -> Weights:
    """Wrap a probability vector (e.g. from ``measure_probs``) as :class:`Weights`."""
    if isinstance(probs, Weights):
        return probs
    return Weights(torch.as_tensor(probs))


class StatFunctional:
    """
    A statistical functional of arity 1 or 2.

    Args:
        data: A real tensor of rank 1 or 2 (the arity is its rank), or a
            kernel callable.
        arity: Required for kernels, optional for tensors (checked against
            the rank).

    Raises:
        TypeError: For a kernel without ``arity``.
        ValueError: For an unsupported arity, rank or a complex tensor.

    Example:
        >>> f = StatFunctional(torch.tensor([1.0, 2.0, 3.0]))
        >>> float(f.expect(torch.tensor([0.2, 0.3, 0.5])))
        2.3
        >>> g = StatFunctional(lambda x, y: x * y, arity=2)
        >>> g.expect([1, 2, 3])  # (2 + 3 + 6) / 3
        3.6666666666666665
    """

    __slots__ = ("_data", "_arity", "_is_kernel")

    def __init__(self, data: Union[torch.Tensor, Sequence, Kernel], arity: Optional[int] = None) -> None:
        if callable(data) and not isinstance(data, torch.Tensor):
            if arity is None:
                raise TypeError("A kernel StatFunctional needs an explicit arity.")
            if arity not in (1, 2):
                raise ValueError(f"arity must be 1 or 2, got {arity}")
            self._data = data
            self._arity = int(arity)
            self._is_kernel = True
            return

        tensor = torch.as_tensor(data)
        if tensor.is_complex():
            raise ValueError("StatFunctional tensors must be real.")
        if tensor.dim() not in (1, 2):
            raise ValueError(
                f"StatFunctional tensors must have rank 1 or 2, got rank {tensor.dim()}"
            )
        if arity is not None and arity != tensor.dim():
            raise ValueError(
                f"arity {arity} does not match tensor rank {tensor.dim()}"
            )
        if not tensor.is_floating_point():
            tensor = tensor.to(torch.float64)
        self._data = tensor
        self._arity = tensor.dim()
        self._is_kernel = False

    @property
    def arity(self) -> int:
        return self._arity

    @property
    def data(self) -> Union[torch.Tensor, Kernel]:
        return self._data

    @property
    def is_kernel(self) -> bool:
        return self._is_kernel

    def __repr__(self) -> str:
        form = "kernel" if self._is_kernel else f"tensor{tuple(self._data.shape)}"
        return f"StatFunctional(arity={self._arity}, {form})"

    def expect(self, xs: Any, ys: Any = None) -> Any:
        """
        Expectation against one or two distributions.

        For tensors, ``xs``/``ys`` are probability vectors (or
        :class:`Weights`); ``ys`` defaults to ``xs`` for arity 2. For kernels,
        they are sample sequences: one sequence gives the unbiased
        U-statistic over distinct pairs, two give the mean over all cross
        pairs.

        Raises:
            ValueError: On arity or shape mismatch and on empty samples.
        """
        if self._arity == 1 and ys is not None:
            raise ValueError("An arity-1 functional takes exactly one distribution.")
        if self._is_kernel:
            return self._expect_kernel(xs, ys)
        return self._expect_tensor(xs, ys)

    def _expect_tensor(self, xs: Any, ys: Any) -> torch.Tensor:
        data = self._data
        px = as_weights(xs).values.to(dtype=data.dtype, device=data.device)
        if self._arity == 1:
            if px.shape[0] != data.shape[0]:
                raise ValueError(
                    f"distribution has {px.shape[0]} outcomes, functional expects {data.shape[0]}"
                )
            return torch.dot(data, px)

        py = px if ys is None else as_weights(ys).values.to(dtype=data.dtype, device=data.device)
        if (px.shape[0], py.shape[0]) != tuple(data.shape):
            raise ValueError(
                f"distributions of sizes {(px.shape[0], py.shape[0])} do not match "
                f"functional shape {tuple(data.shape)}"
            )
        return px @ data @ py

    def _expect_kernel(self, xs: Sequence, ys: Optional[Sequence]) -> Any:
        kernel = self._data
        n = len(xs)
        if n == 0:
            raise ValueError("Cannot take a U-statistic over an empty sample.")

        if self._arity == 1:
            total = kernel(xs[0])
            for i in range(1, n):
                total = total + kernel(xs[i])
            return total / n

        if ys is None:
            if n < 2:
                raise ValueError("A pairwise U-statistic needs at least two samples.")
            # Self-pairs are never evaluated.
            total = kernel(xs[1], xs[0])
            for i in range(2, n):
                for j in range(i):
                    total = total + kernel(xs[i], xs[j])
            return total / math.comb(n, 2)

        m = len(ys)
        if m == 0:
            raise ValueError("Cannot take a U-statistic over an empty sample.")
        pairs = ((x, y) for x in xs for y in ys)
        total = kernel(*next(pairs))
        for x, y in pairs:
            total = total + kernel(x, y)
        return total / n / m
