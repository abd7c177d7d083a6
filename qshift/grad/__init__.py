"""Parameter-shift differentiation of marked circuit blocks."""

from .gradient import numgrad, opgrad, statgrad
from .marker import DIFF_ANNOTATION, Diff, is_controlled_phase
from .marking import generator, markdiff
from .params import diff_blocks, dispatch_to_diff, parameters_of_diff
from .shift import DEFAULT_SHIFT_RULE, ShiftRule, numdiff, opdiff, shifted, statdiff
from .stat import StatFunctional, Weights, as_weights

__all__ = [
    "Diff",
    "DIFF_ANNOTATION",
    "is_controlled_phase",
    "markdiff",
    "generator",
    "diff_blocks",
    "parameters_of_diff",
    "dispatch_to_diff",
    "ShiftRule",
    "DEFAULT_SHIFT_RULE",
    "shifted",
    "numdiff",
    "opdiff",
    "statdiff",
    "opgrad",
    "statgrad",
    "numgrad",
    "StatFunctional",
    "Weights",
    "as_weights",
]
