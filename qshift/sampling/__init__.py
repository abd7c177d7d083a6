"""Measurement sampling."""

from .outcomes import outcomes_to_bits, sample_outcomes

__all__ = ["sample_outcomes", "outcomes_to_bits"]
