"""
Closed-form yield sensitivities per compounding convention.

For a flow c discounted by B = B(t) under a flat rate r with N periods a
year, these return the flow's contribution to dP/dy and d2P/dy2. The hybrid
conventions switch regime at t = 1/N: SimpleThenCompounded is simple up to
and including 1/N, CompoundedThenSimple is simple strictly beyond it.
"""
from __future__ import annotations

from enum import Enum

from .errors import UnsupportedCompoundingError
from .interest_rate import Compounding


class DurationType(Enum):
    SIMPLE = "simple"
    MODIFIED = "modified"
    MACAULAY = "macaulay"


def _simple_regime(compounding: Compounding, t: float, n: float) -> bool:
    if compounding == Compounding.SIMPLE:
        return True
    if compounding == Compounding.COMPOUNDED:
        return False
    if compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
        return t <= 1.0 / n
    if compounding == Compounding.COMPOUNDED_THEN_SIMPLE:
        return t > 1.0 / n
    raise UnsupportedCompoundingError(f"unknown compounding convention ({compounding!r})")


def first_derivative(c: float, B: float, t: float, r: float, n: float, compounding: Compounding) -> float:
    """dP/dy contribution of one flow."""
    if compounding == Compounding.CONTINUOUS:
        return -c * B * t
    if _simple_regime(compounding, t, n):
        return -c * B * B * t
    return -c * t * B / (1.0 + r / n)


def second_derivative(c: float, B: float, t: float, r: float, n: float, compounding: Compounding) -> float:
    """d2P/dy2 contribution of one flow."""
    if compounding == Compounding.CONTINUOUS:
        return c * B * t * t
    if _simple_regime(compounding, t, n):
        return c * 2.0 * B * B * B * t * t
    return c * B * t * (n * t + 1.0) / (n * (1.0 + r / n) * (1.0 + r / n))
