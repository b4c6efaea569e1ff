"""
Exception taxonomy for the cash-flow analysis engine.

Input/consistency problems subclass ValueError, solver failures subclass
RuntimeError, so callers catching the builtins keep working.
"""
from __future__ import annotations


class CashFlowEngineError(Exception):
    """Base exception for the cash-flow engine."""


class EmptyLegError(CashFlowEngineError, ValueError):
    """A date or amount was requested from a leg with no cash flows."""


class UnsortedLegError(CashFlowEngineError, ValueError):
    """Cash flows are not in ascending payment-date order."""


class NoCouponAtDateError(CashFlowEngineError, ValueError):
    """A coupon accessor found only plain cash flows at the payment date."""


class InconsistentCouponAggregationError(CashFlowEngineError, ValueError):
    """Simultaneous coupons differ in nominal, accrual period or day counter."""


class ZeroBPSError(CashFlowEngineError, ValueError):
    """Basis-point sensitivity is zero, so no at-the-money rate exists."""


class CompoundingMismatchError(CashFlowEngineError, ValueError):
    """The requested measure needs a different compounding convention."""


class UnsupportedCompoundingError(CashFlowEngineError, ValueError):
    """An unknown compounding convention reached a formula switch."""


class InvalidFrequencyError(CashFlowEngineError, ValueError):
    """Frequency missing or not allowed for the compounding convention."""


class NoSignChangeError(CashFlowEngineError, ValueError):
    """The cash flows cannot produce the target NPV at any real rate."""


class ConvergenceError(CashFlowEngineError, RuntimeError):
    """A root finder could not bracket or converge within its budget."""
