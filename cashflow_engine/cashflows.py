"""
Cash-flow analysis: date inspectors, NPV/BPS against a curve, flat-yield
NPV/duration/convexity, IRR and z-spread.

Every function is a pure function of the leg (a list of CashFlow sorted by
payment date) and its market input. Unset settlement dates resolve to the
evaluation date and unset npv dates to the settlement date.
"""
from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from .cashflow import CashFlow, Coupon
from .curves import FlatForward, YieldTermStructure, ZeroSpreadedCurve
from .duration import DurationType, first_derivative, second_derivative
from .errors import (
    CompoundingMismatchError,
    EmptyLegError,
    InconsistentCouponAggregationError,
    NoCouponAtDateError,
    NoSignChangeError,
    UnsortedLegError,
    ZeroBPSError,
)
from .interest_rate import Compounding, Frequency, InterestRate, as_interest_rate
from .settings import (
    BASIS_POINT,
    DEFAULT_ACCURACY,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_YIELD_GUESS,
    DEFAULT_ZSPREAD_GUESS,
    DEFAULT_ZSPREAD_STEP,
    resolve_dates,
    settings,
)
from .solvers import Brent, NewtonSafe
from .utils import DayCounter

logger = logging.getLogger(__name__)

Leg = Sequence[CashFlow]


def _check_sorted(leg: Leg) -> None:
    if not settings.extra_safety_checks:
        return
    for a, b in zip(leg[:-1], leg[1:]):
        if a.date() > b.date():
            raise UnsortedLegError(
                "cashflows must be sorted in ascending order w.r.t. their payment dates"
            )


def _is_alive(cf: CashFlow, settlement: pd.Timestamp, include: bool) -> bool:
    return not cf.has_occurred(settlement, include) and not cf.trading_ex_coupon(settlement)


# ---- Date inspectors ----

def start_date(leg: Leg) -> pd.Timestamp:
    if not leg:
        raise EmptyLegError("empty leg")

    d = pd.Timestamp.max
    for cf in leg:
        cp = cf.as_coupon()
        d = min(d, cp.accrual_start_date() if cp is not None else cf.date())
    return d


def maturity_date(leg: Leg) -> pd.Timestamp:
    if not leg:
        raise EmptyLegError("empty leg")

    d = pd.Timestamp.min
    for cf in leg:
        cp = cf.as_coupon()
        d = max(d, cp.accrual_end_date() if cp is not None else cf.date())
    return d


def is_expired(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> bool:
    if not leg:
        return True

    settlement, _ = resolve_dates(settlement_date)
    for cf in reversed(leg):
        if not cf.has_occurred(settlement, include_settlement_date_flows):
            return False
    return True


def _previous_index(leg: Leg, include: bool, settlement_date) -> Optional[int]:
    if not leg:
        return None

    settlement, _ = resolve_dates(settlement_date)
    for i in range(len(leg) - 1, -1, -1):
        if leg[i].has_occurred(settlement, include):
            return i
    return None


def _next_index(leg: Leg, include: bool, settlement_date) -> Optional[int]:
    if not leg:
        return None

    settlement, _ = resolve_dates(settlement_date)
    for i, cf in enumerate(leg):
        if not cf.has_occurred(settlement, include):
            return i
    return None


def _same_date_backward(leg: Leg, i: Optional[int]) -> List[CashFlow]:
    if i is None:
        return []
    payment_date = leg[i].date()
    out = []
    while i >= 0 and leg[i].date() == payment_date:
        out.append(leg[i])
        i -= 1
    return out


def _same_date_forward(leg: Leg, i: Optional[int]) -> List[CashFlow]:
    if i is None:
        return []
    payment_date = leg[i].date()
    out = []
    while i < len(leg) and leg[i].date() == payment_date:
        out.append(leg[i])
        i += 1
    return out


def previous_cash_flow(leg: Leg, include_settlement_date_flows: bool,
                       settlement_date=None) -> Optional[CashFlow]:
    """Latest flow that has occurred at settlement, or None."""
    i = _previous_index(leg, include_settlement_date_flows, settlement_date)
    return None if i is None else leg[i]


def next_cash_flow(leg: Leg, include_settlement_date_flows: bool,
                   settlement_date=None) -> Optional[CashFlow]:
    """Earliest flow that has not occurred at settlement, or None."""
    i = _next_index(leg, include_settlement_date_flows, settlement_date)
    return None if i is None else leg[i]


def previous_cash_flow_date(leg: Leg, include_settlement_date_flows: bool,
                            settlement_date=None) -> Optional[pd.Timestamp]:
    cf = previous_cash_flow(leg, include_settlement_date_flows, settlement_date)
    return None if cf is None else cf.date()


def next_cash_flow_date(leg: Leg, include_settlement_date_flows: bool,
                        settlement_date=None) -> Optional[pd.Timestamp]:
    cf = next_cash_flow(leg, include_settlement_date_flows, settlement_date)
    return None if cf is None else cf.date()


def previous_cash_flow_amount(leg: Leg, include_settlement_date_flows: bool,
                              settlement_date=None) -> float:
    """Sum of all flows paid on the previous cash-flow date."""
    i = _previous_index(leg, include_settlement_date_flows, settlement_date)
    return sum((cf.amount() for cf in _same_date_backward(leg, i)), 0.0)


def next_cash_flow_amount(leg: Leg, include_settlement_date_flows: bool,
                          settlement_date=None) -> float:
    """Sum of all flows paid on the next cash-flow date."""
    i = _next_index(leg, include_settlement_date_flows, settlement_date)
    return sum((cf.amount() for cf in _same_date_forward(leg, i)), 0.0)


def _aggregate_rate(flows: List[CashFlow]) -> float:
    if not flows:
        return 0.0

    payment_date = flows[0].date()
    first: Optional[Coupon] = None
    result = 0.0
    for cf in flows:
        cp = cf.as_coupon()
        if cp is None:
            continue
        if first is None:
            first = cp
        elif not (
            first.nominal() == cp.nominal()
            and first.accrual_period() == cp.accrual_period()
            and first.day_counter() == cp.day_counter()
        ):
            raise InconsistentCouponAggregationError(
                f"cannot aggregate two different coupons on {payment_date.date()}"
            )
        result += cp.rate()

    if first is None:
        raise NoCouponAtDateError(f"no coupon paid at cashflow date {payment_date.date()}")
    return result


def previous_coupon_rate(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    i = _previous_index(leg, include_settlement_date_flows, settlement_date)
    return _aggregate_rate(_same_date_backward(leg, i))


def next_coupon_rate(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    i = _next_index(leg, include_settlement_date_flows, settlement_date)
    return _aggregate_rate(_same_date_forward(leg, i))


def _next_coupons(leg: Leg, include: bool, settlement: pd.Timestamp) -> Iterator[Coupon]:
    i = _next_index(leg, include, settlement)
    for cf in _same_date_forward(leg, i):
        cp = cf.as_coupon()
        if cp is not None:
            yield cp


def _first_next_coupon(leg: Leg, include: bool, settlement_date) -> Optional[Coupon]:
    return next(_next_coupons(leg, include, settlement_date), None)


def nominal(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return 0.0 if cp is None else cp.nominal()


def accrual_start_date(leg: Leg, include_settlement_date_flows: bool,
                       settlement_date=None) -> Optional[pd.Timestamp]:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return None if cp is None else cp.accrual_start_date()


def accrual_end_date(leg: Leg, include_settlement_date_flows: bool,
                     settlement_date=None) -> Optional[pd.Timestamp]:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return None if cp is None else cp.accrual_end_date()


def reference_period_start(leg: Leg, include_settlement_date_flows: bool,
                           settlement_date=None) -> Optional[pd.Timestamp]:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return None if cp is None else cp.reference_period_start()


def reference_period_end(leg: Leg, include_settlement_date_flows: bool,
                         settlement_date=None) -> Optional[pd.Timestamp]:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return None if cp is None else cp.reference_period_end()


def accrual_period(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return 0.0 if cp is None else cp.accrual_period()


def accrual_days(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> int:
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement_date)
    return 0 if cp is None else cp.accrual_days()


# The period/day accessors read the first coupon only while accrued_amount
# sums over every coupon paid on the same date.

def accrued_period(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    settlement, _ = resolve_dates(settlement_date)
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement)
    return 0.0 if cp is None else cp.accrued_period(settlement)


def accrued_days(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> int:
    settlement, _ = resolve_dates(settlement_date)
    cp = _first_next_coupon(leg, include_settlement_date_flows, settlement)
    return 0 if cp is None else cp.accrued_days(settlement)


def accrued_amount(leg: Leg, include_settlement_date_flows: bool, settlement_date=None) -> float:
    settlement, _ = resolve_dates(settlement_date)
    return sum(
        (cp.accrued_amount(settlement)
         for cp in _next_coupons(leg, include_settlement_date_flows, settlement)),
        0.0,
    )


# ---- Term-structure NPV/BPS ----

def npv(leg: Leg, discount_curve: YieldTermStructure, include_settlement_date_flows: bool,
        settlement_date=None, npv_date=None) -> float:
    """Sum of surviving flows discounted on the curve, as of npv_date."""
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    total = 0.0
    for cf in leg:
        if _is_alive(cf, settlement, include_settlement_date_flows):
            total += cf.amount() * discount_curve.discount(cf.date())

    return total / discount_curve.discount(npv_dt)


def _bps_accumulate(leg: Leg, discount_curve: YieldTermStructure, include: bool,
                    settlement: pd.Timestamp) -> Tuple[float, float, float]:
    """Return (npv, coupon sensitivity, non-coupon npv), all undiscounted to npv date."""
    total = 0.0
    sens = 0.0
    non_sens = 0.0
    for cf in leg:
        if not _is_alive(cf, settlement, include):
            continue
        df = discount_curve.discount(cf.date())
        amount = cf.amount()
        total += amount * df
        cp = cf.as_coupon()
        if cp is not None:
            sens += cp.nominal() * cp.accrual_period() * df
        else:
            non_sens += amount * df
    return total, sens, non_sens


def bps(leg: Leg, discount_curve: YieldTermStructure, include_settlement_date_flows: bool,
        settlement_date=None, npv_date=None) -> float:
    """Change in NPV for a 1bp move in the rate paid by the coupons."""
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    sens = 0.0
    for cf in leg:
        if not _is_alive(cf, settlement, include_settlement_date_flows):
            continue
        cp = cf.as_coupon()
        if cp is not None:
            sens += cp.nominal() * cp.accrual_period() * discount_curve.discount(cp.date())

    return BASIS_POINT * sens / discount_curve.discount(npv_dt)


def npvbps(leg: Leg, discount_curve: YieldTermStructure, include_settlement_date_flows: bool,
           settlement_date=None, npv_date=None) -> Tuple[float, float]:
    """NPV and BPS in a single pass."""
    if not leg:
        return 0.0, 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    total, sens, _ = _bps_accumulate(leg, discount_curve, include_settlement_date_flows, settlement)

    d = discount_curve.discount(npv_dt)
    return total / d, BASIS_POINT * sens / d


def atm_rate(leg: Leg, discount_curve: YieldTermStructure, include_settlement_date_flows: bool,
             settlement_date=None, npv_date=None, target_npv: Optional[float] = None) -> float:
    """
    Flat coupon rate giving the leg `target_npv` (default: the leg's own NPV).
    Non-coupon flows are held fixed.
    """
    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    total, sens, non_sens = _bps_accumulate(leg, discount_curve, include_settlement_date_flows, settlement)

    if target_npv is None:
        target = total - non_sens
    else:
        target = target_npv * discount_curve.discount(npv_dt) - non_sens

    if target == 0.0:
        return 0.0

    if sens == 0.0:
        raise ZeroBPSError("null bps: impossible atm rate")

    return target / sens


# ---- Flat-yield family ----

def stepwise_discount_time(cash_flow: CashFlow, day_counter: DayCounter,
                           npv_date: pd.Timestamp, last_date: pd.Timestamp) -> float:
    """
    Time between `last_date` and the flow's payment date.

    Inside a coupon whose accrual did not start at `last_date` the step is
    the full coupon period less the part already accrued by `last_date`, both
    measured against the coupon's reference period.
    """
    cf_date = cash_flow.date()
    coupon = cash_flow.as_coupon()

    if coupon is not None:
        ref_start = coupon.reference_period_start()
        ref_end = coupon.reference_period_end()
    else:
        if last_date == npv_date:
            # no previous coupon date available
            ref_start = cf_date - pd.DateOffset(years=1)
        else:
            ref_start = last_date
        ref_end = cf_date

    if coupon is not None and last_date != coupon.accrual_start_date():
        start = coupon.accrual_start_date()
        coupon_period = day_counter.year_fraction(start, cf_date, ref_start, ref_end)
        accrued = day_counter.year_fraction(start, last_date, ref_start, ref_end)
        return coupon_period - accrued

    return day_counter.year_fraction(last_date, cf_date, ref_start, ref_end)


def _walk(leg: Leg, y: InterestRate, include: bool, settlement: pd.Timestamp,
          npv_dt: pd.Timestamp) -> Iterator[Tuple[float, float, float]]:
    """Yield (amount, cumulative time, B(time)) for each surviving flow."""
    dc = y.day_counter
    t = 0.0
    last = npv_dt
    for cf in leg:
        if cf.has_occurred(settlement, include):
            continue

        c = 0.0 if cf.trading_ex_coupon(settlement) else cf.amount()
        t += stepwise_discount_time(cf, dc, npv_dt, last)
        yield c, t, y.discount_factor(t)
        last = cf.date()


def yield_npv(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
              *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    """
    NPV at a flat yield. The discount is built flow by flow as the product of
    per-step discount factors, which matters for simple compounding.
    """
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    _check_sorted(leg)

    total = 0.0
    discount = 1.0
    last = npv_dt
    dc = y.day_counter
    for cf in leg:
        if cf.has_occurred(settlement, include_settlement_date_flows):
            continue

        amount = 0.0 if cf.trading_ex_coupon(settlement) else cf.amount()
        discount *= y.discount_factor(stepwise_discount_time(cf, dc, npv_dt, last))
        last = cf.date()
        total += amount * discount

    return total


def yield_bps(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
              *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    """BPS discounting on a flat-forward curve at the given yield."""
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    flat = FlatForward(settlement, y)
    return bps(leg, flat, include_settlement_date_flows, settlement, npv_dt)


def simple_duration(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
                    *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    P = 0.0
    dPdy = 0.0
    for c, t, B in _walk(leg, y, include_settlement_date_flows, settlement, npv_dt):
        P += c * B
        dPdy += t * c * B

    if P == 0.0:  # no cashflows
        return 0.0
    return dPdy / P


def modified_duration(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
                      *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    """-1/P dP/dy with the derivative taken per compounding convention."""
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    P = 0.0
    dPdy = 0.0
    r = y.rate
    n = y.freq
    for c, t, B in _walk(leg, y, include_settlement_date_flows, settlement, npv_dt):
        P += c * B
        dPdy += first_derivative(c, B, t, r, n, y.compounding)

    if P == 0.0:  # no cashflows
        return 0.0
    return -dPdy / P


def macaulay_duration(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
                      *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if y.compounding != Compounding.COMPOUNDED:
        raise CompoundingMismatchError("compounded rate required")

    return (1.0 + y.rate / y.freq) * modified_duration(
        leg, y, include_settlement_date_flows, settlement_date, npv_date
    )


def duration(leg: Leg, y, duration_type: DurationType, include_settlement_date_flows: bool,
             settlement_date=None, npv_date=None,
             *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    if duration_type == DurationType.SIMPLE:
        return simple_duration(leg, y, include_settlement_date_flows, settlement, npv_dt)
    if duration_type == DurationType.MODIFIED:
        return modified_duration(leg, y, include_settlement_date_flows, settlement, npv_dt)
    if duration_type == DurationType.MACAULAY:
        return macaulay_duration(leg, y, include_settlement_date_flows, settlement, npv_dt)

    raise ValueError(f"unknown duration type ({duration_type!r})")


def convexity(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
              *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    """1/P d2P/dy2."""
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    P = 0.0
    d2Pdy2 = 0.0
    r = y.rate
    n = y.freq
    for c, t, B in _walk(leg, y, include_settlement_date_flows, settlement, npv_dt):
        P += c * B
        d2Pdy2 += second_derivative(c, B, t, r, n, y.compounding)

    if P == 0.0:  # no cashflows
        return 0.0
    return d2Pdy2 / P


def basis_point_value(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None, npv_date=None,
                      *, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> float:
    """Second-order Taylor estimate of the NPV change for a 1bp yield shift."""
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    pv = yield_npv(leg, y, include_settlement_date_flows, settlement, npv_dt)
    mod_dur = modified_duration(leg, y, include_settlement_date_flows, settlement, npv_dt)
    conv = convexity(leg, y, include_settlement_date_flows, settlement, npv_dt)

    delta = -mod_dur * pv
    gamma = (conv / 100.0) * pv

    shift = BASIS_POINT
    delta *= shift
    gamma *= shift * shift

    return delta + 0.5 * gamma


def yield_value_basis_point(leg: Leg, y, include_settlement_date_flows: bool, settlement_date=None,
                            npv_date=None, *, day_counter=None, compounding=None,
                            frequency=Frequency.NO_FREQUENCY) -> float:
    """Yield change for a 0.01 change in price."""
    y = as_interest_rate(y, day_counter, compounding, frequency)
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    pv = yield_npv(leg, y, include_settlement_date_flows, settlement, npv_dt)
    mod_dur = modified_duration(leg, y, include_settlement_date_flows, settlement, npv_dt)

    shift = 0.01
    return (1.0 / (-pv * mod_dur)) * shift


# ---- IRR ----

def _sign(x: float) -> int:
    if x == 0.0:
        return 0
    return 1 if x > 0.0 else -1


class IrrFinder:
    """
    Objective f(y) = target npv - yield_npv(y) with derivative given by the
    modified duration. Construction rejects legs whose surviving flows cannot
    reach the target at any rate.
    """

    def __init__(
        self,
        leg: Leg,
        npv: float,
        day_counter: DayCounter,
        compounding: Compounding,
        frequency: Frequency,
        include_settlement_date_flows: bool,
        settlement_date=None,
        npv_date=None,
    ):
        self.leg = leg
        self.npv = float(npv)
        self.day_counter = day_counter
        self.compounding = compounding
        self.frequency = frequency
        self.include_settlement_date_flows = include_settlement_date_flows
        self.settlement_date, self.npv_date = resolve_dates(settlement_date, npv_date)

        self.check_sign()

    def _rate(self, y: float) -> InterestRate:
        return InterestRate(y, self.day_counter, self.compounding, self.frequency)

    def __call__(self, y: float) -> float:
        value = yield_npv(self.leg, self._rate(y), self.include_settlement_date_flows,
                          self.settlement_date, self.npv_date)
        return self.npv - value

    def derivative(self, y: float) -> float:
        return modified_duration(self.leg, self._rate(y), self.include_settlement_date_flows,
                                 self.settlement_date, self.npv_date)

    def check_sign(self) -> int:
        """
        Count sign changes along the surviving flows, starting from the sign
        of -npv. Zero changes means no IRR exists; more than one means the
        solution may not be unique.
        """
        last_sign = _sign(-self.npv)
        sign_changes = 0
        for cf in self.leg:
            if not _is_alive(cf, self.settlement_date, self.include_settlement_date_flows):
                continue
            this_sign = _sign(cf.amount())
            if last_sign * this_sign < 0:
                sign_changes += 1
            if this_sign != 0:
                last_sign = this_sign

        if sign_changes == 0:
            raise NoSignChangeError(
                "the given cash flows cannot result in the given market price due to their sign"
            )
        if sign_changes > 1:
            logger.warning(f"{sign_changes} sign changes in cash flows: danger of non-unique IRR")
        return sign_changes


def irr(
    leg: Leg,
    npv: float,
    day_counter: DayCounter,
    compounding: Compounding,
    frequency: Frequency,
    include_settlement_date_flows: bool,
    settlement_date=None,
    npv_date=None,
    accuracy: float = DEFAULT_ACCURACY,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    guess: float = DEFAULT_YIELD_GUESS,
    solver=None,
) -> float:
    """
    Flat yield at which the leg's NPV equals `npv`.

    Uses a safeguarded Newton solver unless `solver` is given; any object
    with `solve(objective, accuracy, guess, step)` works.
    """
    if solver is None:
        solver = NewtonSafe(max_evaluations=max_iterations)

    objective = IrrFinder(leg, npv, day_counter, compounding, frequency,
                          include_settlement_date_flows, settlement_date, npv_date)
    logger.debug(f"Solving IRR for target npv {npv} from guess {guess}")
    return solver.solve(objective, accuracy, guess, guess / 10.0)


# ---- Z-spread ----

def zspread_npv(
    leg: Leg,
    discount_curve: YieldTermStructure,
    z_spread: float,
    day_counter: DayCounter,
    compounding: Compounding,
    frequency: Frequency,
    include_settlement_date_flows: bool,
    settlement_date=None,
    npv_date=None,
) -> float:
    """NPV on the curve shifted by a constant zero spread."""
    if not leg:
        return 0.0

    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    spreaded = ZeroSpreadedCurve(discount_curve, z_spread, compounding, frequency, day_counter)
    return npv(leg, spreaded, include_settlement_date_flows, settlement, npv_dt)


class ZSpreadFinder:
    """Objective f(s) = target npv - NPV on the curve spreaded by s."""

    def __init__(
        self,
        leg: Leg,
        discount_curve: YieldTermStructure,
        npv: float,
        day_counter: DayCounter,
        compounding: Compounding,
        frequency: Frequency,
        include_settlement_date_flows: bool,
        settlement_date=None,
        npv_date=None,
    ):
        self.leg = leg
        self.discount_curve = discount_curve
        self.npv = float(npv)
        self.day_counter = day_counter
        self.compounding = compounding
        self.frequency = frequency
        self.include_settlement_date_flows = include_settlement_date_flows
        self.settlement_date, self.npv_date = resolve_dates(settlement_date, npv_date)

    def __call__(self, z_spread: float) -> float:
        value = zspread_npv(self.leg, self.discount_curve, z_spread, self.day_counter,
                            self.compounding, self.frequency, self.include_settlement_date_flows,
                            self.settlement_date, self.npv_date)
        return self.npv - value


def z_spread(
    leg: Leg,
    npv: float,
    discount_curve: YieldTermStructure,
    day_counter: DayCounter,
    compounding: Compounding,
    frequency: Frequency,
    include_settlement_date_flows: bool,
    settlement_date=None,
    npv_date=None,
    accuracy: float = DEFAULT_ACCURACY,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    guess: float = DEFAULT_ZSPREAD_GUESS,
) -> float:
    """Constant zero spread over `discount_curve` that reprices the leg to `npv` (Brent)."""
    solver = Brent(max_evaluations=max_iterations)
    objective = ZSpreadFinder(leg, discount_curve, npv, day_counter, compounding, frequency,
                              include_settlement_date_flows, settlement_date, npv_date)
    logger.debug(f"Solving z-spread for target npv {npv} from guess {guess}")
    return solver.solve(objective, accuracy, guess, DEFAULT_ZSPREAD_STEP)
