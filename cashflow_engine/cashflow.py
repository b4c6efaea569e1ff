"""
Cash flows and coupons.

A leg is a plain list of `CashFlow` objects sorted by payment date. Coupons
advertise themselves through `as_coupon()`, which returns the coupon view or
None for plain flows.
"""
from __future__ import annotations

import pandas as pd
from typing import List, Optional

from .interest_rate import Compounding, Frequency, InterestRate
from .settings import Settings, settings as default_settings
from .utils import DayCounter, cached_schedule, months_per_period


def _date(d) -> Optional[pd.Timestamp]:
    return None if d is None else pd.Timestamp(d)


class CashFlow:
    """Base cash flow: a payment date, an amount and an optional ex-coupon date."""

    settings: Settings = default_settings

    def __init__(self, payment_date, ex_coupon_date=None):
        self._payment_date = pd.Timestamp(payment_date)
        self._ex_coupon_date = _date(ex_coupon_date)

    def date(self) -> pd.Timestamp:
        return self._payment_date

    def amount(self) -> float:
        raise NotImplementedError

    def ex_coupon_date(self) -> Optional[pd.Timestamp]:
        return self._ex_coupon_date

    def as_coupon(self) -> Optional["Coupon"]:
        return None

    def has_occurred(self, ref_date=None, include_ref_date: Optional[bool] = None) -> bool:
        """
        True if the flow is paid before `ref_date`.

        With include_ref_date a flow paid on the reference date has not
        occurred yet. When the reference date is the evaluation date the
        settings' include_todays_cash_flows (if set) takes precedence.
        """
        cf = self.date()
        ref_date = _date(ref_date)

        if ref_date is not None:
            if ref_date < cf:
                return False
            if cf < ref_date:
                return True

        today = self.settings.today()
        if ref_date is None or ref_date == today:
            if self.settings.include_todays_cash_flows is not None:
                include_ref_date = self.settings.include_todays_cash_flows

        ref = today if ref_date is None else ref_date
        if include_ref_date is None:
            include_ref_date = self.settings.include_reference_date_events

        if include_ref_date:
            return cf < ref
        return cf <= ref

    def trading_ex_coupon(self, ref_date=None) -> bool:
        ecd = self.ex_coupon_date()
        if ecd is None:
            return False
        ref = self.settings.today() if ref_date is None else pd.Timestamp(ref_date)
        return ecd <= ref

    def __repr__(self) -> str:
        return f"{type(self).__name__}(date={self.date().date()}, amount={self.amount():.6f})"


class SimpleCashFlow(CashFlow):
    """Predetermined amount paid on a date."""

    def __init__(self, amount: float, payment_date, ex_coupon_date=None):
        super().__init__(payment_date, ex_coupon_date)
        self._amount = float(amount)

    def amount(self) -> float:
        return self._amount


class Redemption(SimpleCashFlow):
    """Principal repayment."""


class Coupon(CashFlow):
    """
    Cash flow accruing over a period. The reference period defaults to the
    accrual period. Subclasses provide rate(), day_counter(), amount() and
    accrued_amount().
    """

    def __init__(
        self,
        payment_date,
        nominal: float,
        accrual_start_date,
        accrual_end_date,
        ref_period_start=None,
        ref_period_end=None,
        ex_coupon_date=None,
    ):
        super().__init__(payment_date, ex_coupon_date)
        self._nominal = float(nominal)
        self._accrual_start = pd.Timestamp(accrual_start_date)
        self._accrual_end = pd.Timestamp(accrual_end_date)
        self._ref_start = self._accrual_start if ref_period_start is None else pd.Timestamp(ref_period_start)
        self._ref_end = self._accrual_end if ref_period_end is None else pd.Timestamp(ref_period_end)

    def as_coupon(self) -> "Coupon":
        return self

    def nominal(self) -> float:
        return self._nominal

    def accrual_start_date(self) -> pd.Timestamp:
        return self._accrual_start

    def accrual_end_date(self) -> pd.Timestamp:
        return self._accrual_end

    def reference_period_start(self) -> pd.Timestamp:
        return self._ref_start

    def reference_period_end(self) -> pd.Timestamp:
        return self._ref_end

    def rate(self) -> float:
        raise NotImplementedError

    def day_counter(self) -> DayCounter:
        raise NotImplementedError

    def accrued_amount(self, d) -> float:
        raise NotImplementedError

    def accrual_period(self) -> float:
        return self.day_counter().year_fraction(
            self._accrual_start, self._accrual_end, self._ref_start, self._ref_end
        )

    def accrual_days(self) -> int:
        return self.day_counter().day_count(self._accrual_start, self._accrual_end)

    def accrued_period(self, d) -> float:
        d = pd.Timestamp(d)
        if d <= self._accrual_start or d > self.date():
            return 0.0
        return self.day_counter().year_fraction(
            self._accrual_start, min(d, self._accrual_end), self._ref_start, self._ref_end
        )

    def accrued_days(self, d) -> int:
        d = pd.Timestamp(d)
        if d <= self._accrual_start or d > self.date():
            return 0
        return self.day_counter().day_count(self._accrual_start, min(d, self._accrual_end))


class FixedRateCoupon(Coupon):
    """Coupon paying nominal x (compound factor - 1) of a fixed InterestRate."""

    def __init__(
        self,
        payment_date,
        nominal: float,
        rate: InterestRate,
        accrual_start_date,
        accrual_end_date,
        ref_period_start=None,
        ref_period_end=None,
        ex_coupon_date=None,
    ):
        super().__init__(
            payment_date, nominal, accrual_start_date, accrual_end_date,
            ref_period_start, ref_period_end, ex_coupon_date,
        )
        self._rate = rate

    def interest_rate(self) -> InterestRate:
        return self._rate

    def rate(self) -> float:
        return self._rate.rate

    def day_counter(self) -> DayCounter:
        return self._rate.day_counter

    def amount(self) -> float:
        return self._nominal * (
            self._rate.compound_factor_between(
                self._accrual_start, self._accrual_end, self._ref_start, self._ref_end
            ) - 1.0
        )

    def accrued_amount(self, d) -> float:
        d = pd.Timestamp(d)
        if d <= self._accrual_start or d > self.date():
            return 0.0

        if self.trading_ex_coupon(d):
            return -self._nominal * (
                self._rate.compound_factor_between(
                    d, max(d, self._accrual_end), self._ref_start, self._ref_end
                ) - 1.0
            )

        return self._nominal * (
            self._rate.compound_factor_between(
                self._accrual_start, min(d, self._accrual_end), self._ref_start, self._ref_end
            ) - 1.0
        )


def fixed_rate_leg(
    effective,
    termination,
    nominal: float,
    coupon_rate: float,
    day_counter: DayCounter,
    freq: int = 2,
    compounding: Compounding = Compounding.SIMPLE,
    redemption: bool = False,
    ex_coupon_days: int = 0,
) -> List[CashFlow]:
    """
    Fixed-rate leg over a backward-generated schedule.

    The short front stub, if any, gets a full-length reference period ending
    at its accrual end so reference-aware day counters measure it against a
    regular period. Ex-coupon dates are `ex_coupon_days` calendar days before
    payment when positive.
    """
    dates = cached_schedule(pd.Timestamp(effective), pd.Timestamp(termination), int(freq))
    months = months_per_period(freq)
    rate = InterestRate(coupon_rate, day_counter, compounding, Frequency(int(freq)))

    leg: List[CashFlow] = []
    for i, (start, end) in enumerate(zip(dates[:-1], dates[1:])):
        ref_start = start
        if i == 0:
            ref_start = end - pd.DateOffset(months=months)
        ex_date = end - pd.Timedelta(days=ex_coupon_days) if ex_coupon_days > 0 else None
        leg.append(FixedRateCoupon(end, nominal, rate, start, end, ref_start, end, ex_date))

    if redemption:
        leg.append(Redemption(nominal, dates[-1]))

    return leg
