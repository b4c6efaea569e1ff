from __future__ import annotations

import numpy as np
import pandas as pd
from typing import Iterable, Sequence

from .interest_rate import Compounding, Frequency, InterestRate
from .utils import DayCounter


class YieldTermStructure:
    """
    Discount curve contract consumed by the cash-flow engine:
    discount(date), reference_date, allows_extrapolation.

    Subclasses implement `discount_t(t)` with t measured by the curve's own
    day counter from its reference date.
    """

    def __init__(self, reference_date, day_counter: DayCounter, allow_extrapolation: bool = False):
        self._reference_date = pd.Timestamp(reference_date)
        self._day_counter = day_counter
        self._extrapolate = bool(allow_extrapolation)

    def reference_date(self) -> pd.Timestamp:
        return self._reference_date

    def day_counter(self) -> DayCounter:
        return self._day_counter

    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    def enable_extrapolation(self, flag: bool = True) -> None:
        self._extrapolate = bool(flag)

    def time_from_reference(self, d) -> float:
        return self._day_counter.year_fraction(self._reference_date, pd.Timestamp(d))

    def discount_t(self, t: float) -> float:
        raise NotImplementedError

    def discount(self, d) -> float:
        return self.discount_t(self.time_from_reference(d))

    def df(self, dates: Iterable[pd.Timestamp]) -> np.ndarray:
        return np.array([self.discount(d) for d in dates], dtype=float)

    def zero_rate(self, d, compounding: Compounding = Compounding.CONTINUOUS,
                  frequency: Frequency = Frequency.ANNUAL) -> InterestRate:
        return self.zero_rate_t(self.time_from_reference(d), compounding, frequency)

    def zero_rate_t(self, t: float, compounding: Compounding = Compounding.CONTINUOUS,
                    frequency: Frequency = Frequency.ANNUAL) -> InterestRate:
        if t == 0.0:
            # instantaneous rate approximated over a short interval
            t = 0.0001
        compound = 1.0 / self.discount_t(t)
        return InterestRate.implied_rate(compound, self._day_counter, compounding, frequency, t)


class FlatForward(YieldTermStructure):
    """Curve discounting at a single constant InterestRate."""

    def __init__(self, reference_date, rate: InterestRate):
        super().__init__(reference_date, rate.day_counter, allow_extrapolation=True)
        self.rate = rate

    def discount_t(self, t: float) -> float:
        return self.rate.discount_factor(t)


class ZeroCurve(YieldTermStructure):
    """
    Discount curve represented by knot discount factors,
    interpolated linearly in log discount factor space.

    - Within knot range: log-linear interpolation on DF.
    - Short-end extrapolation: flat cc zero implied by first knot.
    - Long-end extrapolation: flat cc forward of the last segment, only when
      extrapolation is enabled (raises otherwise).
    """

    def __init__(
        self,
        reference_date,
        knot_dates: Sequence[pd.Timestamp],
        discount_factors: Sequence[float],
        day_counter: DayCounter = DayCounter("ACT/365F"),
        allow_extrapolation: bool = False,
    ):
        super().__init__(reference_date, day_counter, allow_extrapolation)

        dates = [pd.Timestamp(d) for d in knot_dates]
        dfs = np.asarray(discount_factors, dtype=float)

        if len(dates) == 0 or len(dates) != len(dfs):
            raise ValueError("Need matching, non-empty knot dates and discount factors.")
        if any(a >= b for a, b in zip(dates[:-1], dates[1:])):
            raise ValueError("Knot dates must be strictly increasing.")
        if np.any(dfs <= 0.0):
            raise ValueError("Discount factors must be positive.")

        self.knot_dates = np.array([d.to_datetime64() for d in dates], dtype="datetime64[ns]")
        self.knot_log_dfs = np.log(dfs)
        self.knot_times = np.array([self.time_from_reference(d) for d in dates], dtype=float)

        if self.knot_times[0] <= 0:
            raise ValueError("First knot must be after the reference date.")

    def discount_t(self, t: float) -> float:
        kt = self.knot_times
        kv = self.knot_log_dfs

        if t < 0:
            raise ValueError(f"Requested time {t} before reference date.")

        if t < kt[0]:
            # first knot implied flat cc zero
            z1 = -kv[0] / kt[0]
            return float(np.exp(-z1 * t))

        if t > kt[-1]:
            if not self._extrapolate:
                raise ValueError("Requested date beyond curve knot range (extrapolation disabled).")
            if len(kt) > 1:
                fwd = -(kv[-1] - kv[-2]) / (kt[-1] - kt[-2])
            else:
                fwd = -kv[-1] / kt[-1]
            return float(np.exp(kv[-1] - fwd * (t - kt[-1])))

        return float(np.exp(np.interp(t, kt, kv)))


class ZeroSpreadedCurve(YieldTermStructure):
    """
    Base curve with an additive spread on its zero rates.

    The zero rate of the base curve at t, expressed in `compounding` /
    `frequency`, is shifted by `spread`. Time runs on the base curve's day
    counter; `day_counter` only labels the zero and spreaded rates.
    Extrapolation mirrors the base curve's setting.
    """

    def __init__(
        self,
        base: YieldTermStructure,
        spread: float,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.NO_FREQUENCY,
        day_counter: DayCounter = None,
    ):
        super().__init__(base.reference_date(), base.day_counter(), base.allows_extrapolation())
        self.base = base
        self.spread = float(spread)
        self.compounding = compounding
        self.frequency = frequency
        self.rate_day_counter = base.day_counter() if day_counter is None else day_counter

    def discount_t(self, t: float) -> float:
        if t == 0.0:
            return 1.0
        zero = InterestRate.implied_rate(
            1.0 / self.base.discount_t(t), self.rate_day_counter, self.compounding, self.frequency, t
        )
        spreaded = InterestRate(zero.rate + self.spread, self.rate_day_counter, self.compounding, self.frequency)
        return spreaded.discount_factor(t)
