"""
Interest-rate compounding algebra.

`InterestRate` bundles a rate with its day counter, compounding convention
and frequency, and converts time to compound/discount factors and back.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum

import pandas as pd

from .errors import InvalidFrequencyError, UnsupportedCompoundingError
from .utils import DayCounter


class Compounding(Enum):
    SIMPLE = "simple"
    COMPOUNDED = "compounded"
    CONTINUOUS = "continuous"
    SIMPLE_THEN_COMPOUNDED = "simple_then_compounded"
    COMPOUNDED_THEN_SIMPLE = "compounded_then_simple"


class Frequency(IntEnum):
    NO_FREQUENCY = -1
    ONCE = 0
    ANNUAL = 1
    SEMIANNUAL = 2
    EVERY_FOURTH_MONTH = 3
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12
    WEEKLY = 52
    DAILY = 365


_PERIODIC = (
    Compounding.COMPOUNDED,
    Compounding.SIMPLE_THEN_COMPOUNDED,
    Compounding.COMPOUNDED_THEN_SIMPLE,
)


def _check_dates(d1, d2) -> None:
    if pd.Timestamp(d2) < pd.Timestamp(d1):
        raise ValueError(f"d1 ({d1}) later than d2 ({d2})")


@dataclass(frozen=True)
class InterestRate:
    """
    Rate value object.

    `frequency` is only meaningful for the periodic conventions (Compounded,
    SimpleThenCompounded, CompoundedThenSimple), where it must be a positive
    periodic value; otherwise it is reported as NO_FREQUENCY.
    """
    rate: float
    day_counter: DayCounter
    compounding: Compounding
    frequency: Frequency = Frequency.NO_FREQUENCY

    def __post_init__(self) -> None:
        if self.compounding in _PERIODIC:
            if self.frequency is None or int(self.frequency) <= 0:
                raise InvalidFrequencyError(
                    f"frequency {self.frequency!r} not allowed for {self.compounding.value} compounding"
                )
            try:
                object.__setattr__(self, "frequency", Frequency(int(self.frequency)))
            except ValueError as exc:
                raise InvalidFrequencyError(f"unknown frequency {self.frequency!r}") from exc
        else:
            object.__setattr__(self, "frequency", Frequency.NO_FREQUENCY)

    def __float__(self) -> float:
        return float(self.rate)

    @property
    def freq(self) -> float:
        return float(int(self.frequency))

    # ---- compound / discount factors ----

    def compound_factor(self, t: float) -> float:
        """Compound factor implied by the rate compounded at time t (own day counter)."""
        if t < 0.0:
            raise ValueError(f"negative time ({t}) not allowed")

        r = self.rate
        comp = self.compounding

        if comp == Compounding.SIMPLE:
            return 1.0 + r * t
        if comp == Compounding.COMPOUNDED:
            return (1.0 + r / self.freq) ** (self.freq * t)
        if comp == Compounding.CONTINUOUS:
            return math.exp(r * t)
        if comp == Compounding.SIMPLE_THEN_COMPOUNDED:
            if t <= 1.0 / self.freq:
                return 1.0 + r * t
            return (1.0 + r / self.freq) ** (self.freq * t)
        if comp == Compounding.COMPOUNDED_THEN_SIMPLE:
            if t > 1.0 / self.freq:
                return 1.0 + r * t
            return (1.0 + r / self.freq) ** (self.freq * t)

        raise UnsupportedCompoundingError(f"unknown compounding convention ({comp!r})")

    def discount_factor(self, t: float) -> float:
        return 1.0 / self.compound_factor(t)

    def compound_factor_between(self, d1, d2, ref_start=None, ref_end=None) -> float:
        _check_dates(d1, d2)
        return self.compound_factor(self.day_counter.year_fraction(d1, d2, ref_start, ref_end))

    def discount_factor_between(self, d1, d2, ref_start=None, ref_end=None) -> float:
        _check_dates(d1, d2)
        return self.discount_factor(self.day_counter.year_fraction(d1, d2, ref_start, ref_end))

    # ---- implied / equivalent rates ----

    @staticmethod
    def implied_rate(
        compound: float,
        day_counter: DayCounter,
        compounding: Compounding,
        frequency: Frequency,
        t: float,
    ) -> "InterestRate":
        """Rate that produces `compound` at time t (measured with `day_counter`)."""
        if compound <= 0.0:
            raise ValueError("positive compound factor required")

        if compound == 1.0:
            if t < 0.0:
                raise ValueError(f"non negative time ({t}) required")
            return InterestRate(0.0, day_counter, compounding, frequency)

        if t <= 0.0:
            raise ValueError(f"positive time ({t}) required")

        f = float(int(frequency))

        def simple() -> float:
            return (compound - 1.0) / t

        def compounded() -> float:
            return (compound ** (1.0 / (f * t)) - 1.0) * f

        if compounding == Compounding.SIMPLE:
            r = simple()
        elif compounding == Compounding.COMPOUNDED:
            r = compounded()
        elif compounding == Compounding.CONTINUOUS:
            r = math.log(compound) / t
        elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
            r = simple() if t <= 1.0 / f else compounded()
        elif compounding == Compounding.COMPOUNDED_THEN_SIMPLE:
            r = simple() if t > 1.0 / f else compounded()
        else:
            raise UnsupportedCompoundingError(f"unknown compounding convention ({compounding!r})")

        return InterestRate(r, day_counter, compounding, frequency)

    @staticmethod
    def implied_rate_between(
        compound: float,
        day_counter: DayCounter,
        compounding: Compounding,
        frequency: Frequency,
        d1,
        d2,
        ref_start=None,
        ref_end=None,
    ) -> "InterestRate":
        _check_dates(d1, d2)
        t = day_counter.year_fraction(d1, d2, ref_start, ref_end)
        return InterestRate.implied_rate(compound, day_counter, compounding, frequency, t)

    def equivalent_rate(self, compounding: Compounding, frequency: Frequency, t: float) -> "InterestRate":
        """Same compound factor over t, expressed in another convention (same day counter)."""
        return InterestRate.implied_rate(self.compound_factor(t), self.day_counter, compounding, frequency, t)

    def equivalent_rate_between(
        self,
        day_counter: DayCounter,
        compounding: Compounding,
        frequency: Frequency,
        d1,
        d2,
        ref_start=None,
        ref_end=None,
    ) -> "InterestRate":
        _check_dates(d1, d2)
        t1 = self.day_counter.year_fraction(d1, d2, ref_start, ref_end)
        t2 = day_counter.year_fraction(d1, d2, ref_start, ref_end)
        return InterestRate.implied_rate(self.compound_factor(t1), day_counter, compounding, frequency, t2)

    def __str__(self) -> str:
        head = f"{self.rate * 100.0:.6f} % {self.day_counter.name()}"
        comp = self.compounding
        if comp == Compounding.SIMPLE:
            return f"{head} simple compounding"
        if comp == Compounding.CONTINUOUS:
            return f"{head} continuous compounding"

        freq_name = self.frequency.name.lower().replace("_", " ")
        if comp == Compounding.COMPOUNDED:
            return f"{head} {freq_name} compounding"
        months = 12 // int(self.frequency) if int(self.frequency) <= 12 else 0
        if comp == Compounding.SIMPLE_THEN_COMPOUNDED:
            return f"{head} simple compounding up to {months} months, then {freq_name} compounding"
        if comp == Compounding.COMPOUNDED_THEN_SIMPLE:
            return f"{head} compounding up to {months} months, then {freq_name} simple compounding"

        raise UnsupportedCompoundingError(f"unknown compounding convention ({comp!r})")


def as_interest_rate(y, day_counter=None, compounding=None, frequency=Frequency.NO_FREQUENCY) -> InterestRate:
    """Accept either an InterestRate or its decomposed rate/day counter/compounding/frequency."""
    if isinstance(y, InterestRate):
        return y
    if day_counter is None or compounding is None:
        raise ValueError("day_counter and compounding are required with a bare rate")
    if isinstance(day_counter, str):
        day_counter = DayCounter(day_counter)
    return InterestRate(float(y), day_counter, compounding, frequency)
