from __future__ import annotations

import pandas as pd
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

SUPPORTED_CONVENTIONS = ("ACT/365F", "ACT/360", "30/360", "ACT/ACT", "ACT/ACT ISMA")

_ALIASES = {
    "ACT/365": "ACT/365F",
    "ACT/365FIXED": "ACT/365F",
    "30/360US": "30/360",
    "ACT/ACTISDA": "ACT/ACT",
    "ACT/ACTISMA": "ACT/ACT ISMA",
    "ACT/ACTICMA": "ACT/ACT ISMA",
}


def normalize_convention(convention: str) -> str:
    key = convention.upper().replace(" ", "")
    key = _ALIASES.get(key, key)
    if key not in SUPPORTED_CONVENTIONS:
        raise ValueError(f"Unsupported day count convention: {convention}")
    return key


def _thirty_360_days(start: pd.Timestamp, end: pd.Timestamp) -> int:
    y1, m1, d1 = start.year, start.month, start.day
    y2, m2, d2 = end.year, end.month, end.day

    # 30/360 US convention
    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 == 30:
        d2 = 30

    return (y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)


def day_count(start: pd.Timestamp, end: pd.Timestamp, convention: str) -> int:
    """Days between two dates as counted by the convention (signed)."""
    start = pd.Timestamp(start)
    end = pd.Timestamp(end)
    if normalize_convention(convention) == "30/360":
        return _thirty_360_days(start, end)
    return (end - start).days


def _act_act_isda(start: pd.Timestamp, end: pd.Timestamp) -> float:
    if start.year == end.year:
        basis = 366.0 if start.is_leap_year else 365.0
        return (end - start).days / basis

    first = (pd.Timestamp(year=start.year + 1, month=1, day=1) - start).days
    last = (end - pd.Timestamp(year=end.year, month=1, day=1)).days
    first_basis = 366.0 if start.is_leap_year else 365.0
    last_basis = 366.0 if end.is_leap_year else 365.0
    return first / first_basis + (end.year - start.year - 1) + last / last_basis


def _act_act_isma(
    start: pd.Timestamp,
    end: pd.Timestamp,
    ref_start: Optional[pd.Timestamp],
    ref_end: Optional[pd.Timestamp],
) -> float:
    """
    ISMA/ICMA actual/actual: the fraction is measured against the reference
    (coupon) period, so irregular first/last periods are split into regular
    notional periods.
    """
    ref_start = start if ref_start is None else pd.Timestamp(ref_start)
    ref_end = end if ref_end is None else pd.Timestamp(ref_end)

    if not (ref_end > ref_start and ref_end > start):
        raise ValueError(
            f"Invalid reference period: start={start} end={end} "
            f"ref_start={ref_start} ref_end={ref_end}"
        )

    months = int(0.5 + 12 * (ref_end - ref_start).days / 365)
    if months == 0:
        ref_start = start
        ref_end = start + pd.DateOffset(years=1)
        months = 12

    period = months / 12.0

    if end <= ref_end:
        if start >= ref_start:
            return period * (end - start).days / (ref_end - ref_start).days

        # long first coupon
        previous_ref = ref_start - pd.DateOffset(months=months)
        if end > ref_start:
            return (
                yearfrac(start, ref_start, "ACT/ACT ISMA", previous_ref, ref_start)
                + yearfrac(ref_start, end, "ACT/ACT ISMA", ref_start, ref_end)
            )
        return yearfrac(start, end, "ACT/ACT ISMA", previous_ref, ref_start)

    if ref_start > start:
        raise ValueError("Invalid dates: start < ref_start, but end > ref_end")

    # long final coupon
    total = yearfrac(start, ref_end, "ACT/ACT ISMA", ref_start, ref_end)
    i = 0
    while True:
        new_ref_start = ref_end + pd.DateOffset(months=months * i)
        new_ref_end = ref_end + pd.DateOffset(months=months * (i + 1))
        if end < new_ref_end:
            break
        total += period
        i += 1

    return total + yearfrac(new_ref_start, end, "ACT/ACT ISMA", new_ref_start, new_ref_end)


def yearfrac(
    start: pd.Timestamp,
    end: pd.Timestamp,
    convention: str,
    ref_start: Optional[pd.Timestamp] = None,
    ref_end: Optional[pd.Timestamp] = None,
) -> float:
    """
    Year fraction between two dates under a day count convention.

    Supported:
    - ACT/365F (alias ACT/365)
    - ACT/360
    - 30/360 (US bond basis)
    - ACT/ACT (ISDA)
    - ACT/ACT ISMA (reference period aware)

    The result is antisymmetric: end < start gives a negative fraction.
    """
    start = pd.Timestamp(start)
    end = pd.Timestamp(end)
    convention = normalize_convention(convention)

    if start == end:
        return 0.0
    if end < start:
        return -yearfrac(end, start, convention, ref_start, ref_end)

    if convention == "ACT/365F":
        return (end - start).days / 365.0

    if convention == "ACT/360":
        return (end - start).days / 360.0

    if convention == "30/360":
        return _thirty_360_days(start, end) / 360.0

    if convention == "ACT/ACT":
        return _act_act_isda(start, end)

    return _act_act_isma(start, end, ref_start, ref_end)


@dataclass(frozen=True)
class DayCounter:
    """Day counter value object; two counters are equal iff conventions match."""
    convention: str = "ACT/365F"

    def __post_init__(self) -> None:
        object.__setattr__(self, "convention", normalize_convention(self.convention))

    def name(self) -> str:
        return self.convention

    def year_fraction(self, d1, d2, ref_start=None, ref_end=None) -> float:
        return yearfrac(d1, d2, self.convention, ref_start, ref_end)

    def day_count(self, d1, d2) -> int:
        return day_count(d1, d2, self.convention)

    def __str__(self) -> str:
        return self.convention


def months_per_period(freq: int) -> int:
    if freq <= 0 or 12 % freq != 0:
        raise ValueError(f"freq must divide 12, got {freq}")
    return 12 // int(freq)


def make_schedule(
    effective: pd.Timestamp,
    termination: pd.Timestamp,
    freq: int = 2,
) -> List[pd.Timestamp]:
    """
    Accrual schedule generated backward from the termination date.

    Returns ascending dates starting at `effective` and ending at
    `termination`; a misaligned effective date produces a short front stub.
    """
    effective = pd.Timestamp(effective)
    termination = pd.Timestamp(termination)

    if termination <= effective:
        raise ValueError("Termination must be after effective date.")

    months = months_per_period(freq)

    dates: List[pd.Timestamp] = [termination]
    i = 1
    while True:
        d = termination - pd.DateOffset(months=months * i)
        if d <= effective:
            break
        dates.append(d)
        i += 1

    dates.append(effective)
    return sorted(dates)


@lru_cache(maxsize=10_000)
def cached_schedule(effective: pd.Timestamp, termination: pd.Timestamp, freq: int) -> Tuple[pd.Timestamp, ...]:
    """Cache schedules by (effective, termination, freq)."""
    return tuple(make_schedule(pd.Timestamp(effective), pd.Timestamp(termination), int(freq)))
