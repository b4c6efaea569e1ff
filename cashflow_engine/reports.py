from __future__ import annotations

import numpy as np
import pandas as pd

from .cashflows import (
    Leg,
    basis_point_value,
    convexity,
    macaulay_duration,
    modified_duration,
    simple_duration,
    stepwise_discount_time,
    yield_bps,
    yield_npv,
    yield_value_basis_point,
)
from .interest_rate import Compounding, Frequency, InterestRate, as_interest_rate
from .settings import BASIS_POINT, resolve_dates

_COLUMNS = [
    "date", "amount", "is_coupon", "nominal", "accrual_period",
    "step_time", "time", "step_discount", "discount", "pv",
]


def cashflow_table(
    leg: Leg,
    y,
    include_settlement_date_flows: bool,
    settlement_date=None,
    npv_date=None,
    *,
    day_counter=None,
    compounding=None,
    frequency=Frequency.NO_FREQUENCY,
) -> pd.DataFrame:
    """
    One row per flow still alive at settlement, discounted step by step at a
    flat yield. The `pv` column sums to `yield_npv` on the same inputs.
    """
    y = as_interest_rate(y, day_counter, compounding, frequency)
    settlement, npv_dt = resolve_dates(settlement_date, npv_date)

    rows = []
    last = npv_dt
    for cf in leg:
        if cf.has_occurred(settlement, include_settlement_date_flows):
            continue

        cp = cf.as_coupon()
        amount = 0.0 if cf.trading_ex_coupon(settlement) else cf.amount()
        step = stepwise_discount_time(cf, y.day_counter, npv_dt, last)
        rows.append(
            (
                cf.date(),
                amount,
                cp is not None,
                cp.nominal() if cp is not None else np.nan,
                cp.accrual_period() if cp is not None else np.nan,
                step,
                y.discount_factor(step),
            )
        )
        last = cf.date()

    out = pd.DataFrame(rows, columns=_COLUMNS[:6] + ["step_discount"])
    out["time"] = out["step_time"].cumsum()
    out["discount"] = np.cumprod(out["step_discount"].to_numpy(dtype=float))
    out["pv"] = out["amount"] * out["discount"]
    return out[_COLUMNS]


def risk_summary(
    leg: Leg,
    y,
    include_settlement_date_flows: bool,
    settlement_date=None,
    npv_date=None,
    *,
    day_counter=None,
    compounding=None,
    frequency=Frequency.NO_FREQUENCY,
) -> pd.Series:
    """
    Flat-yield risk figures for a leg, plus a bumped-yield DV01 to compare
    with the Taylor basis point value.
    """
    y = as_interest_rate(y, day_counter, compounding, frequency)
    settlement, npv_dt = resolve_dates(settlement_date, npv_date)
    args = (leg, y, include_settlement_date_flows, settlement, npv_dt)

    base = yield_npv(*args)
    bumped_rate = InterestRate(y.rate + BASIS_POINT, y.day_counter, y.compounding, y.frequency)
    bumped = yield_npv(leg, bumped_rate, include_settlement_date_flows, settlement, npv_dt)

    out = {
        "npv": base,
        "bps": yield_bps(*args),
        "simple_duration": simple_duration(*args),
        "modified_duration": modified_duration(*args),
        "macaulay_duration": macaulay_duration(*args) if y.compounding == Compounding.COMPOUNDED else np.nan,
        "convexity": convexity(*args),
        "basis_point_value": basis_point_value(*args),
        "yield_value_basis_point": yield_value_basis_point(*args) if base != 0.0 else np.nan,
        "dv01_bumped": bumped - base,
    }
    return pd.Series(out, name=str(y))
