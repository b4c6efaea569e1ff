import logging

import numpy as np
import pandas as pd
import pytest

from cashflow_engine import cashflows as cfs
from cashflow_engine.cashflow import FixedRateCoupon, Redemption, SimpleCashFlow, fixed_rate_leg
from cashflow_engine.curves import FlatForward, ZeroCurve
from cashflow_engine.duration import DurationType
from cashflow_engine.errors import (
    CompoundingMismatchError,
    EmptyLegError,
    InconsistentCouponAggregationError,
    NoCouponAtDateError,
    NoSignChangeError,
    UnsortedLegError,
    UnsupportedCompoundingError,
    ZeroBPSError,
)
from cashflow_engine.interest_rate import Compounding, Frequency, InterestRate
from cashflow_engine.settings import settings
from cashflow_engine.solvers import Brent
from cashflow_engine.utils import DayCounter


@pytest.fixture(scope="module")
def dc():
    return DayCounter("ACT/365F")


@pytest.fixture(scope="module")
def val_date():
    return pd.Timestamp("2026-02-13")


@pytest.fixture(scope="module")
def curve(val_date):
    dates = [
        pd.Timestamp("2026-08-13"),
        pd.Timestamp("2027-02-13"),
        pd.Timestamp("2029-02-13"),
        pd.Timestamp("2031-02-13"),
        pd.Timestamp("2036-02-13"),
    ]
    return ZeroCurve(val_date, dates, [0.975, 0.952, 0.870, 0.790, 0.610])


@pytest.fixture(scope="module")
def bond_leg(val_date, dc):
    """Five-year semiannual 4.5% fixed leg with redemption."""
    return fixed_rate_leg(val_date, pd.Timestamp("2031-02-13"), 100.0, 0.045, dc,
                          freq=2, compounding=Compounding.SIMPLE, redemption=True)


@pytest.fixture(scope="module")
def annual_leg(dc):
    """Three annual 5% simple coupons on 100, each period exactly 365 days."""
    rate = InterestRate(0.05, dc, Compounding.SIMPLE)
    dates = [pd.Timestamp(f"{y}-01-01") for y in (2021, 2022, 2023, 2024)]
    return [FixedRateCoupon(end, 100.0, rate, start, end) for start, end in zip(dates[:-1], dates[1:])]


@pytest.fixture(scope="module")
def annual_settle():
    return pd.Timestamp("2021-01-01")


def _same_date_coupons(dc, second_nominal=100.0):
    start, end = pd.Timestamp("2026-01-01"), pd.Timestamp("2026-07-01")
    c1 = FixedRateCoupon(end, 100.0, InterestRate(0.03, dc, Compounding.SIMPLE), start, end)
    c2 = FixedRateCoupon(end, second_nominal, InterestRate(0.02, dc, Compounding.SIMPLE), start, end)
    return [c1, c2]


# ---- date inspectors ----

def test_start_and_maturity(annual_leg):
    assert cfs.start_date(annual_leg) == pd.Timestamp("2021-01-01")
    assert cfs.maturity_date(annual_leg) == pd.Timestamp("2024-01-01")


def test_start_and_maturity_include_plain_flows(dc):
    leg = [SimpleCashFlow(5.0, pd.Timestamp("2020-06-01")), Redemption(100.0, pd.Timestamp("2030-06-01"))]
    assert cfs.start_date(leg) == pd.Timestamp("2020-06-01")
    assert cfs.maturity_date(leg) == pd.Timestamp("2030-06-01")


def test_previous_and_next_cash_flow(annual_leg):
    settle = pd.Timestamp("2022-06-01")
    assert cfs.previous_cash_flow_date(annual_leg, True, settle) == pd.Timestamp("2022-01-01")
    assert cfs.next_cash_flow_date(annual_leg, True, settle) == pd.Timestamp("2023-01-01")
    assert cfs.previous_cash_flow_amount(annual_leg, True, settle) == pytest.approx(5.0)
    assert cfs.next_cash_flow_amount(annual_leg, True, settle) == pytest.approx(5.0)
    assert cfs.previous_coupon_rate(annual_leg, True, settle) == pytest.approx(0.05)
    assert cfs.next_coupon_rate(annual_leg, True, settle) == pytest.approx(0.05)
    assert cfs.next_cash_flow(annual_leg, True, settle) is annual_leg[2]


def test_cash_flow_on_settlement_date(annual_leg):
    settle = pd.Timestamp("2022-01-01")
    assert cfs.next_cash_flow_date(annual_leg, True, settle) == settle
    assert cfs.next_cash_flow_date(annual_leg, False, settle) == pd.Timestamp("2023-01-01")
    assert cfs.previous_cash_flow_date(annual_leg, False, settle) == settle


def test_sentinels_before_first_and_after_last_flow(annual_leg):
    early = pd.Timestamp("2020-06-01")
    assert cfs.previous_cash_flow(annual_leg, True, early) is None
    assert cfs.previous_cash_flow_date(annual_leg, True, early) is None
    assert cfs.previous_cash_flow_amount(annual_leg, True, early) == 0.0
    assert cfs.previous_coupon_rate(annual_leg, True, early) == 0.0

    late = pd.Timestamp("2025-01-01")
    assert cfs.next_cash_flow_date(annual_leg, True, late) is None
    assert cfs.next_cash_flow_amount(annual_leg, True, late) == 0.0
    assert cfs.nominal(annual_leg, True, late) == 0.0
    assert cfs.accrual_start_date(annual_leg, True, late) is None
    assert cfs.accrued_amount(annual_leg, True, late) == 0.0


def test_is_expired(annual_leg):
    last = pd.Timestamp("2024-01-01")
    assert not cfs.is_expired(annual_leg, True, last)
    assert cfs.is_expired(annual_leg, False, last)
    assert not cfs.is_expired(annual_leg, False, pd.Timestamp("2022-06-01"))


def test_empty_leg_behaviour(dc, curve, val_date):
    with pytest.raises(EmptyLegError):
        cfs.start_date([])
    with pytest.raises(EmptyLegError):
        cfs.maturity_date([])
    assert cfs.is_expired([], True, val_date)
    assert cfs.next_cash_flow([], True, val_date) is None
    assert cfs.npv([], curve, True, val_date) == 0.0
    assert cfs.bps([], curve, True, val_date) == 0.0
    assert cfs.npvbps([], curve, True, val_date) == (0.0, 0.0)

    y = InterestRate(0.05, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    for fn in (cfs.yield_npv, cfs.modified_duration, cfs.convexity, cfs.basis_point_value, cfs.macaulay_duration):
        assert fn([], y, True, val_date) == 0.0, fn.__name__


# ---- coupon inspectors and aggregation ----

def test_coupon_inspectors(bond_leg, val_date):
    settle = pd.Timestamp("2026-05-13")
    assert cfs.nominal(bond_leg, True, settle) == 100.0
    assert cfs.accrual_start_date(bond_leg, True, settle) == val_date
    assert cfs.accrual_end_date(bond_leg, True, settle) == pd.Timestamp("2026-08-13")
    assert cfs.reference_period_start(bond_leg, True, settle) == val_date
    assert cfs.reference_period_end(bond_leg, True, settle) == pd.Timestamp("2026-08-13")
    assert cfs.accrual_period(bond_leg, True, settle) == pytest.approx(181 / 365)
    assert cfs.accrual_days(bond_leg, True, settle) == 181
    assert cfs.accrued_days(bond_leg, True, settle) == 89
    assert cfs.accrued_period(bond_leg, True, settle) == pytest.approx(89 / 365)
    assert cfs.accrued_amount(bond_leg, True, settle) == pytest.approx(100.0 * 0.045 * 89 / 365)


def test_coupon_rate_skips_redemption_on_same_date(bond_leg):
    settle = pd.Timestamp("2030-12-01")
    assert cfs.next_coupon_rate(bond_leg, True, settle) == pytest.approx(0.045)
    coupon = bond_leg[-2].amount()
    assert cfs.next_cash_flow_amount(bond_leg, True, settle) == pytest.approx(coupon + 100.0)


def test_same_date_coupons_aggregate(dc):
    leg = _same_date_coupons(dc)
    settle = pd.Timestamp("2026-03-01")
    assert cfs.next_coupon_rate(leg, True, settle) == pytest.approx(0.05)
    assert cfs.next_cash_flow_amount(leg, True, settle) == pytest.approx(100.0 * 0.05 * 181 / 365)
    assert cfs.previous_coupon_rate(leg, True, pd.Timestamp("2026-08-01")) == pytest.approx(0.05)


def test_accrued_amount_sums_coupons_but_period_uses_first(dc):
    # accrued_amount covers every coupon on the date; period/day accessors only the first
    leg = _same_date_coupons(dc)
    settle = pd.Timestamp("2026-03-01")
    assert cfs.accrued_amount(leg, True, settle) == pytest.approx(100.0 * 0.05 * 59 / 365)
    assert cfs.accrued_period(leg, True, settle) == pytest.approx(59 / 365)
    assert cfs.accrued_days(leg, True, settle) == 59
    assert cfs.nominal(leg, True, settle) == 100.0


def test_inconsistent_coupons_rejected(dc):
    leg = _same_date_coupons(dc, second_nominal=200.0)
    with pytest.raises(InconsistentCouponAggregationError):
        cfs.next_coupon_rate(leg, True, pd.Timestamp("2026-03-01"))
    with pytest.raises(InconsistentCouponAggregationError):
        cfs.previous_coupon_rate(leg, True, pd.Timestamp("2026-08-01"))


def test_no_coupon_at_date(val_date):
    leg = [SimpleCashFlow(10.0, pd.Timestamp("2026-06-01"))]
    with pytest.raises(NoCouponAtDateError):
        cfs.next_coupon_rate(leg, True, val_date)
    assert cfs.nominal(leg, True, val_date) == 0.0


# ---- term structure ----

def test_npv_matches_manual_discounting(bond_leg, curve, val_date):
    expected = sum(cf.amount() * curve.discount(cf.date()) for cf in bond_leg)
    assert cfs.npv(bond_leg, curve, True, val_date) == pytest.approx(expected, rel=1e-12)


def test_npv_forward_to_npv_date(bond_leg, curve, val_date):
    npv_dt = pd.Timestamp("2027-02-13")
    spot = cfs.npv(bond_leg, curve, True, val_date)
    assert cfs.npv(bond_leg, curve, True, val_date, npv_dt) == pytest.approx(spot / curve.discount(npv_dt))


def test_unset_settlement_uses_evaluation_date(bond_leg, curve, val_date):
    with settings.override(evaluation_date=val_date):
        assert cfs.npv(bond_leg, curve, True) == cfs.npv(bond_leg, curve, True, val_date)
        assert cfs.next_cash_flow_date(bond_leg, True) == pd.Timestamp("2026-08-13")


def test_npvbps_agrees_with_separate_calls(bond_leg, curve, val_date):
    npv, bps = cfs.npvbps(bond_leg, curve, True, val_date)
    assert npv == pytest.approx(cfs.npv(bond_leg, curve, True, val_date), rel=1e-12)
    assert bps == pytest.approx(cfs.bps(bond_leg, curve, True, val_date), rel=1e-12)


def test_bps_is_npv_change_for_one_bp_coupon(bond_leg, curve, val_date, dc):
    bumped = fixed_rate_leg(val_date, pd.Timestamp("2031-02-13"), 100.0, 0.0451, dc,
                            freq=2, compounding=Compounding.SIMPLE, redemption=True)
    diff = cfs.npv(bumped, curve, True, val_date) - cfs.npv(bond_leg, curve, True, val_date)
    assert cfs.bps(bond_leg, curve, True, val_date) == pytest.approx(diff, rel=1e-9)


def test_atm_rate_round_trip(bond_leg, curve, val_date):
    target = cfs.npv(bond_leg, curve, True, val_date)
    assert cfs.atm_rate(bond_leg, curve, True, val_date) == pytest.approx(0.045, rel=1e-12)
    assert cfs.atm_rate(bond_leg, curve, True, val_date, target_npv=target) == pytest.approx(0.045, rel=1e-12)


def test_atm_rate_without_coupons(curve, val_date):
    leg = [Redemption(100.0, pd.Timestamp("2027-02-13"))]
    assert cfs.atm_rate(leg, curve, True, val_date) == 0.0
    with pytest.raises(ZeroBPSError):
        cfs.atm_rate(leg, curve, True, val_date, target_npv=50.0)


def test_ex_coupon_flow_excluded(dc):
    settle = pd.Timestamp("2026-06-26")
    rate = InterestRate(0.05, dc, Compounding.SIMPLE)
    cp = FixedRateCoupon(pd.Timestamp("2026-07-01"), 100.0, rate, pd.Timestamp("2026-01-01"),
                         pd.Timestamp("2026-07-01"), ex_coupon_date=pd.Timestamp("2026-06-24"))
    leg = [cp, Redemption(100.0, pd.Timestamp("2026-07-01"))]

    flat = FlatForward(settle, rate)
    assert cfs.npv(leg, flat, True, settle) == pytest.approx(100.0 * flat.discount(pd.Timestamp("2026-07-01")))
    assert cfs.yield_npv(leg, rate, True, settle) == pytest.approx(100.0 / (1.0 + 0.05 * 5 / 365))


# ---- flat yield ----

def test_simple_yield_npv_worked_example(annual_leg, annual_settle, dc):
    # step discounting compounds the simple rate across periods
    expected = sum(5.0 / 1.05 ** k for k in (1, 2, 3))
    npv = cfs.yield_npv(annual_leg, 0.05, True, annual_settle, day_counter=dc, compounding=Compounding.SIMPLE)
    assert npv == pytest.approx(expected, rel=1e-12)

    first = cfs.yield_npv(annual_leg[:1], 0.05, True, annual_settle, day_counter=dc,
                          compounding=Compounding.SIMPLE)
    assert first == pytest.approx(100.0 * 0.05 / (1.0 + 0.05))


def test_yield_npv_accepts_rate_object_or_parts(bond_leg, val_date, dc):
    y = InterestRate(0.04, dc, Compounding.COMPOUNDED, Frequency.SEMIANNUAL)
    a = cfs.yield_npv(bond_leg, y, True, val_date)
    b = cfs.yield_npv(bond_leg, 0.04, True, val_date, day_counter="ACT/365F",
                      compounding=Compounding.COMPOUNDED, frequency=Frequency.SEMIANNUAL)
    assert a == b


def test_yield_npv_decreasing_in_yield(bond_leg, val_date, dc):
    values = [
        cfs.yield_npv(bond_leg, InterestRate(r, dc, Compounding.COMPOUNDED, Frequency.SEMIANNUAL), True, val_date)
        for r in np.linspace(0.0, 0.10, 11)
    ]
    assert all(a > b for a, b in zip(values[:-1], values[1:])), "NPV must fall as yield rises"


def test_yield_npv_mid_period_stub(dc):
    settle = pd.Timestamp("2026-03-01")
    rate = InterestRate(0.05, dc, Compounding.SIMPLE)
    cp = FixedRateCoupon(pd.Timestamp("2026-07-01"), 100.0, rate, pd.Timestamp("2026-01-01"), pd.Timestamp("2026-07-01"))
    assert cfs.yield_npv([cp], rate, True, settle) == pytest.approx(cp.amount() / (1.0 + 0.05 * 122 / 365))


def test_stepwise_discount_time(dc):
    rate = InterestRate(0.05, dc, Compounding.SIMPLE)
    start, end = pd.Timestamp("2026-01-01"), pd.Timestamp("2026-07-01")
    cp = FixedRateCoupon(end, 100.0, rate, start, end)
    npv_dt = pd.Timestamp("2026-03-01")

    assert cfs.stepwise_discount_time(cp, dc, npv_dt, npv_dt) == pytest.approx(122 / 365)
    assert cfs.stepwise_discount_time(cp, dc, start, start) == pytest.approx(181 / 365)

    isma = DayCounter("ACT/ACT ISMA")
    assert cfs.stepwise_discount_time(cp, isma, npv_dt, npv_dt) == pytest.approx(0.5 * 122 / 181)

    plain = SimpleCashFlow(100.0, end)
    assert cfs.stepwise_discount_time(plain, isma, start, start) == pytest.approx(181 / 365)


def test_unsorted_leg_detected_with_safety_checks(annual_leg, annual_settle, dc):
    y = InterestRate(0.05, dc, Compounding.SIMPLE)
    with settings.override(extra_safety_checks=True):
        with pytest.raises(UnsortedLegError):
            cfs.yield_npv(list(reversed(annual_leg)), y, True, annual_settle)


# ---- durations and convexity ----

@pytest.fixture(scope="module")
def zero_leg(annual_settle):
    """Single flow two years (730 days) after settlement."""
    return [SimpleCashFlow(100.0, annual_settle + pd.Timedelta(days=730))]


def test_zero_coupon_durations_compounded(zero_leg, annual_settle, dc):
    y = InterestRate(0.05, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    assert cfs.simple_duration(zero_leg, y, True, annual_settle) == pytest.approx(2.0)
    assert cfs.modified_duration(zero_leg, y, True, annual_settle) == pytest.approx(2.0 / 1.05)
    assert cfs.macaulay_duration(zero_leg, y, True, annual_settle) == pytest.approx(2.0), \
        "Macaulay duration of a zero equals its time to payment"
    assert cfs.convexity(zero_leg, y, True, annual_settle) == pytest.approx(2.0 * 3.0 / 1.05 ** 2)


def test_zero_coupon_durations_continuous_and_simple(zero_leg, annual_settle, dc):
    cont = InterestRate(0.05, dc, Compounding.CONTINUOUS)
    assert cfs.modified_duration(zero_leg, cont, True, annual_settle) == pytest.approx(2.0)
    assert cfs.convexity(zero_leg, cont, True, annual_settle) == pytest.approx(4.0)

    simple = InterestRate(0.05, dc, Compounding.SIMPLE)
    assert cfs.modified_duration(zero_leg, simple, True, annual_settle) == pytest.approx(2.0 / 1.1)
    assert cfs.convexity(zero_leg, simple, True, annual_settle) == pytest.approx(2.0 * 4.0 / 1.1 ** 2)


def test_hybrid_compounding_regimes(zero_leg, annual_settle, dc):
    cts = InterestRate(0.05, dc, Compounding.COMPOUNDED_THEN_SIMPLE, Frequency.ANNUAL)
    assert cfs.modified_duration(zero_leg, cts, True, annual_settle) == pytest.approx(2.0 / 1.1), \
        "beyond one period the simple branch applies"

    stc = InterestRate(0.05, dc, Compounding.SIMPLE_THEN_COMPOUNDED, Frequency.ANNUAL)
    assert cfs.modified_duration(zero_leg, stc, True, annual_settle) == pytest.approx(2.0 / 1.05)


def test_duration_dispatch(bond_leg, val_date, dc):
    y = InterestRate(0.04, dc, Compounding.COMPOUNDED, Frequency.SEMIANNUAL)
    assert cfs.duration(bond_leg, y, DurationType.MODIFIED, True, val_date) == \
        cfs.modified_duration(bond_leg, y, True, val_date)
    assert cfs.duration(bond_leg, y, DurationType.MACAULAY, True, val_date) == \
        cfs.macaulay_duration(bond_leg, y, True, val_date)
    assert cfs.duration(bond_leg, y, DurationType.SIMPLE, True, val_date) == \
        cfs.simple_duration(bond_leg, y, True, val_date)


def test_macaulay_requires_compounded(bond_leg, val_date, dc):
    with pytest.raises(CompoundingMismatchError):
        cfs.macaulay_duration(bond_leg, InterestRate(0.04, dc, Compounding.SIMPLE), True, val_date)


def test_unknown_compounding_in_duration(bond_leg, val_date, dc):
    with pytest.raises(UnsupportedCompoundingError):
        cfs.modified_duration(bond_leg, InterestRate(0.04, dc, "bogus"), True, val_date)


def test_duration_and_convexity_match_finite_differences(bond_leg, val_date, dc):
    def price(r):
        return cfs.yield_npv(bond_leg, InterestRate(r, dc, Compounding.COMPOUNDED, Frequency.ANNUAL),
                             True, val_date)

    y = InterestRate(0.04, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    p = price(0.04)

    h = 1e-5
    fd_duration = -(price(0.04 + h) - price(0.04 - h)) / (2 * h * p)
    assert cfs.modified_duration(bond_leg, y, True, val_date) == pytest.approx(fd_duration, rel=1e-6)

    h = 1e-4
    fd_convexity = (price(0.04 + h) - 2 * p + price(0.04 - h)) / (h * h * p)
    assert cfs.convexity(bond_leg, y, True, val_date) == pytest.approx(fd_convexity, rel=1e-5)


def test_basis_point_value_close_to_bumped_npv(bond_leg, val_date, dc):
    y = InterestRate(0.04, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    bumped = InterestRate(0.0401, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    dv01 = cfs.yield_npv(bond_leg, bumped, True, val_date) - cfs.yield_npv(bond_leg, y, True, val_date)
    bpv = cfs.basis_point_value(bond_leg, y, True, val_date)
    assert bpv < 0.0
    assert bpv == pytest.approx(dv01, abs=1e-4)


def test_yield_value_basis_point(bond_leg, val_date, dc):
    y = InterestRate(0.04, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    p = cfs.yield_npv(bond_leg, y, True, val_date)
    d = cfs.modified_duration(bond_leg, y, True, val_date)
    assert cfs.yield_value_basis_point(bond_leg, y, True, val_date) == pytest.approx(-0.01 / (p * d))


def test_yield_bps_uses_flat_curve(bond_leg, val_date, dc):
    y = InterestRate(0.04, dc, Compounding.CONTINUOUS)
    expected = cfs.bps(bond_leg, FlatForward(val_date, y), True, val_date)
    assert cfs.yield_bps(bond_leg, y, True, val_date) == pytest.approx(expected)


# ---- IRR ----

@pytest.fixture(scope="module")
def irr_settle():
    return pd.Timestamp("2026-04-20")


def test_irr_round_trip(bond_leg, irr_settle, dc):
    y = InterestRate(0.0437, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    target = cfs.yield_npv(bond_leg, y, True, irr_settle)

    found = cfs.irr(bond_leg, target, dc, Compounding.COMPOUNDED, Frequency.ANNUAL, True, irr_settle)
    assert found == pytest.approx(0.0437, abs=1e-8)

    repriced = cfs.yield_npv(bond_leg, InterestRate(found, dc, Compounding.COMPOUNDED, Frequency.ANNUAL),
                             True, irr_settle)
    assert repriced == pytest.approx(target, abs=1e-6)


def test_irr_with_brent_solver(bond_leg, irr_settle, dc):
    y = InterestRate(0.0612, dc, Compounding.CONTINUOUS)
    target = cfs.yield_npv(bond_leg, y, True, irr_settle)
    found = cfs.irr(bond_leg, target, dc, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY, True, irr_settle,
                    solver=Brent())
    assert found == pytest.approx(0.0612, abs=1e-8)


def test_irr_rejects_unreachable_price(bond_leg, irr_settle, dc):
    with pytest.raises(NoSignChangeError):
        cfs.IrrFinder(bond_leg, -10.0, dc, Compounding.COMPOUNDED, Frequency.ANNUAL, True, irr_settle)
    with pytest.raises(NoSignChangeError):
        cfs.irr(bond_leg, -10.0, dc, Compounding.COMPOUNDED, Frequency.ANNUAL, True, irr_settle)


def test_irr_warns_on_multiple_sign_changes(dc, caplog):
    settle = pd.Timestamp("2026-01-01")
    leg = [
        SimpleCashFlow(100.0, pd.Timestamp("2027-01-01")),
        SimpleCashFlow(-250.0, pd.Timestamp("2028-01-01")),
        SimpleCashFlow(160.0, pd.Timestamp("2029-01-01")),
    ]
    with caplog.at_level(logging.WARNING, logger="cashflow_engine.cashflows"):
        finder = cfs.IrrFinder(leg, 5.0, dc, Compounding.COMPOUNDED, Frequency.ANNUAL, True, settle)
    assert finder.check_sign() == 3
    assert "sign changes" in caplog.text


def test_irr_finder_objective(bond_leg, irr_settle, dc):
    y = InterestRate(0.05, dc, Compounding.COMPOUNDED, Frequency.ANNUAL)
    target = cfs.yield_npv(bond_leg, y, True, irr_settle)
    finder = cfs.IrrFinder(bond_leg, target, dc, Compounding.COMPOUNDED, Frequency.ANNUAL, True, irr_settle)
    assert finder(0.05) == pytest.approx(0.0, abs=1e-10)
    assert finder(0.04) < 0.0 < finder(0.06)
    assert finder.derivative(0.05) == pytest.approx(cfs.modified_duration(bond_leg, y, True, irr_settle))


# ---- z-spread ----

def test_zero_z_spread_equals_npv(bond_leg, curve, val_date, dc):
    zs = cfs.zspread_npv(bond_leg, curve, 0.0, dc, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY, True, val_date)
    assert zs == pytest.approx(cfs.npv(bond_leg, curve, True, val_date), rel=1e-12)


def test_z_spread_round_trip(bond_leg, curve, val_date, dc):
    target = cfs.zspread_npv(bond_leg, curve, 0.0123, dc, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY,
                             True, val_date)
    found = cfs.z_spread(bond_leg, target, curve, dc, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY,
                         True, val_date)
    assert found == pytest.approx(0.0123, abs=1e-8)


def test_z_spread_compounded_spread(bond_leg, curve, val_date, dc):
    target = cfs.zspread_npv(bond_leg, curve, -0.004, dc, Compounding.COMPOUNDED, Frequency.SEMIANNUAL,
                             True, val_date)
    assert target > cfs.npv(bond_leg, curve, True, val_date), "negative spread raises the price"
    found = cfs.z_spread(bond_leg, target, curve, dc, Compounding.COMPOUNDED, Frequency.SEMIANNUAL,
                         True, val_date)
    assert found == pytest.approx(-0.004, abs=1e-8)


def test_z_spread_with_rate_day_counter_different_from_curve(curve, val_date):
    leg = fixed_rate_leg(val_date, pd.Timestamp("2031-02-13"), 100.0, 0.045, DayCounter("30/360"),
                         freq=2, compounding=Compounding.SIMPLE, redemption=True)
    act360 = DayCounter("ACT/360")

    base = cfs.npv(leg, curve, True, val_date)
    zero = cfs.zspread_npv(leg, curve, 0.0, act360, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY, True, val_date)
    assert zero == pytest.approx(base, rel=1e-12), "zero spread must reprice on the base curve"

    target = cfs.zspread_npv(leg, curve, 0.0123, act360, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY,
                             True, val_date)
    found = cfs.z_spread(leg, target, curve, act360, Compounding.CONTINUOUS, Frequency.NO_FREQUENCY,
                         True, val_date)
    assert found == pytest.approx(0.0123, abs=1e-8)


def test_amount_sentinels_are_floats(annual_leg):
    early = pd.Timestamp("2020-06-01")
    late = pd.Timestamp("2025-01-01")
    assert isinstance(cfs.previous_cash_flow_amount(annual_leg, True, early), float)
    assert isinstance(cfs.next_cash_flow_amount(annual_leg, True, late), float)
    assert isinstance(cfs.accrued_amount(annual_leg, True, late), float)
