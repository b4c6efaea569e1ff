"""
Ambient settings and numerical defaults.

The engine itself is stateless; the only process-wide inputs are the values
held by `settings`. They are read (never written) when a caller leaves the
settlement date unset. Callers pricing from several threads should pin the
evaluation date (pass explicit settlement dates, or snapshot it with
`settings.override`) before fanning out.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields
from typing import Iterator, Optional, Tuple

import pandas as pd

BASIS_POINT = 1.0e-4

DEFAULT_ACCURACY = 1.0e-10
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_YIELD_GUESS = 0.05
DEFAULT_ZSPREAD_GUESS = 0.0
DEFAULT_ZSPREAD_STEP = 0.01


@dataclass
class Settings:
    """
    Process-wide pricing settings.

    - evaluation_date: "today" for pricing; None means the system date.
    - include_reference_date_events: whether an event on the reference date
      counts as not yet occurred.
    - include_todays_cash_flows: overrides the previous flag when the
      reference date is the evaluation date (None = no override).
    - enforces_todays_historic_fixings: fixings on the evaluation date are
      treated as historic by index-linked collaborators.
    - extra_safety_checks: verify legs are sorted by payment date.
    """
    evaluation_date: Optional[pd.Timestamp] = None
    include_reference_date_events: bool = False
    include_todays_cash_flows: Optional[bool] = None
    enforces_todays_historic_fixings: bool = False
    extra_safety_checks: bool = False

    def today(self) -> pd.Timestamp:
        if self.evaluation_date is None:
            return pd.Timestamp.today().normalize()
        return pd.Timestamp(self.evaluation_date)

    @contextmanager
    def override(self, **values) -> Iterator["Settings"]:
        """Temporarily set attributes, restoring the previous values on exit."""
        names = {f.name for f in fields(self)}
        unknown = set(values) - names
        if unknown:
            raise AttributeError(f"Unknown settings: {sorted(unknown)}")

        saved = {k: getattr(self, k) for k in values}
        for k, v in values.items():
            setattr(self, k, v)
        try:
            yield self
        finally:
            for k, v in saved.items():
                setattr(self, k, v)


settings = Settings()


def resolve_dates(
    settlement_date=None,
    npv_date=None,
    config: Optional[Settings] = None,
) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """
    Default-resolution rule shared by every entry point:
    settlement defaults to the evaluation date, npv date to settlement.
    """
    config = settings if config is None else config

    settlement = config.today() if settlement_date is None else pd.Timestamp(settlement_date)
    npv_dt = settlement if npv_date is None else pd.Timestamp(npv_date)
    return settlement, npv_dt
