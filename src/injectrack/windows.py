# src/injectrack/windows.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from . import config
from .types import InjectionEvent, Period, PERIOD_DAYS


def window_days(window: Period | int) -> int:
    """
    Number of days a reporting window covers.
    Accepts a period name ("week", "month", "quarter", "year") or a day count.
    """
    if isinstance(window, bool):
        raise ValueError(f"window must be a period name or a day count (got {window!r}).")
    if isinstance(window, int):
        if window < 0:
            raise ValueError(f"window must be >= 0 days (got {window}).")
        return window
    try:
        return PERIOD_DAYS[window]
    except KeyError:
        raise ValueError(f"Unknown reporting period {window!r}; "
                         f"expected one of {sorted(PERIOD_DAYS)}.") from None


def sample_grid(as_of: datetime, horizon_days: int = config.HORIZON_DAYS) -> list[date]:
    """
    One calendar date per day from `horizon_days` before as_of through as_of, inclusive.
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0 (got {horizon_days}).")
    end = as_of.date()
    start = end - timedelta(days=horizon_days)
    return [start + timedelta(days=i) for i in range(horizon_days + 1)]


def window_dates(as_of: datetime, window: Period | int) -> list[date]:
    """
    Dates shown for a window: the last N days ending today (today included).
    """
    n = window_days(window)
    end = as_of.date()
    return [end - timedelta(days=n - 1 - i) for i in range(n)]


def default_period(history: Iterable[InjectionEvent]) -> Period:
    """
    Pick the initial period from how much history there is:
      >= 60 days recorded -> quarter, >= 8 days -> month, otherwise week.
    No dated history -> quarter.
    """
    stamps = [e.timestamp for e in history if e.timestamp is not None]
    if not stamps:
        return "quarter"
    span = max(stamps) - min(stamps)
    # partial days count as a whole day
    days = span.days + (1 if span.seconds or span.microseconds else 0)
    if days >= 60:
        return "quarter"
    if days >= 8:
        return "month"
    return "week"
