# src/injectrack/metrics.py
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, Mapping

import numpy as np

from . import config
from .types import DosageSummary, InjectionEvent, MedicationClass, Period, SeriesResult, Statistics
from .helpers import DEFAULT_CLASS
from .engine import authoritative_series
from .windows import window_days

_SITE_PLACEHOLDERS = {"", "undefined", "null"}


def compute_statistics(series: Mapping, window: Period | int, *,
                       min_excludes_zero: bool = config.MIN_EXCLUDES_ZERO) -> Statistics:
    """
    Max / min / average / sum of a windowed daily series (mg).

    max      : over every sample, zeros included
    min      : over strictly positive samples (or all samples if
               min_excludes_zero is False); 0 when there is nothing to take
    average  : sum / nominal window length in days, so a window that is only
               partly covered by data reads proportionally low
    """
    values = np.fromiter((float(v) for v in series.values()), dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return Statistics()

    total = float(np.sum(values))
    days = window_days(window)
    average = total / days if days > 0 else 0.0

    pool = values[values > 0] if min_excludes_zero else values
    minimum = float(np.min(pool)) if pool.size else 0.0

    return Statistics(maximum=float(np.max(values)), minimum=minimum,
                      average=average, total=total)


def summarize(result: SeriesResult, cls: MedicationClass = DEFAULT_CLASS, *,
              min_excludes_zero: bool = config.MIN_EXCLUDES_ZERO) -> Statistics:
    """Statistics of the class's authoritative series over the result's window."""
    series = authoritative_series(result, cls)
    return compute_statistics(series, result.window_days, min_excludes_zero=min_excludes_zero)


def injection_counts(history: Iterable[InjectionEvent], as_of: datetime) -> dict[str, int]:
    """Injections logged in the trailing 7 and 30 days."""
    week_ago = as_of - timedelta(days=7)
    month_ago = as_of - timedelta(days=30)
    stamps = [e.timestamp for e in history if e.timestamp is not None]
    return {
        "last_7_days": sum(1 for t in stamps if t >= week_ago),
        "last_30_days": sum(1 for t in stamps if t >= month_ago),
    }


def dosage_summary(history: Iterable[InjectionEvent], window: Period | int,
                   as_of: datetime) -> DosageSummary:
    """
    Dose sizes of the injections inside the window (time >= as_of - N days).
    """
    cutoff = as_of - timedelta(days=window_days(window))
    doses = np.array([e.dosage_mg for e in history
                      if e.timestamp is not None and e.timestamp >= cutoff],
                     dtype=float)
    doses = doses[np.isfinite(doses)]
    if doses.size == 0:
        return DosageSummary()
    return DosageSummary(
        count=int(doses.size),
        maximum=float(np.max(doses)),
        minimum=float(np.min(doses)),
        average=float(np.mean(doses)),
        total=float(np.sum(doses)),
    )


def site_frequency(history: Iterable[InjectionEvent]) -> Counter:
    """How often each injection site was used; blank/placeholder sites are skipped."""
    return Counter(
        e.site for e in history
        if e.site and e.site.strip().lower() not in _SITE_PLACEHOLDERS
    )
