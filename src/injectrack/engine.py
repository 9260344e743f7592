# src/injectrack/engine.py
import logging
from datetime import datetime
from typing import Iterable, Sequence

import numpy as np

from . import config
from .types import InjectionEvent, MedicationClass, Period, SeriesResult, TimeSeries
from .models.exponential import decay_curve, residual_level
from .helpers import (
    DEFAULT_CLASS, as_class_list, class_members, medication_names, split_history_by_medication,
)
from .windows import sample_grid, window_dates, window_days

logger = logging.getLogger("injectrack.engine")

MINUTES_PER_DAY = 24 * 60

Classes = MedicationClass | Sequence[MedicationClass] | None


def compute_full_series(history: Iterable[InjectionEvent], classes: Classes = DEFAULT_CLASS,
                        as_of: datetime | None = None,
                        horizon_days: int = config.HORIZON_DAYS) -> SeriesResult:
    """
    Daily level curve per medication over the whole sample grid.

    Every event in the history is integrated, including doses older than the
    grid, so residual levels carry into the first sampled days.

    Each event is sampled at its own time-of-day on every grid date, which
    makes the elapsed time a whole number of days: a dose reads its full
    amount on its injection date and half of it one half-life later.

    Parameters
    ----------
    history : iterable of InjectionEvent
        Full injection history, any order. Inert events (bad dose, half-life
        or timestamp) keep their medication in the output but add nothing.
    classes : MedicationClass or sequence of them
        Classes with more than one member get an extra summed series keyed
        by the class label.
    as_of : datetime, optional
        "Now". Defaults to the current wall-clock time.
    horizon_days : int
        How many days back the grid reaches (grid has horizon_days + 1 dates).

    Returns
    -------
    SeriesResult
        With window_days equal to the number of grid dates.
    """
    if as_of is None:
        as_of = datetime.now()
    history = list(history)
    grid = sample_grid(as_of, horizon_days)
    start = grid[0]
    offsets = np.arange(len(grid), dtype=float)

    # 1) One zero curve per medication ever logged
    names = medication_names(history)
    levels: dict[str, np.ndarray] = {name: np.zeros(len(grid)) for name in names}

    # 2) Superpose each usable dose onto its medication's curve
    groups = split_history_by_medication(history)
    for name, events in groups.items():
        for e in events:
            shift = (e.timestamp.date() - start).days
            elapsed_min = (offsets - shift) * MINUTES_PER_DAY
            levels[name] += decay_curve(e.dosage_mg, e.half_life_minutes, elapsed_min)

    inert = len(history) - sum(len(events) for events in groups.values())
    if inert:
        logger.debug("Skipped %d inert injections (bad dose, half-life or timestamp)", inert)

    # 3) Class aggregates, only when a class has several members
    aggregates: dict[str, np.ndarray] = {}
    for cls in as_class_list(classes):
        members = class_members(names, cls)
        if len(members) > 1:
            aggregates[cls.label] = np.sum([levels[m] for m in members], axis=0)

    logger.debug("Computed %d medication series and %d aggregates over %d days",
                 len(levels), len(aggregates), len(grid))

    return SeriesResult(
        dates=tuple(grid),
        series_by_medication={name: _to_series(grid, arr) for name, arr in levels.items()},
        aggregate_series_by_class={label: _to_series(grid, arr) for label, arr in aggregates.items()},
        window_days=len(grid),
    )


def filter_window(result: SeriesResult, window: Period | int, as_of: datetime) -> SeriesResult:
    """
    Truncate full-grid series to a reporting window. Nothing is recomputed.

    Window dates outside the grid are dropped; window_days stays nominal.
    """
    wanted = set(window_dates(as_of, window))
    kept = tuple(d for d in result.dates if d in wanted)

    def cut(series: TimeSeries) -> TimeSeries:
        return {d: series[d] for d in kept}

    return SeriesResult(
        dates=kept,
        series_by_medication={k: cut(v) for k, v in result.series_by_medication.items()},
        aggregate_series_by_class={k: cut(v) for k, v in result.aggregate_series_by_class.items()},
        window_days=window_days(window),
    )


def compute_series(history: Iterable[InjectionEvent], window: Period | int,
                   classes: Classes = DEFAULT_CLASS, as_of: datetime | None = None,
                   horizon_days: int = config.HORIZON_DAYS) -> SeriesResult:
    """
    High-level wrapper: full-grid computation, then the window's slice.
    """
    if as_of is None:
        as_of = datetime.now()
    full = compute_full_series(history, classes, as_of=as_of, horizon_days=horizon_days)
    return filter_window(full, window, as_of)


def authoritative_series(result: SeriesResult, cls: MedicationClass = DEFAULT_CLASS) -> TimeSeries:
    """
    The series that stands for "the" level of a class:
      - the class aggregate when several members exist,
      - the single member's own series when only one exists,
      - with no member at all, the only medication if there is exactly one,
      - otherwise an empty series.
    """
    if cls.label in result.aggregate_series_by_class:
        return result.aggregate_series_by_class[cls.label]
    members = class_members(result.series_by_medication, cls)
    if len(members) == 1:
        return result.series_by_medication[members[0]]
    if not members and len(result.series_by_medication) == 1:
        return next(iter(result.series_by_medication.values()))
    return {}


def level_at(history: Iterable[InjectionEvent], at: datetime,
             cls: MedicationClass = DEFAULT_CLASS) -> float:
    """
    Summed class level at an instant from injections strictly before it.

    Used for the "level at this injection" readout, i.e. the trough the new
    dose lands on.
    """
    return float(sum(
        residual_level(e.dosage_mg, e.half_life_minutes, e.timestamp, at)
        for e in history
        if e.is_active and e.timestamp < at and cls.matches(e.medication_name)
    ))


def _to_series(grid, arr: np.ndarray) -> TimeSeries:
    return {d: float(v) for d, v in zip(grid, arr)}
