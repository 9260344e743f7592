# src/injectrack/projection.py
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

import numpy as np

from . import config
from .types import InjectionEvent, MedicationClass, ProjectionPoint
from .models.exponential import decay_curve
from .dosing import repeat_injection
from .helpers import DEFAULT_CLASS, latest_active

logger = logging.getLogger("injectrack.projection")


def project_levels(history: Iterable[InjectionEvent], cls: MedicationClass = DEFAULT_CLASS,
                   days: int = config.PROJECTION_DAYS) -> list[ProjectionPoint]:
    """
    Daily class level for `days` days after the last injection, assuming the
    most recent dose keeps being repeated at the most recent interval.

    The interval is the gap between the two latest injections, raised to one
    day when shorter; projected doses alternate between the last site and
    its mirror. Each day is sampled
    at the last injection's time-of-day, except on projected injection days,
    which are sampled at the dose itself.

    Returns an empty list when there are fewer than two usable injections or
    the two latest share a timestamp.
    """
    history = list(history)
    recent = latest_active(history, 2)
    if len(recent) < 2:
        return []
    last, previous = recent
    interval = last.timestamp - previous.timestamp
    if interval <= timedelta(0):
        logger.debug("No projection: latest injections %r and %r share a timestamp", last.id, previous.id)
        return []
    if interval < timedelta(days=1):
        # at most one projected dose per day
        logger.debug("Projection interval %s raised to one day", interval)
        interval = timedelta(days=1)

    end_day = last.timestamp.date() + timedelta(days=days)
    count = int(timedelta(days=days + 1) / interval)
    projected = [p for p in repeat_injection(last, interval, count, alternate_sites=True)
                 if p.timestamp.date() <= end_day]
    logger.debug("Projecting %d doses of %s every %s", len(projected), last.medication_name, interval)

    dose_instants: dict[date, datetime] = {}
    for p in projected:
        dose_instants[p.timestamp.date()] = max(p.timestamp, dose_instants.get(p.timestamp.date(), p.timestamp))

    sample_days = [last.timestamp.date() + timedelta(days=k) for k in range(1, days + 1)]
    instants = [dose_instants.get(d) or datetime.combine(d, last.timestamp.time()) for d in sample_days]
    sample_min = np.array([(t - last.timestamp).total_seconds() / 60.0 for t in instants], dtype=float)

    levels = np.zeros(len(sample_days))
    for e in [*history, *projected]:
        if not (e.is_active and cls.matches(e.medication_name)):
            continue
        offset_min = (e.timestamp - last.timestamp).total_seconds() / 60.0
        levels += decay_curve(e.dosage_mg, e.half_life_minutes, sample_min - offset_min)

    return [ProjectionPoint(day=d, level=float(v), is_injection=d in dose_instants)
            for d, v in zip(sample_days, levels)]


def stabilization_date(points: Sequence[ProjectionPoint], as_of: datetime,
                       tolerance_mg: float = config.STABILIZATION_TOLERANCE_MG,
                       runs: int = config.STABILIZATION_RUNS) -> date | None:
    """
    First future injection day at which the (rounded) level has matched the
    previous injection day's level within tolerance `runs` times in a row.
    None when the projection never settles.
    """
    injection_days = [p for p in points if p.is_injection and p.day > as_of.date()]
    streak = 0
    for prev, curr in zip(injection_days, injection_days[1:]):
        if abs(round(curr.level) - round(prev.level)) <= tolerance_mg:
            streak += 1
            if streak == runs:
                return curr.day
        else:
            streak = 0
    return None


def trim_projection(points: Sequence[ProjectionPoint], stabilized: date | None,
                    last_injection: datetime,
                    min_days: int = config.PROJECTION_MIN_DAYS) -> list[ProjectionPoint]:
    """
    Cut the projection after it has stabilized, but never before
    last_injection + min_days. Unstabilized projections are kept whole.
    """
    if stabilized is None:
        return list(points)
    cutoff = max(stabilized, last_injection.date() + timedelta(days=min_days))
    return [p for p in points if p.day <= cutoff]
