import math
from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from . import config
from .types import RATING_KEYS, InjectionEvent, MedicationClass

DEFAULT_CLASS = MedicationClass.containing(config.CLASS_KEYWORD, config.CLASS_LABEL)


def parse_localized_number(value: Any) -> float:
    """
    Parse "1.5", "1,5" (comma decimal) or "1,000.5" (comma thousands).
    Returns nan when the value can't be read as a number.
    """
    if isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return float("nan")
    text = value.strip().replace(" ", "")
    if "," in text and "." in text:
        text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".", 1)
    try:
        return float(text)
    except ValueError:
        return float("nan")


def coerce_number(value: Any) -> float:
    if value is None:
        return float("nan")
    return parse_localized_number(value)


def coerce_timestamp(value: Any) -> datetime | None:
    """ISO-8601 string or datetime -> naive wall-clock datetime, None if unreadable."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        text = value.strip()
        # fromisoformat only accepts the "Z" suffix from 3.11 on
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def coerce_ratings(record: Mapping[str, Any]) -> dict[str, int]:
    """Pick "<key>Rating" fields off a record; missing or zero ratings are left out."""
    ratings: dict[str, int] = {}
    for key in RATING_KEYS:
        number = coerce_number(record.get(f"{key}Rating"))
        if math.isfinite(number) and number > 0:
            ratings[key] = int(number)
    return ratings


def medication_names(history: Iterable[InjectionEvent]) -> list[str]:
    """Distinct medication names in first-seen order (inert events included)."""
    seen: dict[str, None] = {}
    for e in history:
        seen.setdefault(e.medication_name, None)
    return list(seen)


def split_history_by_medication(history: Iterable[InjectionEvent]) -> dict[str, list[InjectionEvent]]:
    """
    Group active events by medication name, each group sorted by time.
    """
    buckets: dict[str, list[InjectionEvent]] = defaultdict(list)
    for e in history:
        if e.is_active:
            buckets[e.medication_name].append(e)
    return {
        name: sorted(events, key=lambda x: x.timestamp)
        for name, events in buckets.items()
    }


def class_members(names: Iterable[str], cls: MedicationClass) -> list[str]:
    return [n for n in names if cls.matches(n)]


def as_class_list(classes: MedicationClass | Sequence[MedicationClass] | None) -> list[MedicationClass]:
    if classes is None:
        return []
    if isinstance(classes, MedicationClass):
        return [classes]
    return list(classes)


def latest_active(history: Iterable[InjectionEvent], n: int = 1) -> list[InjectionEvent]:
    """The n most recent active events, newest first."""
    active = [e for e in history if e.is_active]
    active.sort(key=lambda e: e.timestamp, reverse=True)
    return active[:n]
