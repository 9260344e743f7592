# src/injectrack/types.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Literal, Mapping

# All half-lives are kept in MINUTES, the same unit elapsed time is measured in.
Period = Literal["week", "month", "quarter", "year"]

PERIOD_DAYS: dict[str, int] = {
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}

TimeSeries = dict[date, float]

RATING_KEYS = ("mood", "sleep", "libido", "energy", "sides")


@dataclass(frozen=True)
class InjectionEvent:
    """
    A single logged injection.

    id                 : unique identifier of the record
    medication_name    : product name as entered (e.g., "Testosterone Cypionate 200")
    dosage_mg          : amount administered, always milligrams
    timestamp          : wall-clock time of the injection (naive)
    half_life_minutes  : half-life captured from the medication when the entry was created
    site, notes, ratings : descriptive payload, not used for levels
                           (ratings: 0-5 stars keyed by RATING_KEYS)
    """
    id: str
    medication_name: str
    dosage_mg: float
    timestamp: datetime | None
    half_life_minutes: float | None = None
    site: str | None = None
    notes: str = ""
    ratings: dict[str, int] = field(default_factory=dict, compare=False)

    @property
    def is_active(self) -> bool:
        """True when the event can contribute to a level curve."""
        if self.timestamp is None:
            return False
        dose, hl = self.dosage_mg, self.half_life_minutes
        if dose is None or hl is None:
            return False
        return math.isfinite(dose) and dose > 0 and math.isfinite(hl) and hl > 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InjectionEvent":
        """
        Build an event from a raw storage record.

        Bad values never raise: they turn into nan / None so the event is inert.
        """
        from .helpers import coerce_number, coerce_timestamp, coerce_ratings

        site = record.get("injectionSite", record.get("site"))
        return cls(
            id=str(record.get("id", "")),
            medication_name=str(record.get("medicationName", "")),
            dosage_mg=coerce_number(record.get("dosage")),
            timestamp=coerce_timestamp(record.get("dateTime")),
            half_life_minutes=coerce_number(record.get("halfLifeMinutes")),
            site=site if isinstance(site, str) else None,
            notes=str(record.get("notes") or ""),
            ratings=coerce_ratings(record),
        )


@dataclass(frozen=True)
class MedicationDefinition:
    """
    A product the user can pick when logging an injection.

    concentration_mg_per_ml is used to turn ml entries into mg.
    """
    name: str
    half_life_minutes: float
    concentration_mg_per_ml: float | None = None


@dataclass(frozen=True)
class MedicationClass:
    """
    Grouping of medications whose curves are summed into one aggregate series.

    label    : name of the aggregate series (e.g., "Total T")
    matches  : predicate on a medication name
    """
    label: str
    matches: Callable[[str], bool]

    @classmethod
    def containing(cls, keyword: str, label: str) -> "MedicationClass":
        """Case-insensitive substring class, e.g. every name containing 'testosterone'."""
        needle = keyword.lower()
        return cls(label=label, matches=lambda name: needle in name.lower())


@dataclass(frozen=True)
class SeriesResult:
    """
    Daily level curves produced by the engine.

    dates                       : sample dates, ascending
    series_by_medication        : medication name -> {date: level mg}
    aggregate_series_by_class   : class label -> {date: summed level mg}
    window_days                 : nominal length of the window these dates cover
    """
    dates: tuple[date, ...]
    series_by_medication: dict[str, TimeSeries] = field(default_factory=dict)
    aggregate_series_by_class: dict[str, TimeSeries] = field(default_factory=dict)
    window_days: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.series_by_medication

    def all_series(self) -> dict[str, TimeSeries]:
        """Individual series followed by the aggregates, ready for a legend."""
        merged = dict(self.series_by_medication)
        merged.update(self.aggregate_series_by_class)
        return merged


@dataclass(frozen=True)
class Statistics:
    maximum: float = 0.0
    minimum: float = 0.0
    average: float = 0.0
    total: float = 0.0

    def rounded(self, ndigits: int | None = None) -> "Statistics":
        return Statistics(
            maximum=round(self.maximum, ndigits),
            minimum=round(self.minimum, ndigits),
            average=round(self.average, ndigits),
            total=round(self.total, ndigits),
        )


@dataclass(frozen=True)
class DosageSummary:
    """Dose sizes (mg) of the injections logged inside a window."""
    count: int = 0
    maximum: float = 0.0
    minimum: float = 0.0
    average: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class ProjectionPoint:
    day: date
    level: float
    is_injection: bool = False
