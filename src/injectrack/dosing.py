# src/injectrack/dosing.py
from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Literal, Mapping

from .types import RATING_KEYS, InjectionEvent, MedicationDefinition

Unit = Literal["mg", "ml"]

MINUTES_PER_DAY = 24 * 60

DEFAULT_MEDICATIONS: tuple[MedicationDefinition, ...] = (
    MedicationDefinition("Testosterone Enanthate 300", 4 * MINUTES_PER_DAY, 300.0),
    MedicationDefinition("Testosterone Cypionate 200", 8 * MINUTES_PER_DAY, 200.0),
    MedicationDefinition("Testosterone Cypionate 250", 8 * MINUTES_PER_DAY, 250.0),
    MedicationDefinition("Testosterone Propionate", 2 * MINUTES_PER_DAY, 100.0),
)

_OPPOSITE_SITES = {
    "Left Glute": "Right Glute",
    "Left Delt": "Right Delt",
    "Left Thigh": "Right Thigh",
    "Left Arm": "Right Arm",
}
_OPPOSITE_SITES.update({v: k for k, v in _OPPOSITE_SITES.items()})


def new_injection(medication: MedicationDefinition, amount: float, *, timestamp: datetime,
                  unit: Unit = "mg", site: str | None = None, notes: str = "",
                  ratings: Mapping[str, int] | None = None, id: str | None = None) -> InjectionEvent:
    """
    Compose an InjectionEvent from what the user entered.

    The medication's half-life is copied onto the event so later edits to the
    medication list don't rewrite history. ml amounts are converted to mg with
    the medication's concentration.

    Examples:
      - 0.5 ml of Testosterone Cypionate 200 -> 100 mg
      - 125 mg of Testosterone Enanthate 300 -> 125 mg
    """
    _validate_positive("amount", amount)
    _validate_positive("half_life_minutes", medication.half_life_minutes)
    dosage_mg = to_milligrams(amount, unit, medication.concentration_mg_per_ml)

    return InjectionEvent(
        id=id or uuid.uuid4().hex,
        medication_name=medication.name,
        dosage_mg=dosage_mg,
        timestamp=timestamp,
        half_life_minutes=float(medication.half_life_minutes),
        site=site,
        notes=notes,
        ratings=_validate_ratings(ratings or {}),
    )


def to_milligrams(amount: float, unit: Unit, concentration_mg_per_ml: float | None) -> float:
    """mg stay as they are; ml are multiplied by the concentration (mg/ml)."""
    if unit == "mg":
        return float(amount)
    if unit == "ml":
        if concentration_mg_per_ml is None:
            raise ValueError("concentration_mg_per_ml is required to convert ml to mg.")
        _validate_positive("concentration_mg_per_ml", concentration_mg_per_ml)
        return float(amount) * float(concentration_mg_per_ml)
    raise ValueError(f"unit must be 'mg' or 'ml' (got {unit!r}).")


def repeat_injection(template: InjectionEvent, every: timedelta, count: int, *,
                     alternate_sites: bool = False) -> list[InjectionEvent]:
    """
    Copies of `template` at template.timestamp + every, + 2*every, ... (count copies).

    With alternate_sites the first copy keeps the template's site, the next one
    moves to the opposite side, and so on.
    """
    _validate_positive("every", every.total_seconds())
    _validate_non_negative_int("count", count)
    if template.timestamp is None:
        raise ValueError("template must have a timestamp.")

    copies: list[InjectionEvent] = []
    for i in range(count):
        site = template.site
        if alternate_sites and site and i % 2 == 1:
            site = opposite_site(site)
        copies.append(replace(
            template,
            id=f"{template.id}+{i + 1}",
            timestamp=template.timestamp + every * (i + 1),
            site=site,
        ))
    return copies


def opposite_site(site: str) -> str:
    """Mirror a left/right site; sites without a mirror (e.g. Abdomen) map to themselves."""
    return _OPPOSITE_SITES.get(site, site)


def find_medication(name: str, medications=DEFAULT_MEDICATIONS) -> MedicationDefinition:
    for med in medications:
        if med.name == name:
            return med
    raise KeyError(f"Unknown medication '{name}'.")


# --------------------------
# Small input validators
# --------------------------
def _validate_positive(name: str, x: float) -> None:
    if not (x > 0):
        raise ValueError(f"{name} must be > 0 (got {x}).")

def _validate_non_negative_int(name: str, x: int) -> None:
    if not (isinstance(x, int) and x >= 0):
        raise ValueError(f"{name} must be a non-negative integer (got {x}).")

def _validate_ratings(ratings: Mapping[str, int]) -> dict[str, int]:
    for key, x in ratings.items():
        if key not in RATING_KEYS:
            raise ValueError(f"Unknown rating '{key}'; expected one of {RATING_KEYS}.")
        if not (isinstance(x, int) and 0 <= x <= 5):
            raise ValueError(f"{key} rating must be an integer from 0 to 5 (got {x}).")
    return {k: v for k, v in ratings.items() if v > 0}
