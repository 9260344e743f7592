from datetime import date, datetime, timedelta

import numpy as np
import pytest

from injectrack.types import InjectionEvent, MedicationClass
from injectrack.engine import (
    compute_full_series, compute_series, filter_window, authoritative_series, level_at,
)

DAY_MIN = 24 * 60
# Both test products count as testosterone for these scenarios
TEST_CLASS = MedicationClass("Total T", lambda name: name.startswith("Test"))


def _inj(id, name, mg, when, hl_days):
    return InjectionEvent(id=id, medication_name=name, dosage_mg=mg, timestamp=when,
                          half_life_minutes=hl_days * DAY_MIN if hl_days is not None else None)


def test_single_dose_sampled_daily():
    """
    200 mg, 5 day half-life, sampled at the injection's time-of-day on each date.
    """
    as_of = datetime(2024, 6, 30, 12, 0)
    dose = _inj("a", "TestA", 200.0, datetime(2024, 6, 20, 9, 0), 5)

    res = compute_series([dose], "month", TEST_CLASS, as_of=as_of)
    s = res.series_by_medication["TestA"]

    assert len(res.dates) == 30
    assert res.dates[0] == date(2024, 6, 1) and res.dates[-1] == date(2024, 6, 30)
    assert s[date(2024, 6, 19)] == 0.0
    assert np.isclose(s[date(2024, 6, 20)], 200.0)
    assert np.isclose(s[date(2024, 6, 25)], 100.0)
    assert np.isclose(s[date(2024, 6, 30)], 50.0)
    # one member only: no aggregate
    assert res.aggregate_series_by_class == {}


def test_two_members_build_an_aggregate():
    """
    TestA 100 mg (t½ 4 d) + TestB 150 mg (t½ 8 d), same instant.
    Four days later: 50 + 150 * 2**-0.5 ≈ 156.07 mg.
    """
    when = datetime(2024, 6, 20, 8, 0)
    history = [_inj("a", "TestA", 100.0, when, 4), _inj("b", "TestB", 150.0, when, 8)]
    as_of = datetime(2024, 6, 24, 20, 0)

    res = compute_series(history, "week", TEST_CLASS, as_of=as_of)
    day4 = date(2024, 6, 24)

    assert set(res.series_by_medication) == {"TestA", "TestB"}
    total = res.aggregate_series_by_class["Total T"]
    assert np.isclose(res.series_by_medication["TestA"][day4], 50.0)
    assert np.isclose(res.series_by_medication["TestB"][day4], 150.0 * 2 ** -0.5)
    assert np.isclose(total[day4], 50.0 + 150.0 * 2 ** -0.5)
    assert "Total T" in res.all_series() and "TestA" in res.all_series()


def test_aggregate_is_pointwise_sum_of_members():
    history = [
        _inj("a", "TestA", 100.0, datetime(2024, 1, 3, 7, 0), 4),
        _inj("b", "TestB", 150.0, datetime(2024, 2, 11, 21, 15), 8),
        _inj("c", "TestA", 120.0, datetime(2024, 3, 1, 12, 0), 4),
        _inj("d", "Anastrozole", 1.0, datetime(2024, 3, 2, 12, 0), 2),
    ]
    res = compute_full_series(history, TEST_CLASS, as_of=datetime(2024, 3, 20))
    total = res.aggregate_series_by_class["Total T"]
    for d in res.dates:
        expected = res.series_by_medication["TestA"][d] + res.series_by_medication["TestB"][d]
        assert np.isclose(total[d], expected)


def test_grid_spans_the_horizon():
    as_of = datetime(2024, 6, 30, 23, 59)
    res = compute_full_series([], as_of=as_of, horizon_days=365)
    assert len(res.dates) == 366
    assert res.dates[0] == date(2023, 7, 1)
    assert res.dates[-1] == date(2024, 6, 30)


def test_medication_dosed_only_before_window_still_appears():
    """
    Doses older than the window keep decaying inside it and the medication
    is never dropped from the windowed series.
    """
    history = [_inj("a", "TestA", 100.0, datetime(2024, 5, 1, 10, 0), 4)]
    as_of = datetime(2024, 6, 30, 18, 0)
    res = compute_series(history, "week", TEST_CLASS, as_of=as_of)

    s = res.series_by_medication["TestA"]
    assert len(s) == 7
    assert all(v > 0.0 for v in s.values())
    assert np.isclose(s[date(2024, 6, 30)], 100.0 * 0.5 ** (60 / 4))


def test_doses_older_than_the_grid_still_contribute():
    history = [_inj("a", "TestA", 1000.0, datetime(2023, 12, 1, 10, 0), 31)]
    res = compute_full_series(history, TEST_CLASS, as_of=datetime(2024, 1, 31), horizon_days=30)
    assert res.dates[0] == date(2024, 1, 1)
    assert np.isclose(res.series_by_medication["TestA"][date(2024, 1, 1)], 500.0)


def test_inert_events_keep_their_medication_with_zero_levels():
    history = [
        _inj("a", "TestA", 100.0, datetime(2024, 6, 1, 10, 0), None),
        InjectionEvent(id="b", medication_name="TestB", dosage_mg=-5.0,
                       timestamp=datetime(2024, 6, 2), half_life_minutes=5760.0),
        InjectionEvent(id="c", medication_name="TestC", dosage_mg=50.0,
                       timestamp=None, half_life_minutes=5760.0),
    ]
    res = compute_series(history, "month", TEST_CLASS, as_of=datetime(2024, 6, 10))
    assert set(res.series_by_medication) == {"TestA", "TestB", "TestC"}
    for s in res.series_by_medication.values():
        assert all(v == 0.0 for v in s.values())


def test_empty_history():
    res = compute_series([], "quarter", as_of=datetime(2024, 6, 30))
    assert res.is_empty
    assert res.series_by_medication == {}
    assert res.aggregate_series_by_class == {}
    assert len(res.dates) == 90
    assert res.window_days == 90


def test_deleting_an_event_leaves_no_trace():
    as_of = datetime(2024, 6, 30, 12, 0)
    a = _inj("a", "TestA", 100.0, datetime(2024, 6, 1, 10, 0), 4)
    b = _inj("b", "TestB", 150.0, datetime(2024, 6, 10, 10, 0), 8)
    c = _inj("c", "TestA", 100.0, datetime(2024, 6, 15, 10, 0), 4)

    before = compute_series([a, b, c], "month", TEST_CLASS, as_of=as_of)
    assert "Total T" in before.aggregate_series_by_class

    after = compute_series([e for e in [a, b, c] if e.id != "b"], "month", TEST_CLASS, as_of=as_of)
    never = compute_series([a, c], "month", TEST_CLASS, as_of=as_of)
    assert after == never
    assert after.aggregate_series_by_class == {}


def test_filter_window_truncates_without_recomputing():
    as_of = datetime(2024, 6, 30, 12, 0)
    history = [_inj("a", "TestA", 100.0, datetime(2024, 4, 1, 10, 0), 8)]
    full = compute_full_series(history, TEST_CLASS, as_of=as_of)
    week = filter_window(full, "week", as_of)

    assert week.window_days == 7
    assert week.dates == full.dates[-7:]
    for d in week.dates:
        assert week.series_by_medication["TestA"][d] == full.series_by_medication["TestA"][d]


def test_window_longer_than_horizon_is_clamped():
    res = compute_series([], "year", as_of=datetime(2024, 6, 30), horizon_days=30)
    assert len(res.dates) == 31
    assert res.window_days == 365


def test_unknown_period_raises():
    with pytest.raises(ValueError):
        compute_series([], "fortnight", as_of=datetime(2024, 6, 30))


def test_authoritative_series_selection():
    as_of = datetime(2024, 6, 30)
    a = _inj("a", "TestA", 100.0, datetime(2024, 6, 20), 4)
    b = _inj("b", "TestB", 100.0, datetime(2024, 6, 21), 4)
    other = _inj("x", "Anastrozole", 1.0, datetime(2024, 6, 21), 2)
    other2 = _inj("y", "HCG", 500.0, datetime(2024, 6, 21), 2)

    both = compute_series([a, b, other], "week", TEST_CLASS, as_of=as_of)
    assert authoritative_series(both, TEST_CLASS) is both.aggregate_series_by_class["Total T"]

    single = compute_series([a, other], "week", TEST_CLASS, as_of=as_of)
    assert authoritative_series(single, TEST_CLASS) is single.series_by_medication["TestA"]

    lone_other = compute_series([other], "week", TEST_CLASS, as_of=as_of)
    assert authoritative_series(lone_other, TEST_CLASS) is lone_other.series_by_medication["Anastrozole"]

    unrelated = compute_series([other, other2], "week", TEST_CLASS, as_of=as_of)
    assert authoritative_series(unrelated, TEST_CLASS) == {}


def test_default_class_matches_testosterone_names():
    """Without an explicit class, names containing 'testosterone' are summed into 'Total T'."""
    when = datetime(2024, 6, 20, 8, 0)
    history = [
        _inj("a", "Testosterone Enanthate 300", 100.0, when, 4),
        _inj("b", "testosterone cypionate 200", 100.0, when, 8),
    ]
    res = compute_series(history, "week", as_of=datetime(2024, 6, 24))
    assert np.isclose(res.aggregate_series_by_class["Total T"][date(2024, 6, 20)], 200.0)


def test_level_at_uses_only_earlier_injections():
    """
    Level readout at an injection is the trough it lands on: earlier doses only.
    """
    t0 = datetime(2024, 6, 1, 9, 0)
    history = [
        _inj("a", "Testosterone Enanthate 300", 100.0, t0, 4),
        _inj("b", "Testosterone Enanthate 300", 100.0, t0 + timedelta(days=4), 4),
        _inj("c", "Anastrozole", 1.0, t0, 2),
    ]
    assert np.isclose(level_at(history, t0 + timedelta(days=4)), 50.0)
    assert level_at(history, t0) == 0.0
    assert np.isclose(level_at(history, t0 + timedelta(days=8)), 25.0 + 50.0)
