# tests/test_scoring.py
"""Tests for point awards, streaks and aggregate bookkeeping."""

from datetime import date

import pytest
from sqlalchemy import update

from litterpick.models import ScoreEventKind, UserScoreAggregate
from litterpick.services.scoring import next_streak, streaks_from_dates
from litterpick.services.spatial import GeoPoint, haversine_km


@pytest.mark.parametrize(
    ("last", "current", "today", "expected"),
    [
        (None, 0, date(2026, 3, 2), 1),
        (date(2026, 3, 2), 1, date(2026, 3, 2), 1),
        (date(2026, 3, 2), 3, date(2026, 3, 2), 3),
        (date(2026, 3, 1), 3, date(2026, 3, 2), 4),
        (date(2026, 2, 28), 3, date(2026, 3, 2), 1),
        (date(2026, 3, 3), 3, date(2026, 3, 2), 1),
    ],
)
def test_next_streak(last, current, today, expected) -> None:
    assert next_streak(last, current, today) == expected


def test_streaks_from_dates() -> None:
    days = [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 2), date(2026, 1, 3), date(2026, 1, 10)]
    assert streaks_from_dates(days) == (1, 3, date(2026, 1, 10))
    assert streaks_from_dates([]) == (0, 0, None)


def test_haversine_km() -> None:
    london = GeoPoint(51.5074, -0.1278)
    paris = GeoPoint(48.8566, 2.3522)
    assert haversine_km(london, paris) == pytest.approx(343.5, abs=1.0)
    assert haversine_km(london, london) == 0.0


def test_streak_over_consecutive_days(lifecycle, make_user, make_report, scoring, clock, test_settings) -> None:
    reporter, picker = make_user(), make_user()

    def clear_at(latitude: float) -> int:
        report = make_report(reporter, latitude, 5.0)
        lifecycle.claim(report.id, picker.id)
        return lifecycle.clear(report.id, picker.id, "after").points_awarded

    base = test_settings.base_points_per_clear
    bonus = test_settings.streak_bonus_points
    area = test_settings.first_in_area_bonus

    # Day D, D+1, then a gap to D+3.
    assert clear_at(10.0) == base + bonus * 1 + area
    clock.advance(days=1)
    assert clear_at(20.0) == base + bonus * 2 + area
    assert scoring.get_aggregate(picker.id).current_streak == 2
    clock.advance(days=2)
    assert clear_at(30.0) == base + bonus * 1 + area

    aggregate = scoring.get_aggregate(picker.id)
    assert aggregate.current_streak == 1
    assert aggregate.longest_streak == 2
    assert aggregate.last_cleared_date == clock().date()


def test_same_day_clear_keeps_streak(lifecycle, make_user, make_report, scoring, clock) -> None:
    reporter, picker = make_user(), make_user()
    for latitude in (10.0, 20.0):
        report = make_report(reporter, latitude, 5.0)
        lifecycle.claim(report.id, picker.id)
        lifecycle.clear(report.id, picker.id, "after")
        clock.advance(hours=1)
    assert scoring.get_aggregate(picker.id).current_streak == 1


def test_first_in_area_bonus_only_for_first_nearby_clear(
    lifecycle, make_user, make_report, clock, test_settings
) -> None:
    reporter, first, second = make_user(), make_user(), make_user()
    near_a = make_report(reporter, 51.5000, -0.1200)
    near_b = make_report(reporter, 51.5030, -0.1200)  # roughly 330 m away

    lifecycle.claim(near_a.id, first.id)
    first_points = lifecycle.clear(near_a.id, first.id, "a").points_awarded
    clock.advance(hours=2)
    lifecycle.claim(near_b.id, second.id)
    second_points = lifecycle.clear(near_b.id, second.id, "b").points_awarded

    assert first_points - second_points == test_settings.first_in_area_bonus


def test_own_earlier_clear_cancels_first_in_area(lifecycle, make_user, make_report, clock, test_settings) -> None:
    reporter, picker = make_user(), make_user()
    near_a = make_report(reporter, 51.5000, -0.1200)
    near_b = make_report(reporter, 51.5009, -0.1200)  # roughly 100 m away

    lifecycle.claim(near_a.id, picker.id)
    first_points = lifecycle.clear(near_a.id, picker.id, "a").points_awarded
    clock.advance(hours=1)
    lifecycle.claim(near_b.id, picker.id)
    second_points = lifecycle.clear(near_b.id, picker.id, "b").points_awarded

    without_area = test_settings.base_points_per_clear + test_settings.streak_bonus_points
    assert first_points == without_area + test_settings.first_in_area_bonus
    assert second_points == without_area


def test_first_in_area_bonus_returns_after_window(
    lifecycle, make_user, make_report, clock, test_settings
) -> None:
    reporter, picker, other = make_user(), make_user(), make_user()
    earlier = make_report(reporter, 51.5000, -0.1200)
    later = make_report(reporter, 51.5010, -0.1200)
    lifecycle.claim(earlier.id, picker.id)
    lifecycle.clear(earlier.id, picker.id, "a")

    clock.advance(hours=test_settings.first_in_area_window_hours + 1)
    lifecycle.claim(later.id, other.id)
    points = lifecycle.clear(later.id, other.id, "b").points_awarded

    assert points == (
        test_settings.base_points_per_clear
        + test_settings.streak_bonus_points
        + test_settings.first_in_area_bonus
    )


def test_duplicate_event_is_ignored(scoring, make_user, cleared_report, db_session) -> None:
    picker = make_user()
    report = cleared_report(make_user(), picker)
    before = scoring.get_aggregate(picker.id).total_points

    assert scoring.apply_event(ScoreEventKind.CLEARED, picker.id, report.id) == 0
    db_session.commit()

    aggregate = scoring.get_aggregate(picker.id)
    assert aggregate.total_points == before
    assert aggregate.total_clears == 1


def test_can_verify_threshold(scoring, experienced_user, test_settings) -> None:
    novice = experienced_user(clears=test_settings.min_clears_to_verify - 1)
    veteran = experienced_user()
    assert not scoring.can_verify(novice.id)
    assert scoring.can_verify(veteran.id)


def test_total_clears_defaults_to_zero(scoring, make_user, experienced_user) -> None:
    assert scoring.total_clears(make_user().id) == 0
    assert scoring.total_clears(experienced_user(clears=2).id) == 2


def test_aggregate_matches_event_log(
    scoring, ledger, make_user, cleared_report, experienced_user, clock
) -> None:
    reporter, picker = make_user(), make_user()
    report = cleared_report(reporter, picker)
    clock.advance(days=1)
    cleared_report(reporter, picker, 40.0, 40.0)
    voters = [experienced_user() for _ in range(3)]
    for voter in voters:
        ledger.cast_vote(report.id, voter.id, True)

    for user in (reporter, picker, *voters):
        assert scoring.drift(user.id) == 0


def test_reconcile_repairs_drift(db_session, scoring, make_user, cleared_report, clock) -> None:
    reporter, picker = make_user(), make_user()
    cleared_report(reporter, picker)
    clock.advance(days=1)
    cleared_report(reporter, picker, 40.0, 40.0)
    expected = scoring.get_aggregate(picker.id)
    expected_points, expected_streak = expected.total_points, expected.current_streak

    db_session.execute(
        update(UserScoreAggregate)
        .where(UserScoreAggregate.user_id == picker.id)
        .values(total_points=1, total_clears=0, current_streak=0)
    )
    db_session.commit()
    assert scoring.drift(picker.id) == 1 - expected_points

    repaired = scoring.reconcile(picker.id)
    db_session.commit()

    assert repaired.total_points == expected_points
    assert repaired.total_clears == 2
    assert repaired.current_streak == expected_streak == 2
    assert repaired.longest_streak == 2
    assert scoring.drift(picker.id) == 0
