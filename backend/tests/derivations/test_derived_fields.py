from datetime import date, datetime, timedelta, timezone

import pytest

from devocionales.models.visit import VisitStatus, VisitType
from devocionales.services import derivations
from devocionales.services.derivations import (
    GoalCounts,
    GoalState,
    GoalTargets,
    compute_goal_progress,
    derive_age,
    derive_goal_state,
    derive_visit_status,
    has_activities,
    percentage,
    utc_today,
)

TODAY = date(2025, 6, 15)


@pytest.mark.parametrize(
    ("visit_type", "visit_date", "activities_done", "expected"),
    [
        (VisitType.not_completed, TODAY - timedelta(days=3), True, VisitStatus.cancelled),
        (VisitType.not_completed, TODAY + timedelta(days=3), False, VisitStatus.cancelled),
        (VisitType.first_visit, TODAY + timedelta(days=1), True, VisitStatus.scheduled),
        (VisitType.first_visit, TODAY, True, VisitStatus.completed),
        (VisitType.follow_up, TODAY - timedelta(days=10), True, VisitStatus.completed),
        (VisitType.follow_up, TODAY - timedelta(days=10), False, VisitStatus.scheduled),
        (VisitType.first_visit, TODAY, False, VisitStatus.scheduled),
    ],
)
def test_visit_status(visit_type, visit_date, activities_done, expected):
    assert derive_visit_status(visit_type, visit_date, activities_done, today=TODAY) is expected


def test_visit_status_accepts_raw_type_values():
    assert derive_visit_status("not_completed", TODAY, False, today=TODAY) is VisitStatus.cancelled


@pytest.mark.parametrize(
    ("activities", "expected"),
    [
        (None, False),
        ({}, False),
        ({"conversation": False, "prayers": False}, False),
        ({"prayers": True}, True),
        ({"institute_study_detail": "Book 1"}, False),
        ({"activity_invitation": True}, True),
    ],
)
def test_has_activities(activities, expected):
    assert has_activities(activities) is expected


def test_age_from_birth_date_before_and_on_birthday():
    birth = date(2000, 6, 15)
    day_before = datetime(2025, 6, 14, 12, tzinfo=timezone.utc)
    birthday = datetime(2025, 6, 15, 12, tzinfo=timezone.utc)
    assert derive_age(birth, None, None, now=day_before) == 24
    assert derive_age(birth, None, None, now=birthday) == 25


def test_birth_date_wins_over_approximate_age():
    now = datetime(2025, 6, 15, tzinfo=timezone.utc)
    assert derive_age(date(2000, 1, 1), 70, now, now=now) == 25


def test_approximate_age_advances_with_elapsed_years():
    recorded = datetime(2020, 1, 1, tzinfo=timezone.utc)
    two_years = recorded + timedelta(days=365.25 * 2)
    assert derive_age(None, 30, recorded, now=two_years - timedelta(seconds=1)) == 31
    assert derive_age(None, 30, recorded, now=two_years) == 32


def test_approximate_age_without_timestamp_is_returned_as_is():
    assert derive_age(None, 42, None) == 42


def test_age_unknown():
    assert derive_age(None, None, None) is None


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2025, 3, 31), GoalState.future),
        (date(2025, 4, 1), GoalState.active),
        (date(2025, 6, 30), GoalState.active),
        (date(2025, 7, 1), GoalState.completed),
    ],
)
def test_goal_state_boundaries(today, expected):
    assert derive_goal_state(date(2025, 4, 1), date(2025, 6, 30), today=today) is expected


@pytest.mark.parametrize(
    ("current", "target", "expected"),
    [(5, 0, 0.0), (5, -1, 0.0), (1, 3, 33.33), (2, 3, 66.67), (12, 10, 120.0)],
)
def test_percentage(current, target, expected):
    assert percentage(current, target) == expected


def test_goal_progress():
    progress = compute_goal_progress(
        GoalCounts(nucleos=2, visits=5, visitors=1, devotionals=0),
        GoalTargets(nucleos=4, visits=10, visitors=0, devotionals=3),
    )
    assert progress.nucleos_pct == 50.0
    assert progress.visits_pct == 50.0
    assert progress.visitors_pct == 0.0
    assert progress.devotionals_pct == 0.0
    assert progress.visits == 5


def test_utc_today_follows_the_utc_clock():
    assert utc_today() == datetime.now(timezone.utc).date()


def test_calculators_share_one_today(monkeypatch):
    monkeypatch.setattr(derivations, "utc_today", lambda: TODAY)
    assert derive_visit_status(VisitType.first_visit, TODAY, True) is VisitStatus.completed
    assert derive_visit_status(VisitType.first_visit, TODAY + timedelta(days=1), True) is VisitStatus.scheduled
    assert derive_goal_state(TODAY, TODAY) is GoalState.active
    assert derive_goal_state(TODAY + timedelta(days=1), TODAY + timedelta(days=5)) is GoalState.future
