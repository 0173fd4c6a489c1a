"""Server-side derived fields. Pure functions, no I/O."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import enum
from typing import Mapping

from devocionales.models.visit import VisitStatus, VisitType

ACTIVITY_FLAGS = (
    "conversation",
    "prayers",
    "institute_study",
    "other_study",
    "activity_invitation",
)

DAYS_PER_YEAR = 365.25


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def has_activities(activities: Mapping[str, object] | None) -> bool:
    if not activities:
        return False
    return any(activities.get(flag) is True for flag in ACTIVITY_FLAGS)


def derive_visit_status(
    visit_type: VisitType | str,
    visit_date: date | None,
    activities_done: bool,
    *,
    today: date | None = None,
) -> VisitStatus:
    if VisitType(visit_type) is VisitType.not_completed:
        return VisitStatus.cancelled
    if visit_date is None:
        return VisitStatus.scheduled
    today = today or utc_today()
    if visit_date > today:
        return VisitStatus.scheduled
    # Today or past without any activity recorded stays pending.
    return VisitStatus.completed if activities_done else VisitStatus.scheduled


def derive_age(
    birth_date: date | None,
    approximate_age: int | None,
    age_updated_at: datetime | None,
    *,
    now: datetime | None = None,
) -> int | None:
    now = now or datetime.now(timezone.utc)
    if birth_date is not None:
        today = now.date()
        age = today.year - birth_date.year
        if (today.month, today.day) < (birth_date.month, birth_date.day):
            age -= 1
        return age
    if approximate_age is None:
        return None
    if age_updated_at is None:
        return approximate_age
    if age_updated_at.tzinfo is None:
        age_updated_at = age_updated_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed_days = (now - age_updated_at).total_seconds() / 86400
    return approximate_age + int(elapsed_days // DAYS_PER_YEAR)


class GoalState(str, enum.Enum):
    future = "future"
    active = "active"
    completed = "completed"


def derive_goal_state(start_date: date, end_date: date, *, today: date | None = None) -> GoalState:
    today = today or utc_today()
    if today < start_date:
        return GoalState.future
    if today > end_date:
        return GoalState.completed
    return GoalState.active


@dataclass(frozen=True)
class GoalCounts:
    nucleos: int
    visits: int
    visitors: int
    devotionals: int


@dataclass(frozen=True)
class GoalTargets:
    nucleos: int
    visits: int
    visitors: int
    devotionals: int


@dataclass(frozen=True)
class GoalProgress:
    nucleos: int
    visits: int
    visitors: int
    devotionals: int
    nucleos_pct: float
    visits_pct: float
    visitors_pct: float
    devotionals_pct: float


def percentage(current: int, target: int) -> float:
    if target <= 0:
        return 0.0
    return round(current / target * 100, 2)


def compute_goal_progress(counts: GoalCounts, targets: GoalTargets) -> GoalProgress:
    return GoalProgress(
        nucleos=counts.nucleos,
        visits=counts.visits,
        visitors=counts.visitors,
        devotionals=counts.devotionals,
        nucleos_pct=percentage(counts.nucleos, targets.nucleos),
        visits_pct=percentage(counts.visits, targets.visits),
        visitors_pct=percentage(counts.visitors, targets.visitors),
        devotionals_pct=percentage(counts.devotionals, targets.devotionals),
    )
