from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from devocionales.db.filters import Eq, Range, all_of
from devocionales.db.store import Store
from devocionales.models.goal import Goal
from devocionales.models.member import Member
from devocionales.models.nucleo import Nucleo
from devocionales.models.timeline_event import EntityType
from devocionales.models.visit import Visit, VisitStatus
from devocionales.services.derivations import (
    GoalCounts,
    GoalProgress,
    GoalState,
    GoalTargets,
    compute_goal_progress,
    derive_goal_state,
    utc_today,
)
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler, MutationContext
from devocionales.services.queries import read_filter
from devocionales.services.results import Failure, bad_request


def _validate(ctx: MutationContext, data: dict, record: Goal | None) -> Failure | None:
    start = data.get("start_date", record.start_date if record else None)
    end = data.get("end_date", record.end_date if record else None)
    if start is not None and end is not None and start > end:
        return bad_request("Goal start date must not be after its end date")
    return None


def _audit(goal: Goal) -> AuditDetails:
    return AuditDetails(metadata={"name": goal.quarter})


GOALS = EntityHandler(
    entity_type=EntityType.goal,
    model=Goal,
    label="Goal",
    delete_mode=DeleteMode.hard,
    audit=_audit,
    validate=_validate,
    scope_of=lambda goal: None,
)


def count_progress(store: Store, goal: Goal) -> GoalCounts:
    # Counts cover the whole community, not the caller's nucleo.
    community = goal.community_id
    nucleos = store.count(Nucleo, all_of(Eq("community_id", community), Eq("active", True)))
    visits = store.find_many(
        Visit,
        all_of(
            Eq("family.community_id", community),
            Eq("status", VisitStatus.completed),
            Range("visit_date", gte=goal.start_date, lte=goal.end_date),
        ),
    )
    visitors = {int(user_id) for visit in visits for user_id in (visit.visitor_user_ids or [])}
    devotionals = store.count(
        Member,
        all_of(Eq("community_id", community), Eq("active", True), Eq("has_devotional", True)),
    )
    return GoalCounts(nucleos=nucleos, visits=len(visits), visitors=len(visitors), devotionals=devotionals)


def targets_of(goal: Goal) -> GoalTargets:
    return GoalTargets(
        nucleos=goal.target_nucleos,
        visits=goal.target_visits,
        visitors=goal.target_visitors,
        devotionals=goal.target_devotionals,
    )


@dataclass
class GoalView:
    goal: Goal
    state: GoalState
    progress: GoalProgress | None


def goal_view(store: Store, goal: Goal, *, today: date | None = None) -> GoalView:
    state = derive_goal_state(goal.start_date, goal.end_date, today=today)
    progress = None
    if state is GoalState.active:
        progress = compute_goal_progress(count_progress(store, goal), targets_of(goal))
    return GoalView(goal=goal, state=state, progress=progress)


def active_goal(store: Store, profile: PermissionProfile, *, today: date | None = None) -> Goal | None:
    today = today or utc_today()
    window = all_of(Range("start_date", lte=today), Range("end_date", gte=today))
    return store.find_one(Goal, read_filter(profile, GOALS, window))
