from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Sort
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.models.goal import Goal
from devocionales.schemas.goal import GoalCreate, GoalOut, GoalProgressOut, GoalUpdate
from devocionales.services.goals import GOALS, active_goal, goal_view
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records

router = APIRouter(prefix="/goals", tags=["goals"])


def goal_out(store: Store, goal: Goal) -> GoalOut:
    view = goal_view(store, goal)
    out = GoalOut.model_validate(goal)
    out.state = view.state
    out.progress = GoalProgressOut.model_validate(view.progress) if view.progress else None
    return out


@router.get("", response_model=list[GoalOut])
def list_goals(
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    goals = list_records(store, profile, GOALS, sort=Sort("start_date", descending=True))
    return [goal_out(store, goal) for goal in goals]


@router.get("/active", response_model=GoalOut | None)
def get_active_goal(
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    goal = active_goal(store, profile)
    return goal_out(store, goal) if goal else None


@router.get("/{goal_id}", response_model=GoalOut)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    return goal_out(store, unwrap(get_record(store, profile, GOALS, goal_id)))


@router.post("", response_model=GoalOut, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    goal = unwrap(MutationPipeline(db, GOALS).create(actor_id, payload.model_dump()))
    return goal_out(Store(db), goal)


@router.patch("/{goal_id}", response_model=GoalOut)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    goal = unwrap(MutationPipeline(db, GOALS).update(actor_id, goal_id, data))
    return goal_out(Store(db), goal)


@router.delete("/{goal_id}", response_model=bool)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, GOALS).delete(actor_id, goal_id))
