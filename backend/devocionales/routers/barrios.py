from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, Sort
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.schemas.barrio import BarrioCreate, BarrioOut, BarrioUpdate
from devocionales.services.barrios import BARRIOS
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records

router = APIRouter(prefix="/barrios", tags=["barrios"])


@router.get("", response_model=list[BarrioOut])
def list_barrios(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    extra = None if include_inactive else Eq("active", True)
    return list_records(Store(db), profile, BARRIOS, extra=extra, sort=Sort("name"))


@router.get("/{barrio_id}", response_model=BarrioOut)
def get_barrio(
    barrio_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    return unwrap(get_record(Store(db), profile, BARRIOS, barrio_id))


@router.post("", response_model=BarrioOut, status_code=status.HTTP_201_CREATED)
def create_barrio(
    payload: BarrioCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, BARRIOS).create(actor_id, payload.model_dump()))


@router.patch("/{barrio_id}", response_model=BarrioOut)
def update_barrio(
    barrio_id: int,
    payload: BarrioUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    return unwrap(MutationPipeline(db, BARRIOS).update(actor_id, barrio_id, data))


@router.delete("/{barrio_id}", response_model=bool)
def delete_barrio(
    barrio_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, BARRIOS).delete(actor_id, barrio_id))
