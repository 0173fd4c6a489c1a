from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, Sort, all_of
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.schemas.nucleo import NucleoCreate, NucleoOut, NucleoUpdate
from devocionales.services.nucleos import NUCLEOS
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records

router = APIRouter(prefix="/nucleos", tags=["nucleos"])


@router.get("", response_model=list[NucleoOut])
def list_nucleos(
    barrio_id: int | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    extra = all_of(
        None if include_inactive else Eq("active", True),
        Eq("barrio_id", barrio_id) if barrio_id is not None else None,
    )
    return list_records(Store(db), profile, NUCLEOS, extra=extra, sort=Sort("name"))


@router.get("/{nucleo_id}", response_model=NucleoOut)
def get_nucleo(
    nucleo_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    return unwrap(get_record(Store(db), profile, NUCLEOS, nucleo_id))


@router.post("", response_model=NucleoOut, status_code=status.HTTP_201_CREATED)
def create_nucleo(
    payload: NucleoCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, NUCLEOS).create(actor_id, payload.model_dump()))


@router.patch("/{nucleo_id}", response_model=NucleoOut)
def update_nucleo(
    nucleo_id: int,
    payload: NucleoUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    return unwrap(MutationPipeline(db, NUCLEOS).update(actor_id, nucleo_id, data))


@router.delete("/{nucleo_id}", response_model=bool)
def delete_nucleo(
    nucleo_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, NUCLEOS).delete(actor_id, nucleo_id))
