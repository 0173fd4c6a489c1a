from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, Sort, all_of
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.models.family import Family
from devocionales.routers.members import member_out
from devocionales.routers.visits import visit_out
from devocionales.schemas.barrio import BarrioOut
from devocionales.schemas.family import FamilyCreate, FamilyDetailOut, FamilyOut, FamilyUpdate
from devocionales.schemas.nucleo import NucleoOut
from devocionales.services.families import FAMILIES
from devocionales.services.loaders import barrio_of, members_of, nucleo_of, or_none, visits_of
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records

router = APIRouter(prefix="/families", tags=["families"])


def family_detail(store: Store, family: Family) -> FamilyDetailOut:
    detail = FamilyDetailOut.model_validate(family)
    barrio = or_none(barrio_of(store, family))
    nucleo = or_none(nucleo_of(store, family))
    detail.barrio = BarrioOut.model_validate(barrio) if barrio else None
    detail.nucleo = NucleoOut.model_validate(nucleo) if nucleo else None
    detail.members = [member_out(member) for member in members_of(store, family)]
    detail.visits = [visit_out(store, visit) for visit in visits_of(store, family)]
    return detail


@router.get("", response_model=list[FamilyOut])
def list_families(
    nucleo_id: int | None = Query(default=None),
    barrio_id: int | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    limit: int = Query(default=200, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    extra = all_of(
        None if include_inactive else Eq("active", True),
        Eq("nucleo_id", nucleo_id) if nucleo_id is not None else None,
        Eq("barrio_id", barrio_id) if barrio_id is not None else None,
    )
    return list_records(
        Store(db), profile, FAMILIES, extra=extra, sort=Sort("name"), limit=limit, offset=offset
    )


@router.get("/{family_id}", response_model=FamilyDetailOut)
def get_family(
    family_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    family = unwrap(get_record(store, profile, FAMILIES, family_id))
    return family_detail(store, family)


@router.post("", response_model=FamilyOut, status_code=status.HTTP_201_CREATED)
def create_family(
    payload: FamilyCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, FAMILIES).create(actor_id, payload.model_dump()))


@router.patch("/{family_id}", response_model=FamilyOut)
def update_family(
    family_id: int,
    payload: FamilyUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    return unwrap(MutationPipeline(db, FAMILIES).update(actor_id, family_id, data))


@router.delete("/{family_id}", response_model=bool)
def delete_family(
    family_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, FAMILIES).delete(actor_id, family_id))
