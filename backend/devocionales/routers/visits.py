from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, Range, Sort, all_of
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.models.visit import Visit, VisitStatus
from devocionales.schemas.visit import VisitCreate, VisitorOut, VisitOut, VisitUpdate
from devocionales.services.loaders import visitors_of
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records
from devocionales.services.results import bad_request
from devocionales.services.visits import VISITS

router = APIRouter(prefix="/visits", tags=["visits"])

NEWEST_FIRST = [Sort("visit_date", descending=True), Sort("visit_time", descending=True)]


def visit_out(store: Store, visit: Visit) -> VisitOut:
    out = VisitOut.model_validate(visit)
    out.visitors = [VisitorOut.model_validate(user) for user in visitors_of(store, visit)]
    return out


@router.get("", response_model=list[VisitOut])
def list_visits(
    family_id: int | None = Query(default=None),
    visit_status: VisitStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=200, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    extra = all_of(
        Eq("family_id", family_id) if family_id is not None else None,
        Eq("status", visit_status) if visit_status is not None else None,
    )
    visits = list_records(store, profile, VISITS, extra=extra, sort=NEWEST_FIRST, limit=limit, offset=offset)
    return [visit_out(store, visit) for visit in visits]


@router.get("/cycle", response_model=list[VisitOut])
def list_cycle_visits(
    start: date = Query(...),
    end: date = Query(...),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    if start > end:
        unwrap(bad_request("Cycle start must not be after its end"))
    store = Store(db)
    visits = list_records(
        store, profile, VISITS, extra=Range("visit_date", gte=start, lte=end), sort=NEWEST_FIRST
    )
    return [visit_out(store, visit) for visit in visits]


@router.get("/{visit_id}", response_model=VisitOut)
def get_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    store = Store(db)
    return visit_out(store, unwrap(get_record(store, profile, VISITS, visit_id)))


@router.post("", response_model=VisitOut, status_code=status.HTTP_201_CREATED)
def create_visit(
    payload: VisitCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    visit = unwrap(MutationPipeline(db, VISITS).create(actor_id, payload.model_dump()))
    return visit_out(Store(db), visit)


@router.patch("/{visit_id}", response_model=VisitOut)
def update_visit(
    visit_id: int,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    visit = unwrap(MutationPipeline(db, VISITS).update(actor_id, visit_id, data))
    return visit_out(Store(db), visit)


@router.delete("/{visit_id}", response_model=bool)
def delete_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, VISITS).delete(actor_id, visit_id))
