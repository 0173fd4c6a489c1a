from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, Sort, all_of
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_actor_id, get_current_profile, unwrap
from devocionales.models.member import Member
from devocionales.schemas.member import MemberCreate, MemberOut, MemberUpdate
from devocionales.services.members import MEMBERS, member_age
from devocionales.services.permissions import PermissionProfile
from devocionales.services.pipeline import MutationPipeline
from devocionales.services.queries import get_record, list_records

router = APIRouter(prefix="/members", tags=["members"])


def member_out(member: Member) -> MemberOut:
    out = MemberOut.model_validate(member)
    out.age = member_age(member)
    return out


@router.get("", response_model=list[MemberOut])
def list_members(
    family_id: int | None = Query(default=None),
    nucleo_id: int | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    limit: int = Query(default=200, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    extra = all_of(
        None if include_inactive else Eq("active", True),
        Eq("family_id", family_id) if family_id is not None else None,
        Eq("nucleo_id", nucleo_id) if nucleo_id is not None else None,
    )
    members = list_records(
        Store(db), profile, MEMBERS, extra=extra, sort=Sort("first_name"), limit=limit, offset=offset
    )
    return [member_out(member) for member in members]


@router.get("/devotionals", response_model=list[MemberOut])
def list_devotional_hosts(
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    extra = all_of(Eq("active", True), Eq("has_devotional", True))
    members = list_records(Store(db), profile, MEMBERS, extra=extra, sort=Sort("first_name"))
    return [member_out(member) for member in members]


@router.get("/{member_id}", response_model=MemberOut)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    return member_out(unwrap(get_record(Store(db), profile, MEMBERS, member_id)))


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return member_out(unwrap(MutationPipeline(db, MEMBERS).create(actor_id, payload.model_dump())))


@router.patch("/{member_id}", response_model=MemberOut)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    data = payload.model_dump(exclude_unset=True)
    return member_out(unwrap(MutationPipeline(db, MEMBERS).update(actor_id, member_id, data)))


@router.delete("/{member_id}", response_model=bool)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id),
):
    return unwrap(MutationPipeline(db, MEMBERS).delete(actor_id, member_id))
