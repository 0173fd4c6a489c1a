from __future__ import annotations

import logging

from devocionales.db.filters import Eq, all_of
from devocionales.db.store import Store
from devocionales.models.family import Family
from devocionales.models.member import Member
from devocionales.models.timeline_event import EntityType
from devocionales.models.user import User
from devocionales.services.derivations import derive_age
from devocionales.services.families import validate_location
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler, MutationContext
from devocionales.services.results import Failure, bad_request, forbidden

logger = logging.getLogger("devocionales.members")


def member_age(member: Member) -> int | None:
    return derive_age(member.birth_date, member.approximate_age, member.age_updated_at)


def refresh_member_count(store: Store, family_id: int) -> int:
    count = store.count(Member, all_of(Eq("family_id", family_id), Eq("active", True)))
    family = store.find_by_id(Family, family_id)
    if family is not None:
        family.member_count = count
        store.db.flush()
    return count


def _refresh_counts(ctx: MutationContext, before: dict | None, member: Member) -> None:
    family_ids = {member.family_id}
    if before is not None:
        family_ids.add(before.get("family_id"))
    for family_id in sorted(fid for fid in family_ids if fid is not None):
        try:
            refresh_member_count(ctx.store, family_id)
        except Exception:
            logger.exception("Member count refresh failed for family %s", family_id)
            raise


def _validate(ctx: MutationContext, data: dict, record: Member | None) -> Failure | None:
    community_id = ctx.profile.community_id
    family_id = data.get("family_id")
    if family_id is not None:
        exists = ctx.store.count(Family, all_of(Eq("id", family_id), Eq("community_id", community_id)))
        if not exists:
            return bad_request("The referenced family does not exist")
    failure = validate_location(ctx, data)
    if failure:
        return failure
    if record is not None and record.birth_date is not None and "birth_date" in data:
        if data["birth_date"] != record.birth_date:
            return bad_request("Birth date cannot be changed once set")
    user_id = data.get("user_id")
    if user_id is not None:
        user = ctx.store.find_by_id(User, user_id)
        if user is None or user.community_id != community_id:
            return bad_request("The referenced user does not exist")
        if user.member is not None and (record is None or user.member.id != record.id):
            return bad_request("The referenced user is already linked to another member")
    return None


def _derive(ctx: MutationContext, data: dict, record: Member | None) -> dict:
    if "approximate_age" not in data:
        return {}
    new_age = data["approximate_age"]
    if record is None:
        return {"age_updated_at": ctx.now} if new_age is not None else {}
    if new_age != record.approximate_age:
        return {"age_updated_at": ctx.now if new_age is not None else None}
    return {}


def _defaults(ctx: MutationContext, data: dict) -> dict:
    return {
        "community_id": ctx.profile.community_id,
        "active": True,
        "registered_at": ctx.now,
        "devotional_member_ids": data.get("devotional_member_ids") or [],
    }


def _guard_delete(ctx: MutationContext, member: Member) -> Failure | None:
    if member.user_id is not None:
        return forbidden(
            "Cannot delete a member linked to a user account; unlink or remove the account first"
        )
    return None


def _audit(member: Member) -> AuditDetails:
    name = f"{member.first_name} {member.last_name}" if member.last_name else member.first_name
    return AuditDetails(metadata={"name": name}, barrio_id=member.barrio_id, nucleo_id=member.nucleo_id)


MEMBERS = EntityHandler(
    entity_type=EntityType.member,
    model=Member,
    label="Member",
    delete_mode=DeleteMode.soft,
    audit=_audit,
    defaults=_defaults,
    validate=_validate,
    derive=_derive,
    after_write=_refresh_counts,
    guard_delete=_guard_delete,
)
