from __future__ import annotations

from devocionales.db.filters import Eq, all_of
from devocionales.models.family import Family
from devocionales.models.nucleo import Nucleo
from devocionales.models.timeline_event import EntityType
from devocionales.services.nucleos import barrio_exists
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler, MutationContext
from devocionales.services.results import Failure, bad_request


def nucleo_exists(ctx: MutationContext, nucleo_id: int) -> bool:
    return ctx.store.count(
        Nucleo, all_of(Eq("id", nucleo_id), Eq("community_id", ctx.profile.community_id))
    ) > 0


def validate_location(ctx: MutationContext, data: dict) -> Failure | None:
    if data.get("barrio_id") is not None and not barrio_exists(ctx, data["barrio_id"]):
        return bad_request("The referenced barrio does not exist")
    if data.get("nucleo_id") is not None and not nucleo_exists(ctx, data["nucleo_id"]):
        return bad_request("The referenced nucleo does not exist")
    return None


def _validate(ctx: MutationContext, data: dict, record: Family | None) -> Failure | None:
    return validate_location(ctx, data)


def _defaults(ctx: MutationContext, data: dict) -> dict:
    return {
        "community_id": ctx.profile.community_id,
        "active": True,
        "member_count": 0,
        "status": data.get("status") or "active",
    }


def _audit(family: Family) -> AuditDetails:
    return AuditDetails(
        metadata={"name": family.name}, barrio_id=family.barrio_id, nucleo_id=family.nucleo_id
    )


FAMILIES = EntityHandler(
    entity_type=EntityType.family,
    model=Family,
    label="Family",
    delete_mode=DeleteMode.soft,
    audit=_audit,
    defaults=_defaults,
    validate=_validate,
)
