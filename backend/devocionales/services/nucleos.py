from __future__ import annotations

from devocionales.db.filters import Eq, all_of
from devocionales.models.barrio import Barrio
from devocionales.models.nucleo import Nucleo
from devocionales.models.timeline_event import EntityType
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler, MutationContext
from devocionales.services.results import Failure, bad_request


def barrio_exists(ctx: MutationContext, barrio_id: int) -> bool:
    return ctx.store.count(
        Barrio, all_of(Eq("id", barrio_id), Eq("community_id", ctx.profile.community_id))
    ) > 0


def _validate(ctx: MutationContext, data: dict, record: Nucleo | None) -> Failure | None:
    barrio_id = data.get("barrio_id")
    if record is None and barrio_id is None:
        return bad_request("A nucleo must belong to a barrio")
    if barrio_id is not None and not barrio_exists(ctx, barrio_id):
        return bad_request("The referenced barrio does not exist")
    return None


def _defaults(ctx: MutationContext, data: dict) -> dict:
    return {"community_id": ctx.profile.community_id, "active": True}


def _audit(nucleo: Nucleo) -> AuditDetails:
    return AuditDetails(metadata={"name": nucleo.name}, barrio_id=nucleo.barrio_id, nucleo_id=nucleo.id)


NUCLEOS = EntityHandler(
    entity_type=EntityType.nucleo,
    model=Nucleo,
    label="Nucleo",
    delete_mode=DeleteMode.soft,
    audit=_audit,
    defaults=_defaults,
    validate=_validate,
    scope_of=lambda nucleo: nucleo.id,
)
