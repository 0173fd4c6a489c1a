from __future__ import annotations

from devocionales.models.barrio import Barrio
from devocionales.models.timeline_event import EntityType
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler


def _audit(barrio: Barrio) -> AuditDetails:
    return AuditDetails(metadata={"name": barrio.name}, barrio_id=barrio.id)


def _defaults(ctx, data: dict) -> dict:
    return {"community_id": ctx.profile.community_id, "active": True}


BARRIOS = EntityHandler(
    entity_type=EntityType.barrio,
    model=Barrio,
    label="Barrio",
    delete_mode=DeleteMode.soft,
    audit=_audit,
    defaults=_defaults,
    scope_of=lambda barrio: None,
)
