from __future__ import annotations

from devocionales.db.filters import Eq, all_of
from devocionales.models.family import Family
from devocionales.models.timeline_event import EntityType
from devocionales.models.visit import Visit
from devocionales.services.derivations import derive_visit_status, has_activities
from devocionales.services.families import validate_location
from devocionales.services.pipeline import AuditDetails, DeleteMode, EntityHandler, MutationContext
from devocionales.services.results import Failure, not_found

STATUS_INPUTS = ("visit_type", "visit_date", "activities")


def _validate(ctx: MutationContext, data: dict, record: Visit | None) -> Failure | None:
    family_id = data.get("family_id")
    if family_id is not None:
        exists = ctx.store.count(
            Family, all_of(Eq("id", family_id), Eq("community_id", ctx.profile.community_id))
        )
        if not exists:
            return not_found("Family not found")
    return validate_location(ctx, data)


def _derive(ctx: MutationContext, data: dict, record: Visit | None) -> dict:
    if record is not None and not any(key in data for key in STATUS_INPUTS):
        return {}
    visit_type = data.get("visit_type", record.visit_type if record else None)
    visit_date = data.get("visit_date", record.visit_date if record else None)
    activities = data.get("activities", record.activities if record else None)
    status = derive_visit_status(visit_type, visit_date, has_activities(activities))
    return {"status": status}


def _defaults(ctx: MutationContext, data: dict) -> dict:
    return {
        "created_by_id": ctx.profile.user_id,
        "visitor_user_ids": data.get("visitor_user_ids") or [],
        "activities": data.get("activities") or {},
        "materials": data.get("materials") or {},
    }


def _audit(visit: Visit) -> AuditDetails:
    family = visit.family
    return AuditDetails(
        metadata={"name": family.name if family else None, "visit_date": visit.visit_date},
        barrio_id=visit.barrio_id,
        nucleo_id=visit.nucleo_id,
    )


VISITS = EntityHandler(
    entity_type=EntityType.visit,
    model=Visit,
    label="Visit",
    delete_mode=DeleteMode.hard,
    audit=_audit,
    defaults=_defaults,
    validate=_validate,
    derive=_derive,
    community_of=lambda visit: visit.family.community_id if visit.family else None,
    community_path="family.community_id",
)
