from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session

from devocionales.db.filters import Eq, In, Range, Sort, all_of, compile_filter
from devocionales.db.store import Store
from devocionales.models.timeline_event import ActionType, EntityType, TimelineEvent
from devocionales.models.user import User
from devocionales.services.concurrency import to_jsonable
from devocionales.services.permissions import PermissionProfile, timeline_constraint

logger = logging.getLogger("devocionales.timeline")

ENTITY_NOUNS: dict[str, tuple[str, str]] = {
    EntityType.user.value: ("user", "users"),
    EntityType.family.value: ("family", "families"),
    EntityType.member.value: ("member", "members"),
    EntityType.visit.value: ("visit", "visits"),
    EntityType.goal.value: ("goal", "goals"),
    EntityType.barrio.value: ("barrio", "barrios"),
    EntityType.nucleo.value: ("nucleo", "nucleos"),
    EntityType.system.value: ("system", "systems"),
}


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)


def build_summary(
    actor_name: str,
    action_type: ActionType | str,
    entity_type: EntityType | str,
    metadata: dict[str, Any] | None = None,
) -> str:
    action = _value(action_type)
    entity = _value(entity_type)
    metadata = metadata or {}
    singular, plural = ENTITY_NOUNS.get(entity, (entity.lower(), entity.lower()))
    label = metadata.get("name") or metadata.get("email")

    if action == ActionType.login.value:
        return f"{actor_name} signed in"
    if action == ActionType.logout.value:
        return f"{actor_name} signed out"
    if action == ActionType.create.value:
        if label:
            return f'{actor_name} created the {singular} "{label}"'
        return f"{actor_name} created a {singular}"
    if action == ActionType.update.value:
        changed = metadata.get("changed_fields") or []
        if label and changed:
            return f'{actor_name} edited the {singular} "{label}" ({", ".join(changed)})'
        if label:
            return f'{actor_name} edited the {singular} "{label}"'
        return f"{actor_name} edited a {singular}"
    if action == ActionType.delete.value:
        count = metadata.get("count")
        if count and count > 1:
            return f"{actor_name} deleted {count} {plural}"
        if label:
            return f'{actor_name} deleted the {singular} "{label}"'
        return f"{actor_name} deleted a {singular}"
    if action in (ActionType.import_.value, ActionType.export.value):
        verb = "imported" if action == ActionType.import_.value else "exported"
        file_name = metadata.get("file_name")
        record_count = metadata.get("record_count")
        if file_name and record_count:
            return f'{actor_name} {verb} "{file_name}" ({record_count} records)'
        if file_name:
            return f'{actor_name} {verb} "{file_name}"'
        return f"{actor_name} {verb} data"
    return f"{actor_name} acted on a {singular}"


def personalize_summary(summary: str, actor_name: str, actor_id: int, current_user_id: int) -> str:
    if actor_id != current_user_id:
        return summary
    prefix = f"{actor_name} "
    if not summary.startswith(prefix):
        return summary
    return "You " + summary[len(prefix):]


def record_event(
    db: Session,
    *,
    actor: User | None,
    action_type: ActionType,
    entity_type: EntityType,
    entity_id: Any | None = None,
    metadata: dict[str, Any] | None = None,
    barrio_id: int | None = None,
    nucleo_id: int | None = None,
) -> TimelineEvent | None:
    """Write a timeline event in its own transaction. Never raises."""
    if actor is None:
        logger.warning("Timeline event skipped: no authenticated actor")
        return None
    try:
        actor_name = actor.full_name
        summary = build_summary(actor_name, action_type, entity_type, metadata)
        event = TimelineEvent(
            actor_id=actor.id,
            actor_name=actor_name,
            actor_role=actor.role.value,
            action_type=action_type.value,
            entity_type=entity_type.value,
            entity_id=str(entity_id) if entity_id is not None else None,
            summary=summary,
            metadata_json={k: to_jsonable(v) for k, v in metadata.items()} if metadata else None,
            community_id=actor.community_id,
            barrio_id=barrio_id,
            nucleo_id=nucleo_id,
        )
        db.add(event)
        db.commit()
        logger.info("Timeline event recorded: %s", summary)
        return event
    except Exception:
        db.rollback()
        logger.exception(
            "Failed to record timeline event (%s %s %s)",
            _value(action_type),
            _value(entity_type),
            entity_id,
        )
        return None


@dataclass
class TimelinePage:
    events: list[TimelineEvent]
    has_more: bool
    cursor: int | None


def list_events(
    store: Store,
    profile: PermissionProfile,
    *,
    action_types: list[str] | None = None,
    entity_types: list[str] | None = None,
    actor_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = 50,
    cursor: int | None = None,
) -> TimelinePage:
    filters = [timeline_constraint(profile)]
    if action_types:
        filters.append(In("action_type", action_types))
    if entity_types:
        filters.append(In("entity_type", entity_types))
    if actor_id is not None:
        filters.append(Eq("actor_id", actor_id))
    if start_date or end_date:
        filters.append(
            Range(
                "created_at",
                gte=datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None,
                # The end date covers the whole day.
                lte=datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None,
            )
        )
    if cursor is not None:
        filters.append(Range("id", lt=cursor))

    rows = store.find_many(
        TimelineEvent,
        all_of(*filters),
        [Sort("id", descending=True)],
        limit=limit + 1,
    )
    has_more = len(rows) > limit
    events = rows[:limit]
    next_cursor = events[-1].id if has_more and events else None
    return TimelinePage(events=events, has_more=has_more, cursor=next_cursor)


def purge_events_before(db: Session, cutoff: datetime, *, apply: bool = True) -> int:
    """Delete timeline events created before ``cutoff``. Returns how many matched."""
    stale = Range("created_at", lt=cutoff)
    store = Store(db)
    count = store.count(TimelineEvent, stale)
    if apply and count:
        db.execute(delete(TimelineEvent).where(compile_filter(TimelineEvent, stale)))
        db.commit()
        logger.info("Purged %s timeline events older than %s", count, cutoff.isoformat())
    return count
