"""Mutation pipeline shared by every mutating endpoint.

Each mutation walks authenticate -> authorize -> (version check) -> derive
-> persist -> audit -> return, short-circuiting with a ``Failure`` on the
first rule that does not hold. Entity-specific behaviour is supplied through
an ``EntityHandler``. Timeline emission runs after the primary commit and can
never undo it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import enum
import logging
from typing import Any, Callable

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from devocionales.db.store import Store
from devocionales.models.base import utcnow
from devocionales.models.timeline_event import ActionType, EntityType
from devocionales.models.user import User
from devocionales.services.concurrency import (
    VersionConflict,
    check_version,
    snapshot_record,
    strip_version_token,
    to_jsonable,
)
from devocionales.services.permissions import (
    PermissionProfile,
    can_create,
    can_modify,
    profile_for,
)
from devocionales.services.results import (
    ErrorCode,
    Failure,
    Result,
    Success,
    bad_request,
    forbidden,
    not_found,
    unauthenticated,
)
from devocionales.services.timeline import record_event

logger = logging.getLogger("devocionales.pipeline")


class DeleteMode(str, enum.Enum):
    soft = "soft"
    hard = "hard"


@dataclass
class MutationContext:
    db: Session
    store: Store
    actor: User
    profile: PermissionProfile
    now: datetime = field(default_factory=utcnow)


@dataclass
class AuditDetails:
    metadata: dict[str, Any]
    barrio_id: int | None = None
    nucleo_id: int | None = None


Validator = Callable[[MutationContext, dict, Any], "Failure | None"]
Deriver = Callable[[MutationContext, dict, Any], dict]
AfterWrite = Callable[[MutationContext, "dict | None", Any], None]


def _nucleo_of(record: Any) -> int | None:
    return getattr(record, "nucleo_id", None)


def _community_of(record: Any) -> int | None:
    return getattr(record, "community_id", None)


def _community_default(ctx: MutationContext, data: dict) -> dict:
    return {"community_id": ctx.profile.community_id}


@dataclass
class EntityHandler:
    entity_type: EntityType
    model: type
    label: str
    delete_mode: DeleteMode
    audit: Callable[[Any], AuditDetails]
    defaults: Callable[[MutationContext, dict], dict] = _community_default
    scope_of: Callable[[Any], int | None] = _nucleo_of
    community_of: Callable[[Any], int | None] = _community_of
    validate: Validator | None = None
    derive: Deriver | None = None
    after_write: AfterWrite | None = None
    guard_delete: Callable[[MutationContext, Any], "Failure | None"] | None = None
    soft_delete_field: str = "active"
    community_path: str = "community_id"


def begin(db: Session, actor_id: int | None) -> MutationContext | Failure:
    if actor_id is None:
        return unauthenticated()
    store = Store(db)
    actor = store.find_by_id(User, actor_id)
    if actor is None or not actor.is_active:
        return unauthenticated("Inactive or unknown user")
    return MutationContext(db=db, store=store, actor=actor, profile=profile_for(actor))


def required_fields(model: type) -> frozenset[str]:
    return frozenset(
        attr.key for attr in inspect(model).column_attrs if not attr.columns[0].nullable
    )


def reject_nulls(model: type, data: dict) -> Failure | None:
    """Refuse an explicit ``None`` for a column the table cannot store as NULL."""
    nulled = sorted(key for key in required_fields(model) if key in data and data[key] is None)
    if nulled:
        return bad_request(f"Fields cannot be null: {', '.join(nulled)}")
    return None


def conflict_failure(conflict: VersionConflict) -> Failure:
    return Failure(
        ErrorCode.edit_conflict,
        "Another user modified this record",
        {"server_version": conflict.server_version, "server_snapshot": conflict.server_snapshot},
    )


class MutationPipeline:
    def __init__(self, db: Session, handler: EntityHandler):
        self.db = db
        self.handler = handler

    def _load_target(self, ctx: MutationContext, record_id: int) -> Any | Failure:
        record = ctx.store.find_by_id(self.handler.model, record_id)
        if record is None or self.handler.community_of(record) != ctx.profile.community_id:
            return not_found(f"{self.handler.label} not found")
        return record

    def _authorize_modify(self, ctx: MutationContext, record: Any, data: dict | None = None) -> Failure | None:
        entity_type = self.handler.entity_type
        if not can_modify(ctx.profile, entity_type, self.handler.scope_of(record)):
            return forbidden(f"Not allowed to modify this {self.handler.label.lower()}")
        if data and "nucleo_id" in data and not can_modify(ctx.profile, entity_type, data["nucleo_id"]):
            return forbidden(f"Not allowed to move this {self.handler.label.lower()} to another nucleo")
        return None

    def _commit(self, ctx: MutationContext, write: Callable[[], Any]) -> Any:
        try:
            result = write()
            ctx.db.commit()
        except Exception:
            ctx.db.rollback()
            logger.exception("%s write rolled back", self.handler.label)
            raise
        return result

    def _emit(self, ctx: MutationContext, action: ActionType, record_id: Any, details: AuditDetails) -> None:
        record_event(
            ctx.db,
            actor=ctx.actor,
            action_type=action,
            entity_type=self.handler.entity_type,
            entity_id=record_id,
            metadata=details.metadata,
            barrio_id=details.barrio_id,
            nucleo_id=details.nucleo_id,
        )

    def create(self, actor_id: int | None, payload: dict[str, Any]) -> Result:
        ctx = begin(self.db, actor_id)
        if isinstance(ctx, Failure):
            return ctx
        handler = self.handler
        if not can_create(ctx.profile, handler.entity_type):
            return forbidden(f"Not allowed to create {handler.label.lower()} records")

        _, data = strip_version_token(payload)
        if handler.validate:
            failure = handler.validate(ctx, data, None)
            if failure:
                return failure
        data.update(handler.defaults(ctx, data))
        if handler.derive:
            data.update(handler.derive(ctx, data, None))
        failure = reject_nulls(handler.model, data)
        if failure:
            return failure

        def _write():
            record = ctx.store.create(handler.model, data)
            if handler.after_write:
                handler.after_write(ctx, None, record)
            return record

        record = self._commit(ctx, _write)
        ctx.db.refresh(record)
        self._emit(ctx, ActionType.create, record.id, handler.audit(record))
        return Success(record)

    def update(self, actor_id: int | None, record_id: int, payload: dict[str, Any]) -> Result:
        ctx = begin(self.db, actor_id)
        if isinstance(ctx, Failure):
            return ctx
        handler = self.handler
        record = self._load_target(ctx, record_id)
        if isinstance(record, Failure):
            return record

        token, data = strip_version_token(payload)
        failure = self._authorize_modify(ctx, record, data)
        if failure:
            return failure

        check = check_version(record, token)
        if isinstance(check, VersionConflict):
            logger.info("%s %s edit conflict (client=%s server=%s)", handler.label, record_id, token, check.server_version)
            return conflict_failure(check)

        failure = reject_nulls(handler.model, data)
        if failure:
            return failure
        if handler.validate:
            failure = handler.validate(ctx, data, record)
            if failure:
                return failure
        if handler.derive:
            data.update(handler.derive(ctx, data, record))

        before = snapshot_record(record)
        changed_fields = sorted(key for key, value in data.items() if before.get(key) != to_jsonable(value))

        def _write():
            updated = ctx.store.update(handler.model, record.id, data)
            if handler.after_write:
                handler.after_write(ctx, before, updated)
            return updated

        record = self._commit(ctx, _write)
        ctx.db.refresh(record)
        details = handler.audit(record)
        details.metadata.setdefault("changed_fields", changed_fields)
        self._emit(ctx, ActionType.update, record.id, details)
        return Success(record)

    def delete(self, actor_id: int | None, record_id: int) -> Result:
        ctx = begin(self.db, actor_id)
        if isinstance(ctx, Failure):
            return ctx
        handler = self.handler
        record = self._load_target(ctx, record_id)
        if isinstance(record, Failure):
            return record
        failure = self._authorize_modify(ctx, record)
        if failure:
            return failure
        if handler.guard_delete:
            failure = handler.guard_delete(ctx, record)
            if failure:
                return failure

        details = handler.audit(record)
        before = snapshot_record(record)

        def _write():
            if handler.delete_mode is DeleteMode.soft:
                ctx.store.update(handler.model, record.id, {handler.soft_delete_field: False})
                if handler.after_write:
                    handler.after_write(ctx, before, record)
            else:
                ctx.store.delete(handler.model, record.id)
            return True

        self._commit(ctx, _write)
        self._emit(ctx, ActionType.delete, record_id, details)
        return Success(True)
