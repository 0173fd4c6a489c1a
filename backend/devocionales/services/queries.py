from __future__ import annotations

from typing import Any

from devocionales.db.filters import Eq, Predicate, Sort, all_of
from devocionales.db.store import Store
from devocionales.services.permissions import PermissionProfile, scoped_read_filter
from devocionales.services.pipeline import EntityHandler
from devocionales.services.results import Result, Success, forbidden, not_found


def read_filter(
    profile: PermissionProfile, handler: EntityHandler, extra: Predicate | None = None
) -> Predicate:
    return scoped_read_filter(
        profile, handler.entity_type, community_path=handler.community_path, extra=extra
    )


def list_records(
    store: Store,
    profile: PermissionProfile,
    handler: EntityHandler,
    *,
    extra: Predicate | None = None,
    sort: Sort | list[Sort] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Any]:
    return store.find_many(
        handler.model, read_filter(profile, handler, extra), sort, limit=limit, offset=offset
    )


def get_record(store: Store, profile: PermissionProfile, handler: EntityHandler, record_id: int) -> Result:
    record = store.find_by_id(handler.model, record_id)
    if record is None or handler.community_of(record) != profile.community_id:
        return not_found(f"{handler.label} not found")
    visible = store.find_one(handler.model, all_of(Eq("id", record_id), read_filter(profile, handler)))
    if visible is None:
        return forbidden(f"Not allowed to view this {handler.label.lower()}")
    return Success(record)
