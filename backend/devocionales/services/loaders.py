"""Explicit relation loaders.

Each loader takes a typed entity and returns the related entity, or the
``NOT_FOUND`` sentinel when the reference is empty or dangling. Nothing here
relies on relations having been eagerly loaded.
"""
from __future__ import annotations

from typing import Any, Final

from devocionales.db.filters import Eq, In, Sort, all_of
from devocionales.db.store import Store
from devocionales.models import Barrio, Family, Member, Nucleo, User, Visit


class _NotFound:
    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Final = _NotFound()


def _load(store: Store, model, record_id: int | None) -> Any:
    record = store.find_by_id(model, record_id)
    return NOT_FOUND if record is None else record


def or_none(value: Any) -> Any:
    return None if value is NOT_FOUND else value


def family_of(store: Store, entity: Member | Visit) -> Family | _NotFound:
    return _load(store, Family, entity.family_id)


def nucleo_of(store: Store, entity: Family | Member | Visit) -> Nucleo | _NotFound:
    return _load(store, Nucleo, entity.nucleo_id)


def barrio_of(store: Store, entity: Family | Member | Visit | Nucleo) -> Barrio | _NotFound:
    return _load(store, Barrio, entity.barrio_id)


def user_of(store: Store, member: Member) -> User | _NotFound:
    return _load(store, User, member.user_id)


def creator_of(store: Store, visit: Visit) -> User | _NotFound:
    return _load(store, User, visit.created_by_id)


def visitors_of(store: Store, visit: Visit) -> list[User]:
    ids = [int(user_id) for user_id in visit.visitor_user_ids or []]
    if not ids:
        return []
    return store.find_many(User, In("id", ids), Sort("first_name"))


def members_of(store: Store, family: Family) -> list[Member]:
    return store.find_many(
        Member,
        all_of(Eq("family_id", family.id), Eq("active", True)),
        Sort("registered_at", descending=True),
    )


def visits_of(store: Store, family: Family) -> list[Visit]:
    return store.find_many(Visit, Eq("family_id", family.id), Sort("visit_date", descending=True))
