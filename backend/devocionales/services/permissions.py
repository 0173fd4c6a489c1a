"""Role-based access policy.

Rules live in a table keyed by (role tier, action, entity type). Evaluating a
rule yields a ``Decision``; read decisions are turned into filter predicates
that are injected into store queries rather than applied after loading.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

from devocionales.db.filters import MATCH_ALL, MATCH_NONE, Eq, Predicate, all_of
from devocionales.models.timeline_event import EntityType
from devocionales.models.user import ADMIN_ROLES, Role, User


class Action(str, enum.Enum):
    read = "read"
    create = "create"
    modify = "modify"


class Access(str, enum.Enum):
    allow_all = "allow_all"
    allow_scoped = "allow_scoped"
    deny = "deny"


@dataclass(frozen=True)
class Decision:
    access: Access
    scope_id: int | None = None

    @property
    def denied(self) -> bool:
        return self.access is Access.deny


ALLOW_ALL = Decision(Access.allow_all)
DENY = Decision(Access.deny)


@dataclass(frozen=True)
class PermissionProfile:
    user_id: int
    role: Role
    community_id: int
    nucleo_id: int | None = None
    barrio_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return is_admin(self.role)


def is_admin(role: Role) -> bool:
    return role in ADMIN_ROLES


def profile_for(user: User) -> PermissionProfile:
    member = user.member
    return PermissionProfile(
        user_id=user.id,
        role=user.role,
        community_id=user.community_id,
        nucleo_id=member.nucleo_id if member else None,
        barrio_id=member.barrio_id if member else None,
    )


# Rule values: "all" -> unrestricted, "nucleo" -> restricted to the actor's nucleo, None -> denied.
_REFERENCE = {EntityType.barrio, EntityType.nucleo}
_ROSTER = {EntityType.family, EntityType.member, EntityType.visit}

POLICY: dict[tuple[str, Action, EntityType], str | None] = {}

for _entity in EntityType:
    POLICY[("admin", Action.read, _entity)] = "all"
    POLICY[("admin", Action.create, _entity)] = "all"
    POLICY[("admin", Action.modify, _entity)] = "all"

    POLICY[("collaborator", Action.create, _entity)] = None if _entity in _REFERENCE else "all"
    POLICY[("collaborator", Action.modify, _entity)] = "nucleo" if _entity in _ROSTER else None
    POLICY[("collaborator", Action.read, _entity)] = "nucleo" if _entity in _ROSTER else "all"

    POLICY[("visitor", Action.create, _entity)] = "all" if _entity is EntityType.visit else None
    POLICY[("visitor", Action.modify, _entity)] = None
    POLICY[("visitor", Action.read, _entity)] = "all" if _entity is EntityType.visit else None

POLICY[("collaborator", Action.read, EntityType.user)] = None


def _tier(role: Role) -> str:
    if is_admin(role):
        return "admin"
    return role.value


def evaluate(profile: PermissionProfile, action: Action, entity_type: EntityType) -> Decision:
    rule = POLICY.get((_tier(profile.role), action, entity_type))
    if rule == "all":
        return ALLOW_ALL
    if rule == "nucleo":
        if profile.nucleo_id is None:
            return DENY
        return Decision(Access.allow_scoped, profile.nucleo_id)
    return DENY


def can_create(profile: PermissionProfile, entity_type: EntityType) -> bool:
    return not evaluate(profile, Action.create, entity_type).denied


def can_modify(
    profile: PermissionProfile, entity_type: EntityType, entity_nucleo_id: int | None
) -> bool:
    decision = evaluate(profile, Action.modify, entity_type)
    if decision.access is Access.allow_all:
        return True
    if decision.access is Access.allow_scoped:
        return entity_nucleo_id is not None and entity_nucleo_id == decision.scope_id
    return False


def read_constraint(profile: PermissionProfile, entity_type: EntityType) -> Predicate:
    decision = evaluate(profile, Action.read, entity_type)
    if decision.access is Access.allow_all:
        return MATCH_ALL
    if decision.access is Access.allow_scoped:
        return Eq("nucleo_id", decision.scope_id)
    return MATCH_NONE


def community_constraint(profile: PermissionProfile, path: str = "community_id") -> Predicate:
    return Eq(path, profile.community_id)


def scoped_read_filter(
    profile: PermissionProfile,
    entity_type: EntityType,
    *,
    community_path: str = "community_id",
    extra: Predicate | None = None,
) -> Predicate:
    return all_of(
        community_constraint(profile, community_path),
        read_constraint(profile, entity_type),
        extra,
    )


def timeline_constraint(profile: PermissionProfile) -> Predicate:
    """Admin tier sees the whole community, collaborators their nucleo, visitors their own actions."""
    base = community_constraint(profile)
    if profile.is_admin:
        return base
    if profile.role is Role.collaborator:
        if profile.nucleo_id is None:
            return MATCH_NONE
        return all_of(base, Eq("nucleo_id", profile.nucleo_id))
    return all_of(base, Eq("actor_id", profile.user_id))
