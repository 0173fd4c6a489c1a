import pytest

from devocionales.db.filters import MATCH_ALL, MATCH_NONE, And, Eq
from devocionales.models.timeline_event import EntityType
from devocionales.models.user import Role
from devocionales.services.permissions import (
    Access,
    Action,
    PermissionProfile,
    can_create,
    can_modify,
    evaluate,
    read_constraint,
    timeline_constraint,
)


def _profile(role: Role, nucleo_id: int | None = None) -> PermissionProfile:
    return PermissionProfile(user_id=7, role=role, community_id=1, nucleo_id=nucleo_id)


@pytest.mark.parametrize(
    ("role", "entity_type", "expected"),
    [
        (Role.admin, EntityType.barrio, True),
        (Role.cea, EntityType.nucleo, True),
        (Role.mca, EntityType.goal, True),
        (Role.collaborator, EntityType.family, True),
        (Role.collaborator, EntityType.member, True),
        (Role.collaborator, EntityType.visit, True),
        (Role.collaborator, EntityType.barrio, False),
        (Role.collaborator, EntityType.nucleo, False),
        (Role.visitor, EntityType.visit, True),
        (Role.visitor, EntityType.family, False),
        (Role.visitor, EntityType.member, False),
        (Role.visitor, EntityType.goal, False),
    ],
)
def test_create_rules(role: Role, entity_type: EntityType, expected: bool):
    assert can_create(_profile(role, nucleo_id=3), entity_type) is expected


@pytest.mark.parametrize("role", [Role.admin, Role.cea, Role.mca])
def test_admin_tier_modifies_anything(role: Role):
    profile = _profile(role)
    for entity_type in (EntityType.family, EntityType.barrio, EntityType.goal):
        assert can_modify(profile, entity_type, None)
        assert can_modify(profile, entity_type, 99)


def test_collaborator_modifies_only_own_nucleo():
    profile = _profile(Role.collaborator, nucleo_id=3)
    assert can_modify(profile, EntityType.family, 3)
    assert not can_modify(profile, EntityType.family, 4)
    assert not can_modify(profile, EntityType.family, None)


def test_collaborator_never_modifies_reference_data():
    profile = _profile(Role.collaborator, nucleo_id=3)
    assert not can_modify(profile, EntityType.barrio, 3)
    assert not can_modify(profile, EntityType.nucleo, 3)


def test_collaborator_without_nucleo_modifies_nothing():
    profile = _profile(Role.collaborator)
    assert evaluate(profile, Action.modify, EntityType.member).access is Access.deny
    assert not can_modify(profile, EntityType.member, None)


@pytest.mark.parametrize("entity_type", [EntityType.family, EntityType.member, EntityType.visit])
def test_visitor_modifies_nothing(entity_type: EntityType):
    assert not can_modify(_profile(Role.visitor, nucleo_id=3), entity_type, 3)


def test_read_constraints():
    assert read_constraint(_profile(Role.admin), EntityType.family) == MATCH_ALL
    assert read_constraint(_profile(Role.collaborator, nucleo_id=3), EntityType.family) == Eq("nucleo_id", 3)
    assert read_constraint(_profile(Role.collaborator), EntityType.family) == MATCH_NONE
    assert read_constraint(_profile(Role.collaborator, nucleo_id=3), EntityType.barrio) == MATCH_ALL
    assert read_constraint(_profile(Role.visitor), EntityType.family) == MATCH_NONE
    assert read_constraint(_profile(Role.visitor), EntityType.visit) == MATCH_ALL


def test_timeline_constraint_by_tier():
    assert timeline_constraint(_profile(Role.admin)) == Eq("community_id", 1)
    assert timeline_constraint(_profile(Role.collaborator, nucleo_id=3)) == And(
        (Eq("community_id", 1), Eq("nucleo_id", 3))
    )
    assert timeline_constraint(_profile(Role.collaborator)) == MATCH_NONE
    assert timeline_constraint(_profile(Role.visitor)) == And(
        (Eq("community_id", 1), Eq("actor_id", 7))
    )
