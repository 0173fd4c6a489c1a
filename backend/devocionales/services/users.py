from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from devocionales.core.security import generate_temp_password, hash_password, verify_password
from devocionales.core.settings import settings
from devocionales.models.community import Community
from devocionales.models.member import Member
from devocionales.models.timeline_event import ActionType, EntityType
from devocionales.models.user import Role, User
from devocionales.services.permissions import PermissionProfile, can_create, is_admin
from devocionales.services.results import (
    Failure,
    Result,
    Success,
    bad_request,
    forbidden,
    not_found,
    unauthenticated,
)
from devocionales.services.timeline import record_event

INVITABLE_BY_COLLABORATOR = frozenset({Role.collaborator, Role.visitor})


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.lower().strip()))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.scalar(select(User).where(User.id == user_id))


def authenticate(db: Session, email: str, password: str) -> Result:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return unauthenticated("Invalid credentials")
    if not user.is_active:
        return forbidden("Inactive user")
    return Success(user)


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str,
    community_id: int,
    last_name: str | None = None,
    role: Role = Role.visitor,
    must_change_password: bool = False,
) -> User:
    user = User(
        email=email.lower().strip(),
        first_name=first_name,
        last_name=last_name,
        role=role,
        must_change_password=must_change_password,
        hashed_password=hash_password(password),
        community_id=community_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def user_count(db: Session) -> int:
    return int(db.scalar(select(func.count(User.id))) or 0)


def seed_initial_admin(db: Session, *, email: str, password: str, community_name: str) -> bool:
    if user_count(db) > 0:
        return False
    community = Community(name=community_name, active=True)
    db.add(community)
    db.flush()
    create_user(
        db,
        email=email,
        password=password,
        first_name="Admin",
        community_id=community.id,
        role=Role.admin,
        must_change_password=True,
    )
    return True


def validate_new_password(password: str) -> Failure | None:
    if len(password) < settings.min_password_length:
        return bad_request(f"Password too short (min {settings.min_password_length} characters)")
    if len(password.encode("utf-8")) > 72:
        return bad_request("Password too long")
    return None


def change_password(db: Session, *, user: User, current_password: str, new_password: str) -> Result:
    if not verify_password(current_password, user.hashed_password):
        return bad_request("Current password is incorrect")
    failure = validate_new_password(new_password)
    if failure:
        return failure
    user.hashed_password = hash_password(new_password)
    user.must_change_password = False
    db.add(user)
    db.commit()
    db.refresh(user)
    record_event(
        db,
        actor=user,
        action_type=ActionType.update,
        entity_type=EntityType.user,
        entity_id=user.id,
        metadata={"email": user.email, "changed_fields": ["password"]},
    )
    return Success(user)


@dataclass
class IssuedCredentials:
    user: User
    temp_password: str


def _load_member(db: Session, profile: PermissionProfile, member_id: int) -> Member | Failure:
    member = db.get(Member, member_id)
    if member is None or member.community_id != profile.community_id:
        return not_found("Member not found")
    return member


def invite_from_member(
    db: Session, *, actor: User, profile: PermissionProfile, member_id: int, role: Role
) -> Result:
    if not can_create(profile, EntityType.user):
        return forbidden("Not allowed to invite users")
    if not profile.is_admin and role not in INVITABLE_BY_COLLABORATOR:
        return forbidden("Collaborators may only grant collaborator or visitor roles")
    member = _load_member(db, profile, member_id)
    if isinstance(member, Failure):
        return member
    if member.user_id is not None:
        return bad_request("This member already has a user account")
    if not member.email:
        return bad_request("The member needs an email address to create an account")
    if get_user_by_email(db, member.email):
        return bad_request("The email is already in use by another user")

    temp_password = generate_temp_password(settings.temp_password_length)
    user = User(
        email=member.email.lower().strip(),
        first_name=member.first_name,
        last_name=member.last_name,
        role=role,
        must_change_password=True,
        hashed_password=hash_password(temp_password),
        community_id=profile.community_id,
    )
    db.add(user)
    db.flush()
    member.user_id = user.id
    db.add(member)
    db.commit()
    db.refresh(user)
    record_event(
        db,
        actor=actor,
        action_type=ActionType.create,
        entity_type=EntityType.user,
        entity_id=user.id,
        metadata={"email": user.email, "role": role.value},
        barrio_id=member.barrio_id,
        nucleo_id=member.nucleo_id,
    )
    return Success(IssuedCredentials(user=user, temp_password=temp_password))


def regenerate_credentials(db: Session, *, actor: User, profile: PermissionProfile, member_id: int) -> Result:
    if not can_create(profile, EntityType.user):
        return forbidden("Not allowed to regenerate credentials")
    member = _load_member(db, profile, member_id)
    if isinstance(member, Failure):
        return member
    user = member.user
    if user is None:
        return bad_request("This member has no user account")
    if not profile.is_admin and is_admin(user.role):
        return forbidden("Collaborators cannot reset administrator credentials")

    temp_password = generate_temp_password(settings.temp_password_length)
    user.hashed_password = hash_password(temp_password)
    user.must_change_password = True
    db.add(user)
    db.commit()
    db.refresh(user)
    record_event(
        db,
        actor=actor,
        action_type=ActionType.update,
        entity_type=EntityType.user,
        entity_id=user.id,
        metadata={"email": user.email, "changed_fields": ["password"]},
    )
    return Success(IssuedCredentials(user=user, temp_password=temp_password))


def update_role(db: Session, *, actor: User, profile: PermissionProfile, user_id: int, role: str) -> Result:
    if not profile.is_admin:
        return forbidden("Only administrators can change roles")
    try:
        new_role = Role(role)
    except ValueError:
        return bad_request("Invalid role")
    user = get_user_by_id(db, user_id)
    if user is None or user.community_id != profile.community_id:
        return not_found("User not found")
    previous = user.role
    user.role = new_role
    db.add(user)
    db.commit()
    db.refresh(user)
    if previous != new_role:
        record_event(
            db,
            actor=actor,
            action_type=ActionType.update,
            entity_type=EntityType.user,
            entity_id=user.id,
            metadata={"email": user.email, "changed_fields": ["role"]},
        )
    return Success(user)


def list_users(db: Session, profile: PermissionProfile) -> Result:
    if not profile.is_admin:
        return forbidden("Only administrators can list users")
    stmt = select(User).where(User.community_id == profile.community_id).order_by(User.first_name)
    return Success(list(db.scalars(stmt)))
