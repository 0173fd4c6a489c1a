from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from devocionales.db.session import get_db
from devocionales.deps import get_current_profile, get_current_user, unwrap
from devocionales.models.user import Role, User
from devocionales.schemas.user import CredentialsOut, InviteRequest, RoleUpdate, UserOut
from devocionales.services.permissions import PermissionProfile
from devocionales.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


def _credentials_out(issued: user_service.IssuedCredentials) -> CredentialsOut:
    return CredentialsOut(user=UserOut.model_validate(issued.user), temp_password=issued.temp_password)


@router.get("", response_model=list[UserOut])
def list_users(
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    return unwrap(user_service.list_users(db, profile))


@router.get("/roles", response_model=list[str])
def list_roles(_user: User = Depends(get_current_user)):
    return [role.value for role in Role]


@router.post("/from-member", response_model=CredentialsOut, status_code=status.HTTP_201_CREATED)
def invite_from_member(
    payload: InviteRequest,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
    profile: PermissionProfile = Depends(get_current_profile),
):
    issued = unwrap(
        user_service.invite_from_member(
            db, actor=actor, profile=profile, member_id=payload.member_id, role=payload.role
        )
    )
    return _credentials_out(issued)


@router.post("/from-member/{member_id}/regenerate", response_model=CredentialsOut)
def regenerate_credentials(
    member_id: int,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
    profile: PermissionProfile = Depends(get_current_profile),
):
    issued = unwrap(
        user_service.regenerate_credentials(db, actor=actor, profile=profile, member_id=member_id)
    )
    return _credentials_out(issued)


@router.patch("/{user_id}/role", response_model=UserOut)
def change_role(
    user_id: int,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
    profile: PermissionProfile = Depends(get_current_profile),
):
    return unwrap(
        user_service.update_role(db, actor=actor, profile=profile, user_id=user_id, role=payload.role)
    )
