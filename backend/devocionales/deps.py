from typing import Any

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from devocionales.core.security import decode_subject
from devocionales.core.settings import jwt_secret, settings
from devocionales.db.session import get_db
from devocionales.models.user import User
from devocionales.services.permissions import PermissionProfile, profile_for
from devocionales.services.results import ErrorCode, Failure, Success

STATUS_BY_CODE = {
    ErrorCode.unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.forbidden: status.HTTP_403_FORBIDDEN,
    ErrorCode.not_found: status.HTTP_404_NOT_FOUND,
    ErrorCode.bad_request: status.HTTP_400_BAD_REQUEST,
    ErrorCode.edit_conflict: status.HTTP_409_CONFLICT,
}


def _error(code: ErrorCode, message: str, **extensions: Any) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_CODE[code],
        detail={"code": code.value, "message": message, **extensions},
    )


def unwrap(result: Success | Failure) -> Any:
    if isinstance(result, Failure):
        raise _error(result.code, result.message, **result.extensions)
    return result.value


def get_actor_id(authorization: str | None = Header(default=None)) -> int | None:
    """User id from the bearer token, or None. Mutations decide what an anonymous call means."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return decode_subject(token, secret=jwt_secret(), alg=settings.jwt_alg)


def get_current_user(
    db: Session = Depends(get_db), actor_id: int | None = Depends(get_actor_id)
) -> User:
    if actor_id is None:
        raise _error(ErrorCode.unauthenticated, "Missing or invalid bearer token")
    user = db.scalar(select(User).where(User.id == actor_id))
    if not user or not user.is_active:
        raise _error(ErrorCode.unauthenticated, "Inactive user")
    return user


def get_current_profile(user: User = Depends(get_current_user)) -> PermissionProfile:
    return profile_for(user)
