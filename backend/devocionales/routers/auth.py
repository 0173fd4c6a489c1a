from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from devocionales.core.security import create_access_token
from devocionales.core.settings import jwt_secret, settings
from devocionales.db.session import get_db
from devocionales.deps import get_current_user, unwrap
from devocionales.models.timeline_event import ActionType, EntityType
from devocionales.models.user import User
from devocionales.schemas.auth import ChangePasswordRequest, LoginRequest, MessageResponse, Token
from devocionales.schemas.user import UserOut
from devocionales.services.rate_limit import FailedAttemptLimiter
from devocionales.services.results import Failure
from devocionales.services.timeline import record_event
from devocionales.services.users import authenticate, change_password

router = APIRouter(prefix="/auth", tags=["auth"])


LOGIN_LIMITER = FailedAttemptLimiter(max_attempts=settings.login_attempts_per_minute, window_seconds=60)


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    ip_address = request.client.host if request.client else "unknown"
    rate_key = f"{ip_address}:{payload.email.lower().strip()}"
    if LOGIN_LIMITER.blocked(rate_key):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many login attempts")

    result = authenticate(db, payload.email, payload.password)
    if isinstance(result, Failure):
        LOGIN_LIMITER.record_failure(rate_key)
    user = unwrap(result)
    LOGIN_LIMITER.reset(rate_key)
    token = create_access_token(
        subject=str(user.id),
        secret=jwt_secret(),
        alg=settings.jwt_alg,
        expires_minutes=settings.access_token_expire_minutes,
        extra={"role": user.role.value, "email": user.email},
    )
    record_event(
        db,
        actor=user,
        action_type=ActionType.login,
        entity_type=EntityType.user,
        entity_id=user.id,
        metadata={"email": user.email},
    )
    return Token(
        access_token=token,
        must_change_password=user.must_change_password,
        user=UserOut.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    record_event(
        db,
        actor=user,
        action_type=ActionType.logout,
        entity_type=EntityType.user,
        entity_id=user.id,
        metadata={"email": user.email},
    )
    return MessageResponse(message="Signed out.")


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.post("/change-password", response_model=MessageResponse)
def update_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    unwrap(
        change_password(
            db, user=user, current_password=payload.current_password, new_password=payload.new_password
        )
    )
    return MessageResponse(message="Password updated.")
