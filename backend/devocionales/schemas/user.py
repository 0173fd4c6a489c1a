from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from devocionales.models.user import Role as RoleEnum


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    first_name: str
    last_name: Optional[str] = None
    full_name: str
    role: RoleEnum
    is_active: bool
    must_change_password: bool
    community_id: int
    created_at: datetime


class InviteRequest(BaseModel):
    member_id: int
    role: RoleEnum = RoleEnum.visitor


class CredentialsOut(BaseModel):
    user: UserOut
    temp_password: str


class RoleUpdate(BaseModel):
    role: str
