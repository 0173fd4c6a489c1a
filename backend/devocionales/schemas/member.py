from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from devocionales.schemas.common import VersionedOut
from devocionales.services.concurrency import version_token


class MemberCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=120)
    last_name: Optional[str] = None
    family_id: Optional[int] = None
    user_id: Optional[int] = None
    address: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    birth_date: Optional[date] = None
    approximate_age: Optional[int] = Field(default=None, ge=0, le=130)
    phone: Optional[str] = None
    email: Optional[str] = None
    community_role: str = "member"
    family_role: Optional[str] = None
    has_devotional: bool = False
    devotional_day: Optional[str] = None
    devotional_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    devotional_participants: Optional[int] = Field(default=None, ge=0)
    devotional_member_ids: list[int] = []
    notes: Optional[str] = None


class MemberUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    last_name: Optional[str] = None
    family_id: Optional[int] = None
    address: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    birth_date: Optional[date] = None
    approximate_age: Optional[int] = Field(default=None, ge=0, le=130)
    phone: Optional[str] = None
    email: Optional[str] = None
    community_role: Optional[str] = None
    family_role: Optional[str] = None
    has_devotional: Optional[bool] = None
    devotional_day: Optional[str] = None
    devotional_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    devotional_participants: Optional[int] = Field(default=None, ge=0)
    devotional_member_ids: Optional[list[int]] = None
    active: Optional[bool] = None
    notes: Optional[str] = None
    last_updated_at: Optional[str] = None


class MemberOut(VersionedOut):
    id: int
    first_name: str
    last_name: Optional[str] = None
    family_id: Optional[int] = None
    user_id: Optional[int] = None
    address: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    birth_date: Optional[date] = None
    approximate_age: Optional[int] = None
    age_updated_at: Optional[datetime] = None
    age: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    community_role: str
    family_role: Optional[str] = None
    has_devotional: bool
    devotional_day: Optional[str] = None
    devotional_time: Optional[str] = None
    devotional_participants: Optional[int] = None
    devotional_member_ids: list[int] = []
    active: bool
    notes: Optional[str] = None
    registered_at: datetime

    @field_serializer("age_updated_at", "registered_at")
    def _serialize_instant(self, value: Optional[datetime]) -> Optional[str]:
        return version_token(value) if value else None
