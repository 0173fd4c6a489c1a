from typing import Optional

from pydantic import BaseModel, Field

from devocionales.schemas.barrio import BarrioOut
from devocionales.schemas.common import VersionedOut
from devocionales.schemas.member import MemberOut
from devocionales.schemas.nucleo import NucleoOut
from devocionales.schemas.visit import VisitOut


class FamilyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    barrio_label: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    status: Optional[str] = None
    notes: Optional[str] = None


class FamilyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    barrio_label: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    status: Optional[str] = None
    active: Optional[bool] = None
    notes: Optional[str] = None
    last_updated_at: Optional[str] = None


class FamilyOut(VersionedOut):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    barrio_label: Optional[str] = None
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    active: bool
    member_count: int
    notes: Optional[str] = None


class FamilyDetailOut(FamilyOut):
    barrio: Optional[BarrioOut] = None
    nucleo: Optional[NucleoOut] = None
    members: list[MemberOut] = []
    visits: list[VisitOut] = []
