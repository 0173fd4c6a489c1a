from typing import Optional

from pydantic import BaseModel, Field

from devocionales.schemas.common import VersionedOut


class NucleoCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    barrio_id: int
    description: Optional[str] = None


class NucleoUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    barrio_id: Optional[int] = None
    description: Optional[str] = None
    active: Optional[bool] = None
    last_updated_at: Optional[str] = None


class NucleoOut(VersionedOut):
    id: int
    name: str
    description: Optional[str] = None
    active: bool
    barrio_id: int
