from typing import Optional

from pydantic import BaseModel, Field

from devocionales.schemas.common import VersionedOut


class BarrioCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class BarrioUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    active: Optional[bool] = None
    last_updated_at: Optional[str] = None


class BarrioOut(VersionedOut):
    id: int
    name: str
    description: Optional[str] = None
    active: bool
