from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from devocionales.schemas.common import VersionedOut
from devocionales.services.derivations import GoalState


class GoalCreate(BaseModel):
    quarter: str = Field(min_length=1, max_length=80)
    start_date: date
    end_date: date
    target_nucleos: int = Field(default=0, ge=0)
    target_visits: int = Field(default=0, ge=0)
    target_visitors: int = Field(default=0, ge=0)
    target_devotionals: int = Field(default=0, ge=0)


class GoalUpdate(BaseModel):
    quarter: Optional[str] = Field(default=None, min_length=1, max_length=80)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    target_nucleos: Optional[int] = Field(default=None, ge=0)
    target_visits: Optional[int] = Field(default=None, ge=0)
    target_visitors: Optional[int] = Field(default=None, ge=0)
    target_devotionals: Optional[int] = Field(default=None, ge=0)
    last_updated_at: Optional[str] = None


class GoalProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    nucleos: int
    visits: int
    visitors: int
    devotionals: int
    nucleos_pct: float
    visits_pct: float
    visitors_pct: float
    devotionals_pct: float


class GoalOut(VersionedOut):
    id: int
    quarter: str
    start_date: date
    end_date: date
    target_nucleos: int
    target_visits: int
    target_visitors: int
    target_devotionals: int
    state: Optional[GoalState] = None
    progress: Optional[GoalProgressOut] = None
