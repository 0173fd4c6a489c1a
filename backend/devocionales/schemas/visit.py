from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from devocionales.models.visit import VisitStatus, VisitType
from devocionales.schemas.common import VersionedOut

TIME_PATTERN = r"^\d{2}:\d{2}$"


class VisitActivities(BaseModel):
    conversation: bool = False
    prayers: bool = False
    institute_study: bool = False
    institute_study_detail: Optional[str] = None
    other_study: bool = False
    other_study_detail: Optional[str] = None
    activity_invitation: bool = False
    activity_invitation_detail: Optional[str] = None


class VisitMaterials(BaseModel):
    prayer_book: bool = False
    other: bool = False
    other_detail: Optional[str] = None


class VisitorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: Optional[str] = None


class VisitCreate(BaseModel):
    family_id: int
    visit_date: date
    visit_time: str = Field(pattern=TIME_PATTERN)
    visit_type: VisitType
    barrio_id: Optional[int] = None
    barrio_other: Optional[str] = None
    nucleo_id: Optional[int] = None
    visitor_user_ids: list[int] = []
    no_visit_reason: Optional[str] = None
    no_visit_reason_other: Optional[str] = None
    activities: Optional[VisitActivities] = None
    materials: Optional[VisitMaterials] = None
    follow_up: bool = False
    follow_up_type: Optional[str] = None
    follow_up_date: Optional[date] = None
    follow_up_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    follow_up_basic_activity: bool = False
    follow_up_basic_activity_detail: Optional[str] = None
    follow_up_none: bool = False
    notes: Optional[str] = None


class VisitUpdate(BaseModel):
    family_id: Optional[int] = None
    visit_date: Optional[date] = None
    visit_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    visit_type: Optional[VisitType] = None
    barrio_id: Optional[int] = None
    barrio_other: Optional[str] = None
    nucleo_id: Optional[int] = None
    visitor_user_ids: Optional[list[int]] = None
    no_visit_reason: Optional[str] = None
    no_visit_reason_other: Optional[str] = None
    activities: Optional[VisitActivities] = None
    materials: Optional[VisitMaterials] = None
    follow_up: Optional[bool] = None
    follow_up_type: Optional[str] = None
    follow_up_date: Optional[date] = None
    follow_up_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    follow_up_basic_activity: Optional[bool] = None
    follow_up_basic_activity_detail: Optional[str] = None
    follow_up_none: Optional[bool] = None
    notes: Optional[str] = None
    last_updated_at: Optional[str] = None


class VisitOut(VersionedOut):
    id: int
    family_id: int
    created_by_id: int
    visit_date: date
    visit_time: str
    visit_type: VisitType
    status: VisitStatus
    barrio_id: Optional[int] = None
    barrio_other: Optional[str] = None
    nucleo_id: Optional[int] = None
    visitor_user_ids: list[int] = []
    visitors: list[VisitorOut] = []
    no_visit_reason: Optional[str] = None
    no_visit_reason_other: Optional[str] = None
    activities: VisitActivities = VisitActivities()
    materials: VisitMaterials = VisitMaterials()
    follow_up: bool
    follow_up_type: Optional[str] = None
    follow_up_date: Optional[date] = None
    follow_up_time: Optional[str] = None
    follow_up_basic_activity: bool
    follow_up_basic_activity_detail: Optional[str] = None
    follow_up_none: bool
    notes: Optional[str] = None
