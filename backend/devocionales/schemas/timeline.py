from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from devocionales.services.concurrency import version_token


class TimelineEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    created_at: datetime
    actor_id: int
    actor_name: str
    actor_role: str
    action_type: str
    entity_type: str
    entity_id: Optional[str] = None
    summary: str
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias="metadata_json")
    barrio_id: Optional[int] = None
    nucleo_id: Optional[int] = None

    @field_serializer("created_at")
    def _serialize_created_at(self, value: datetime) -> str:
        return version_token(value)


class TimelinePageOut(BaseModel):
    events: list[TimelineEventOut]
    has_more: bool
    cursor: Optional[int] = None
