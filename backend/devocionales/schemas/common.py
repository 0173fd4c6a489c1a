from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_serializer

from devocionales.services.concurrency import version_token


class VersionedOut(BaseModel):
    """Base for records that carry a version token.

    ``updated_at`` is rendered exactly as clients must echo it back in
    ``last_updated_at`` on their next update.
    """

    model_config = ConfigDict(from_attributes=True)

    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return version_token(value)
