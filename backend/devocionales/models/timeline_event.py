from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from devocionales.models.base import Base, utcnow


class ActionType(str, enum.Enum):
    login = "login"
    logout = "logout"
    create = "create"
    update = "update"
    delete = "delete"
    import_ = "import"
    export = "export"


class EntityType(str, enum.Enum):
    user = "User"
    family = "Family"
    member = "Member"
    visit = "Visit"
    goal = "Goal"
    barrio = "Barrio"
    nucleo = "Nucleo"
    system = "System"


class TimelineEvent(Base):
    """Append-only audit record; rows are never updated after insert."""

    __tablename__ = "timeline_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True, nullable=False
    )
    actor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    actor_name: Mapped[str] = mapped_column(String(320), nullable=False)
    actor_role: Mapped[str] = mapped_column(String(40), nullable=False)
    action_type: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    entity_type: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_json: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)
    barrio_id: Mapped[int | None] = mapped_column(nullable=True)
    nucleo_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
