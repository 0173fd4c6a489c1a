from __future__ import annotations

import enum
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devocionales.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from devocionales.models.family import Family
    from devocionales.models.user import User


class VisitType(str, enum.Enum):
    first_visit = "first_visit"
    follow_up = "follow_up"
    not_completed = "not_completed"


class VisitStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


class Visit(TimestampMixin, Base):
    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    family_id: Mapped[int] = mapped_column(ForeignKey("families.id"), index=True, nullable=False)
    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    visit_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    visit_time: Mapped[str] = mapped_column(String(5), nullable=False)
    barrio_id: Mapped[int | None] = mapped_column(ForeignKey("barrios.id"), nullable=True)
    barrio_other: Mapped[str | None] = mapped_column(String(200), nullable=True)
    nucleo_id: Mapped[int | None] = mapped_column(ForeignKey("nucleos.id"), index=True, nullable=True)
    visitor_user_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    visit_type: Mapped[VisitType] = mapped_column(Enum(VisitType, name="visit_type_enum"), nullable=False)
    status: Mapped[VisitStatus] = mapped_column(
        Enum(VisitStatus, name="visit_status_enum"), default=VisitStatus.scheduled, index=True, nullable=False
    )
    no_visit_reason: Mapped[str | None] = mapped_column(String(40), nullable=True)
    no_visit_reason_other: Mapped[str | None] = mapped_column(Text, nullable=True)
    activities: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    materials: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    follow_up: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    follow_up_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    follow_up_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    follow_up_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    follow_up_basic_activity: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    follow_up_basic_activity_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    follow_up_none: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    family: Mapped["Family"] = relationship()
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_id])
