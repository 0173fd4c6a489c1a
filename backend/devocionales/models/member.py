from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devocionales.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from devocionales.models.family import Family
    from devocionales.models.user import User


class Member(TimestampMixin, Base):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    family_id: Mapped[int | None] = mapped_column(ForeignKey("families.id"), index=True, nullable=True)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), unique=True, index=True, nullable=True
    )
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    barrio_id: Mapped[int | None] = mapped_column(ForeignKey("barrios.id"), nullable=True)
    nucleo_id: Mapped[int | None] = mapped_column(ForeignKey("nucleos.id"), index=True, nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    approximate_age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    community_role: Mapped[str] = mapped_column(String(40), default="member", nullable=False)
    family_role: Mapped[str | None] = mapped_column(String(40), nullable=True)
    has_devotional: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    devotional_day: Mapped[str | None] = mapped_column(String(20), nullable=True)
    devotional_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    devotional_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    devotional_member_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)

    family: Mapped["Family | None"] = relationship(back_populates="members")
    user: Mapped["User | None"] = relationship(back_populates="member", foreign_keys=[user_id])
