from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from devocionales.models.base import Base, TimestampMixin


class Goal(TimestampMixin, Base):
    """Quarterly targets. State and progress are computed at read time, never stored."""

    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    quarter: Mapped[str] = mapped_column(String(80), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    target_nucleos: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_visits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_visitors: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_devotionals: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)
