from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from devocionales.models.base import Base, TimestampMixin


class Barrio(TimestampMixin, Base):
    __tablename__ = "barrios"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)
