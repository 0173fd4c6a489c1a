from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devocionales.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from devocionales.models.barrio import Barrio


class Nucleo(TimestampMixin, Base):
    __tablename__ = "nucleos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    barrio_id: Mapped[int] = mapped_column(ForeignKey("barrios.id"), index=True, nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)

    barrio: Mapped["Barrio"] = relationship()
