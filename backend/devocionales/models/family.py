from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devocionales.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from devocionales.models.barrio import Barrio
    from devocionales.models.member import Member
    from devocionales.models.nucleo import Nucleo


class Family(TimestampMixin, Base):
    __tablename__ = "families"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    barrio_label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    barrio_id: Mapped[int | None] = mapped_column(ForeignKey("barrios.id"), index=True, nullable=True)
    nucleo_id: Mapped[int | None] = mapped_column(ForeignKey("nucleos.id"), index=True, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    member_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)

    barrio: Mapped["Barrio | None"] = relationship()
    nucleo: Mapped["Nucleo | None"] = relationship()
    members: Mapped[list["Member"]] = relationship(back_populates="family")
