from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devocionales.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from devocionales.models.community import Community
    from devocionales.models.member import Member


class Role(str, enum.Enum):
    admin = "admin"
    cea = "cea"
    mca = "mca"
    collaborator = "collaborator"
    visitor = "visitor"


ADMIN_ROLES = frozenset({Role.admin, Role.cea, Role.mca})


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[Role] = mapped_column(Enum(Role, name="role_enum"), default=Role.visitor, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id"), index=True, nullable=False)

    community: Mapped["Community"] = relationship(lazy="joined")
    member: Mapped["Member | None"] = relationship(
        back_populates="user", uselist=False, foreign_keys="Member.user_id"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}" if self.last_name else self.first_name

    @property
    def is_active(self) -> bool:
        # Accounts are deactivated through their linked member record.
        return self.member is None or self.member.active
