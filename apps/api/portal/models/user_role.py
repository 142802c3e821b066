"""Role membership model."""
from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin

if TYPE_CHECKING:
    from .profile import Profile


class AppRole(str, enum.Enum):
    ADMIN = "admin"
    CLIENT = "client"


class UserRole(IdMixin, Base):
    """Presence of an admin row grants admin capability; rows are seeded externally."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role"),)

    user_id: Mapped[str] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[AppRole] = mapped_column(
        Enum(AppRole, name="app_role", values_callable=lambda e: [item.value for item in e]), nullable=False
    )

    profile: Mapped["Profile"] = relationship("Profile", back_populates="roles")
