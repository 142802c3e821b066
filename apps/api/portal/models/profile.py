"""Profile model."""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from .user_property import UserProperty
    from .user_redirect import UserRedirect
    from .user_role import UserRole


class Profile(IdMixin, CreatedAtMixin, Base):
    """One row per authenticated user, keyed by the auth provider's user id."""

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String)

    assignments: Mapped[list["UserProperty"]] = relationship(
        "UserProperty", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True
    )
    redirects: Mapped[list["UserRedirect"]] = relationship(
        "UserRedirect", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True
    )
    roles: Mapped[list["UserRole"]] = relationship(
        "UserRole", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True
    )
