"""Assignment of a client profile to a property."""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from .profile import Profile
    from .property import Property


class UserProperty(IdMixin, CreatedAtMixin, Base):
    """Many-to-many link granting a client visibility into a property."""

    __tablename__ = "user_properties"
    __table_args__ = (UniqueConstraint("user_id", "property_id"),)

    user_id: Mapped[str] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id: Mapped[str] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    profile: Mapped["Profile"] = relationship("Profile", back_populates="assignments")
    property: Mapped["Property"] = relationship("Property", back_populates="assignments")
