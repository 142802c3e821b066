"""Per-client external redirect links."""
from __future__ import annotations

from datetime import datetime
import enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, IdMixin, utcnow

if TYPE_CHECKING:
    from .profile import Profile


class RedirectType(str, enum.Enum):
    LEASE = "lease"
    REPORT = "report"


class UserRedirect(IdMixin, CreatedAtMixin, Base):
    """External URL for one (user, purpose) pair; written with upsert."""

    __tablename__ = "user_redirects"
    __table_args__ = (UniqueConstraint("user_id", "redirect_type"),)

    user_id: Mapped[str] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    redirect_url: Mapped[str] = mapped_column(String, nullable=False)
    redirect_type: Mapped[RedirectType] = mapped_column(
        Enum(RedirectType, name="redirect_type", values_callable=lambda e: [item.value for item in e]),
        default=RedirectType.LEASE,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    profile: Mapped["Profile"] = relationship("Profile", back_populates="redirects")
