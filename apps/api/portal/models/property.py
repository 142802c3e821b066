"""Property model."""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from .invoice import Invoice
    from .user_property import UserProperty


class Property(IdMixin, CreatedAtMixin, Base):
    """A rental unit; the scoping unit for invoices and client visibility."""

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str | None] = mapped_column(String)

    assignments: Mapped[list["UserProperty"]] = relationship(
        "UserProperty", back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice", back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )
