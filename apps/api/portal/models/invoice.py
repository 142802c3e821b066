"""Invoice model."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from .property import Property


class Invoice(IdMixin, CreatedAtMixin, Base):
    """Expense record scoped to exactly one property.

    Rows are written by an external process; the portal only reads them.
    """

    __tablename__ = "invoices"
    __table_args__ = (CheckConstraint("amount >= 0", name="amount_non_negative"),)

    property_id: Mapped[str] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str | None] = mapped_column(String)
    vendor: Mapped[str | None] = mapped_column(String)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)

    property: Mapped["Property"] = relationship("Property", back_populates="invoices")
