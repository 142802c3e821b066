"""Schemas for invoices and their expense aggregates."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    amount: Decimal
    category: str | None = None
    vendor: str | None = None
    invoice_date: date


class MonthTotalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    total: float


class CategoryTotalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total: float


class CategoryShareOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total: float
    percent: float


class MonthComparisonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    values: dict[str, float] = Field(default_factory=dict)


class ExpenseSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_count: int
    grand_total: float
    monthly: list[MonthTotalOut] = Field(default_factory=list)
    categories: list[CategoryTotalOut] = Field(default_factory=list)
    shares: list[CategoryShareOut] = Field(default_factory=list)
    top_categories: list[str] = Field(default_factory=list)
    comparison: list[MonthComparisonOut] = Field(default_factory=list)


class InvoiceListResponse(BaseModel):
    property_id: str
    items: list[InvoiceOut]


class InvoiceSnapshot(BaseModel):
    """Invoices plus aggregates, as pushed to live views after each reload."""

    type: str = "snapshot"
    property_id: str
    invoices: list[InvoiceOut]
    summary: ExpenseSummaryOut
