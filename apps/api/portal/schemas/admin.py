"""Schemas for the admin API."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .invoices import ExpenseSummaryOut, InvoiceOut
from .properties import PropertyOut


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None


class ProfileListResponse(BaseModel):
    items: list[ProfileOut]


class AssignmentCreate(BaseModel):
    user_id: str = Field(default="")
    property_id: str = Field(default="")


class AssignmentOut(BaseModel):
    id: str
    user_id: str
    property_id: str
    email: str = ""
    full_name: str | None = None
    property_name: str = ""
    property_address: str | None = None


class AssignmentListResponse(BaseModel):
    items: list[AssignmentOut]


class StatsResponse(BaseModel):
    properties: int
    clients: int
    assignments: int
    redirects: int
    invoices: int


class AdminDashboardResponse(BaseModel):
    properties: list[PropertyOut]
    selected_property_id: str | None = None
    invoices: list[InvoiceOut] = Field(default_factory=list)
    summary: ExpenseSummaryOut | None = None
