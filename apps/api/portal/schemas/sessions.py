"""Schemas for session establishment and the client dashboard."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .invoices import ExpenseSummaryOut, InvoiceOut
from .properties import PropertyOut

NO_PROPERTIES_MESSAGE = "No properties assigned yet."
LEASE_UNSET_MESSAGE = "Your lease URL has not been configured yet. Please contact support."
REPORT_UNSET_MESSAGE = "Your report URL has not been configured yet. Please contact support."


class SessionResponse(BaseModel):
    user_id: str
    email: str | None = None
    is_admin: bool
    destination: str
    notice: str | None = Field(default=None, description="Why admin access was not granted")


class DashboardActions(BaseModel):
    lease_enabled: bool
    report_enabled: bool
    lease_message: str | None = None
    report_message: str | None = None


class DashboardResponse(BaseModel):
    user_id: str
    email: str | None = None
    is_admin: bool
    properties: list[PropertyOut]
    selected_property_id: str | None = None
    invoices: list[InvoiceOut] = Field(default_factory=list)
    summary: ExpenseSummaryOut | None = None
    actions: DashboardActions
    message: str | None = None
