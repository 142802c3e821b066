"""Schemas for redirect URL endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.user_redirect import RedirectType


class RedirectLinks(BaseModel):
    lease: str | None = None
    report: str | None = None

    @property
    def lease_enabled(self) -> bool:
        return bool(self.lease)

    @property
    def report_enabled(self) -> bool:
        return bool(self.report)


class RedirectTarget(BaseModel):
    redirect_type: RedirectType
    redirect_url: str


class RedirectSetRequest(BaseModel):
    """Identify the user by id or by email; exactly one is required."""

    user_id: str | None = None
    email: str | None = None
    redirect_type: RedirectType = RedirectType.LEASE
    redirect_url: str = Field(default="")

    @model_validator(mode="after")
    def _require_user_reference(self) -> "RedirectSetRequest":
        has_id = bool(self.user_id and self.user_id.strip())
        has_email = bool(self.email and self.email.strip())
        if has_id == has_email:
            raise ValueError("Provide either user_id or email")
        return self


class RedirectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    redirect_url: str
    redirect_type: RedirectType
    email: str
    full_name: str | None = None


class RedirectListResponse(BaseModel):
    items: list[RedirectOut]


class RedirectSaved(BaseModel):
    id: str
    user_id: str
    redirect_type: RedirectType
    redirect_url: str
