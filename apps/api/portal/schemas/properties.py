"""Schemas for property endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PropertyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str | None = None


class PropertyWrite(BaseModel):
    name: str = Field(default="", description="Display name, required")
    address: str | None = Field(default=None)


class PropertyListResponse(BaseModel):
    items: list[PropertyOut]
    selected_property_id: str | None = None
