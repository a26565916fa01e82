"""Locations schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class StateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class CenterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    state_id: UUID | None
