"""Locations API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from student_portal.modules.locations.schemas import CenterRead, StateRead
from student_portal.modules.locations.service import LocationsService, get_locations_service
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("/states", response_model=Envelope[list[StateRead]])
async def list_states(
    service: LocationsService = Depends(get_locations_service),
) -> Envelope[list[StateRead]]:
    states = await service.list_states()
    return ok([StateRead.model_validate(item) for item in states])


@router.get("/centers", response_model=Envelope[list[CenterRead]])
async def list_centers(
    state_id: UUID | None = Query(default=None),
    service: LocationsService = Depends(get_locations_service),
) -> Envelope[list[CenterRead]]:
    """List all centers, or the centers of one state."""
    centers = await service.list_centers(state_id)
    return ok([CenterRead.model_validate(item) for item in centers])
