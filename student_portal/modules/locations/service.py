"""State and center lookups used by profile and batch selection forms."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.modules.batches.models import Center
from student_portal.modules.locations.models import State
from student_portal.modules.locations.repository import LocationsRepository


class LocationsService:
    def __init__(self, repository: LocationsRepository) -> None:
        self.repository = repository

    async def list_states(self) -> list[State]:
        return await self.repository.list_states()

    async def list_centers(self, state_id: UUID | None = None) -> list[Center]:
        """Centers ordered by name, optionally restricted to one state."""
        return await self.repository.list_centers(state_id)


async def get_locations_service(session: AsyncSession = Depends(get_db_session)) -> LocationsService:
    """Dependency provider for locations service."""
    return LocationsService(LocationsRepository(session))
