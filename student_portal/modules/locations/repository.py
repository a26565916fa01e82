"""Locations repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.modules.batches.models import Center
from student_portal.modules.locations.models import State


class LocationsRepository:
    """DB operations for states and centers."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_states(self) -> list[State]:
        stmt = select(State).order_by(State.name.asc())
        return (await self.session.scalars(stmt)).all()

    async def get_state(self, state_id: UUID) -> State | None:
        return await self.session.get(State, state_id)

    async def list_centers(self, state_id: UUID | None = None) -> list[Center]:
        stmt = select(Center)
        if state_id is not None:
            stmt = stmt.where(Center.state_id == state_id)
        stmt = stmt.order_by(Center.name.asc())
        return (await self.session.scalars(stmt)).all()

    async def get_center(self, center_id: UUID) -> Center | None:
        return await self.session.get(Center, center_id)
