"""Batches API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from student_portal.modules.batches.schemas import (
    CenterBatchesRead,
    CenterBatchesRequest,
    MergeGroupRead,
    SeatOccupancyRead,
)
from student_portal.modules.batches.service import (
    BatchMergeResolver,
    SeatAllocationService,
    get_merge_resolver,
    get_seat_allocation_service,
)
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/batches", tags=["batches"])


@router.post("/center", response_model=Envelope[CenterBatchesRead])
async def list_center_batches(
    payload: CenterBatchesRequest,
    service: SeatAllocationService = Depends(get_seat_allocation_service),
    current_student=Depends(get_current_student),
) -> Envelope[CenterBatchesRead]:
    """List enrollable batches of a center along with the student's own batches."""
    return ok(await service.list_center_batches(payload.center_id, current_student.id))


@router.get("/{batch_id}/occupancy", response_model=Envelope[SeatOccupancyRead])
async def get_batch_occupancy(
    batch_id: UUID,
    service: SeatAllocationService = Depends(get_seat_allocation_service),
    current_student=Depends(get_current_student),
) -> Envelope[SeatOccupancyRead]:
    occupancy = await service.get_occupancy(batch_id)
    return ok(SeatOccupancyRead.model_validate(occupancy))


@router.get("/{batch_id}/merge-group", response_model=Envelope[MergeGroupRead])
async def get_batch_merge_group(
    batch_id: UUID,
    resolver: BatchMergeResolver = Depends(get_merge_resolver),
    current_student=Depends(get_current_student),
) -> Envelope[MergeGroupRead]:
    """Return ids of all batches sharing sessions with the given batch."""
    group = await resolver.resolve_group(batch_id)
    return ok(MergeGroupRead(batch_id=batch_id, batch_ids=sorted(group, key=str)))
