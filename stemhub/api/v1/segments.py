"""
Segment endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from stemhub.api.deps import CurrentUser, DbSession
from stemhub.kernel.models.stem import SegmentType
from stemhub.schemas.common import SuccessResponse
from stemhub.schemas.segment import (
    SegmentCreate,
    SegmentResponse,
    SegmentUpdate,
    SegmentWriteResponse,
)
from stemhub.services.segment_service import SegmentService, SegmentWriteResult

router = APIRouter()


def _write_response(result: SegmentWriteResult) -> SegmentWriteResponse:
    return SegmentWriteResponse(
        segment=SegmentResponse.model_validate(result.segment),
        overlapping_ids=result.overlapping_ids,
        has_overlap=result.has_overlap,
    )


@router.get("/stems/{stem_id}/segments", response_model=List[SegmentResponse])
async def list_segments(
    stem_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    start: Optional[float] = Query(None, description="Range start (ms, inclusive)"),
    end: Optional[float] = Query(None, description="Range end (ms, exclusive)"),
    segment_type: Optional[SegmentType] = Query(None, alias="type"),
):
    """
    Segments of a stem ordered by start time.

    With ``start`` and ``end`` only segments intersecting [start, end) are
    returned; with ``type`` only MIDI or only AUDIO segments.
    """
    service = SegmentService(db)
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start and end must be given together",
        )
    if start is not None:
        segments = await service.get_segments_by_time_range(stem_id, start, end, user.id)
    elif segment_type is not None:
        return await service.get_segments_by_type(stem_id, segment_type, user.id)
    else:
        return await service.list_segments(stem_id, user.id)

    if segment_type is not None:
        segments = [segment for segment in segments if segment.type == segment_type.value]
    return segments


@router.post("/stems/{stem_id}/segments", response_model=SegmentWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_segment(
    stem_id: uuid.UUID,
    data: SegmentCreate,
    user: CurrentUser,
    db: DbSession,
):
    """Add a segment. Requires can_add_children. Overlaps are reported, not rejected."""
    result = await SegmentService(db).create_segment(stem_id, data.model_dump(exclude_none=True), user.id)
    return _write_response(result)


@router.get("/segments/{segment_id}", response_model=SegmentResponse)
async def get_segment(
    segment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    return await SegmentService(db).get_segment(segment_id, user.id)


@router.patch("/segments/{segment_id}", response_model=SegmentWriteResponse)
async def update_segment(
    segment_id: uuid.UUID,
    data: SegmentUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Edit a segment. Requires can_edit."""
    result = await SegmentService(db).update_segment(
        segment_id, data.model_dump(exclude_unset=True), user.id
    )
    return _write_response(result)


@router.delete("/segments/{segment_id}", response_model=SuccessResponse)
async def delete_segment(
    segment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Delete a segment. Requires can_delete_children."""
    await SegmentService(db).delete_segment(segment_id, user.id)
    return SuccessResponse(message="Segment deleted")


@router.post("/segments/{segment_id}/duplicate", response_model=SegmentWriteResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_segment(
    segment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Copy a segment to just after the original. Requires can_add_children."""
    result = await SegmentService(db).duplicate_segment(segment_id, user.id)
    return _write_response(result)


@router.get("/segments/{segment_id}/overlaps", response_model=List[SegmentResponse])
async def get_segment_overlaps(
    segment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Other segments on the same stem that intersect this one."""
    return await SegmentService(db).find_overlaps(segment_id, user.id)
