"""
Stem endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, status

from stemhub.api.deps import CurrentUser, DbSession
from stemhub.schemas.collaboration import EffectivePermissionsResponse
from stemhub.schemas.common import SuccessResponse
from stemhub.schemas.stem import (
    StemCreate,
    StemReorderRequest,
    StemResponse,
    StemUpdate,
    StemWithSegmentsResponse,
)
from stemhub.services.stem_service import StemService

router = APIRouter()


@router.get("/projects/{project_id}/stems", response_model=List[StemResponse])
async def list_stems(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    instrument_type: Optional[str] = Query(None, max_length=50),
):
    """Stems in play order, optionally filtered by instrument type."""
    service = StemService(db)
    if instrument_type:
        return await service.list_by_instrument_type(project_id, instrument_type, user.id)
    return await service.list_stems(project_id, user.id)


@router.post("/projects/{project_id}/stems", response_model=StemResponse, status_code=status.HTTP_201_CREATED)
async def create_stem(
    project_id: uuid.UUID,
    data: StemCreate,
    user: CurrentUser,
    db: DbSession,
):
    """Add a stem. Requires can_add_children."""
    return await StemService(db).create_stem(project_id, data.model_dump(exclude_none=True), user.id)


@router.put("/projects/{project_id}/stems/reorder", response_model=List[StemResponse])
async def reorder_stems(
    project_id: uuid.UUID,
    data: StemReorderRequest,
    user: CurrentUser,
    db: DbSession,
):
    """Move stems to new positions. Requires can_edit."""
    orders = [(item.id, item.order) for item in data.stems]
    return await StemService(db).reorder_stems(project_id, orders, user.id)


@router.get("/projects/{project_id}/stems/permissions", response_model=EffectivePermissionsResponse)
async def get_stem_permissions(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    return await StemService(db).get_stem_permissions(project_id, user.id)


@router.get("/stems/{stem_id}", response_model=StemWithSegmentsResponse)
async def get_stem(
    stem_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """A stem with its segments."""
    return await StemService(db).get_stem_with_segments(stem_id, user.id)


@router.patch("/stems/{stem_id}", response_model=StemResponse)
async def update_stem(
    stem_id: uuid.UUID,
    data: StemUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Edit a stem. Requires can_edit."""
    return await StemService(db).update_stem(stem_id, data.model_dump(exclude_unset=True), user.id)


@router.delete("/stems/{stem_id}", response_model=SuccessResponse)
async def delete_stem(
    stem_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Delete a stem and its segments. Requires can_delete_children."""
    await StemService(db).delete_stem(stem_id, user.id)
    return SuccessResponse(message="Stem deleted")
