"""
Collaborator endpoints - invite, list, update, remove and leave.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from stemhub.api.deps import CurrentUser, DbSession
from stemhub.schemas.collaboration import (
    CollaboratorInvite,
    CollaboratorPermissionsResponse,
    CollaboratorResponse,
    CollaboratorUpdate,
)
from stemhub.schemas.common import SuccessResponse
from stemhub.services.collaboration_service import CollaborationService

router = APIRouter()


def _overrides(permissions):
    """Only the flags the client actually sent."""
    if permissions is None:
        return None
    return permissions.model_dump(exclude_none=True)


@router.post("/invite", response_model=CollaboratorResponse, status_code=status.HTTP_201_CREATED)
async def invite_collaborator(
    project_id: uuid.UUID,
    data: CollaboratorInvite,
    user: CurrentUser,
    db: DbSession,
):
    """Invite a registered user by email."""
    return await CollaborationService(db).invite_collaborator(
        project_id,
        user.id,
        data.email,
        role=data.role,
        permissions=_overrides(data.permissions),
    )


@router.get("", response_model=List[CollaboratorResponse])
async def list_collaborators(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """ADMIN first, then CONTRIBUTOR, then VIEWER; oldest first within a role."""
    return await CollaborationService(db).list_collaborators(project_id, user.id)


@router.post("/leave", response_model=SuccessResponse)
async def leave_project(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    await CollaborationService(db).leave_project(project_id, user.id)
    return SuccessResponse(message="Left project")


@router.put("/{collaborator_user_id}", response_model=CollaboratorResponse)
async def update_collaborator(
    project_id: uuid.UUID,
    collaborator_user_id: uuid.UUID,
    data: CollaboratorUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Change role and/or flags. Owner or ADMIN only."""
    return await CollaborationService(db).update_collaborator(
        project_id,
        user.id,
        collaborator_user_id,
        role=data.role,
        permissions=_overrides(data.permissions),
    )


@router.delete("/{collaborator_user_id}", response_model=SuccessResponse)
async def remove_collaborator(
    project_id: uuid.UUID,
    collaborator_user_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    await CollaborationService(db).remove_collaborator(project_id, user.id, collaborator_user_id)
    return SuccessResponse(message="Collaborator removed")


@router.get("/{collaborator_user_id}/permissions", response_model=CollaboratorPermissionsResponse)
async def get_collaborator_permissions(
    project_id: uuid.UUID,
    collaborator_user_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    return await CollaborationService(db).get_collaborator_permissions(
        project_id, user.id, collaborator_user_id
    )
