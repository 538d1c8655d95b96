"""
Project endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from stemhub.api.deps import CurrentUser, DbSession
from stemhub.schemas.common import SuccessResponse
from stemhub.schemas.project import (
    ProjectAccessResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from stemhub.services.project_service import ProjectService

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    user: CurrentUser,
    db: DbSession,
):
    """Create a project owned by the caller."""
    return await ProjectService(db).create_project(user.id, data.model_dump(exclude_none=True))


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    user: CurrentUser,
    db: DbSession,
):
    """Projects the caller owns or collaborates on, most recently accessed first."""
    return await ProjectService(db).list_user_projects(user.id)


@router.get("/public", response_model=List[ProjectResponse])
async def list_public_projects(
    user: CurrentUser,
    db: DbSession,
):
    return await ProjectService(db).list_public_projects()


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    return await ProjectService(db).get_project(project_id, user.id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    data: ProjectUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Edit project settings. Requires can_edit."""
    return await ProjectService(db).update_project(
        project_id, data.model_dump(exclude_unset=True), user.id
    )


@router.post("/{project_id}/archive", response_model=ProjectResponse)
async def archive_project(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Archive a project. Owner only."""
    return await ProjectService(db).archive_project(project_id, user.id)


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """Delete a project and everything in it. Owner only."""
    await ProjectService(db).delete_project(project_id, user.id)
    return SuccessResponse(message="Project deleted")


@router.get("/{project_id}/access", response_model=ProjectAccessResponse)
async def get_project_access(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
):
    """The caller's relationship to the project and effective capabilities."""
    return await ProjectService(db).get_project_permissions(project_id, user.id)
