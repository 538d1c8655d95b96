"""
Collaborator store.
"""

import uuid
from typing import List, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import ConflictError, NotFoundError
from stemhub.kernel.models.base import utcnow
from stemhub.kernel.models.collaborator import Collaborator
from stemhub.kernel.permissions.roles import ROLE_RANK, CollaboratorRole, PermissionBundle

ALREADY_COLLABORATOR = "User is already a collaborator on this project"

# Unknown stored roles sort after every known one
_role_rank = case(
    {role.value: rank for role, rank in ROLE_RANK.items()},
    value=Collaborator.role,
    else_=len(ROLE_RANK),
)


class CollaboratorRepository:
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, project_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Collaborator]:
        """The unique row for (project, user), or None."""
        query = select(Collaborator).where(
            Collaborator.project_id == project_id,
            Collaborator.user_id == user_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def list_by_project(self, project_id: uuid.UUID) -> List[Collaborator]:
        """All rows for a project: ADMIN, CONTRIBUTOR, VIEWER, then oldest first."""
        query = (
            select(Collaborator)
            .where(Collaborator.project_id == project_id)
            .order_by(_role_rank, Collaborator.joined_at.asc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def create(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        role: CollaboratorRole,
        permissions: PermissionBundle,
    ) -> Collaborator:
        """
        Insert a collaborator row.

        Raises:
            ConflictError: the (project, user) pair already exists. This is
                the backstop for two invites racing past the service check;
                the session must be rolled back by its owner afterwards.
        """
        now = utcnow()
        collaborator = Collaborator(
            project_id=project_id,
            user_id=user_id,
            role=role.value,
            joined_at=now,
            last_active_at=now,
            **permissions.as_dict(),
        )
        self.session.add(collaborator)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                ALREADY_COLLABORATOR,
                {"project_id": str(project_id), "user_id": str(user_id)},
            ) from exc
        return await self._reload(collaborator.id)
    
    async def update(self, collaborator_id: uuid.UUID, **fields) -> Collaborator:
        await self.session.execute(
            update(Collaborator)
            .where(Collaborator.id == collaborator_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        return await self._reload(collaborator_id)
    
    async def delete(self, collaborator_id: uuid.UUID) -> None:
        await self.session.execute(
            delete(Collaborator).where(Collaborator.id == collaborator_id)
        )
    
    async def _reload(self, collaborator_id: uuid.UUID) -> Collaborator:
        collaborator = await self.session.get(Collaborator, collaborator_id, populate_existing=True)
        if collaborator is None:
            raise NotFoundError("Collaborator")
        return collaborator
