"""
Project store.
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import NotFoundError
from stemhub.kernel.models.base import utcnow
from stemhub.kernel.models.collaborator import Collaborator
from stemhub.kernel.models.project import Project
from stemhub.kernel.models.stem import Segment, Stem


class ProjectRepository:
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, project_id: uuid.UUID) -> Optional[Project]:
        """Get a project by ID, or None."""
        query = select(Project).where(Project.id == project_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def get_or_raise(self, project_id: uuid.UUID) -> Project:
        """Get a project by ID or raise NotFoundError("Project")."""
        project = await self.get(project_id)
        if project is None:
            raise NotFoundError("Project", {"project_id": str(project_id)})
        return project
    
    async def touch_last_accessed(self, project_id: uuid.UUID) -> None:
        await self.session.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(last_accessed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
    
    async def create(self, **fields) -> Project:
        project = Project(**fields)
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project)
        return project
    
    async def update(self, project_id: uuid.UUID, **fields) -> Project:
        await self.session.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        return await self._reload(project_id)
    
    async def delete(self, project_id: uuid.UUID) -> None:
        """
        Delete a project and everything under it.

        Children are removed with explicit statements so the result does not
        depend on the database enforcing ON DELETE CASCADE.
        """
        stem_ids = select(Stem.id).where(Stem.project_id == project_id)
        await self.session.execute(delete(Segment).where(Segment.stem_id.in_(stem_ids)))
        await self.session.execute(delete(Stem).where(Stem.project_id == project_id))
        await self.session.execute(delete(Collaborator).where(Collaborator.project_id == project_id))
        await self.session.execute(delete(Project).where(Project.id == project_id))
    
    async def list_for_user(self, user_id: uuid.UUID) -> List[Project]:
        """Projects the user owns or collaborates on, most recently accessed first."""
        member_of = select(Collaborator.project_id).where(Collaborator.user_id == user_id)
        query = (
            select(Project)
            .where((Project.owner_id == user_id) | (Project.id.in_(member_of)))
            .order_by(Project.last_accessed_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def list_public(self) -> List[Project]:
        query = (
            select(Project)
            .where(Project.is_public.is_(True), Project.is_active.is_(True))
            .order_by(Project.updated_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def _reload(self, project_id: uuid.UUID) -> Project:
        project = await self.session.get(Project, project_id, populate_existing=True)
        if project is None:
            raise NotFoundError("Project", {"project_id": str(project_id)})
        return project
