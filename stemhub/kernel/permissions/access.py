"""
Project access evaluator.

Every operation that cares about "who is this user to this project" asks
``classify`` once and branches on the answer, instead of comparing owner ids
ad hoc.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.models.collaborator import Collaborator
from stemhub.kernel.models.project import Project
from stemhub.kernel.permissions.roles import (
    ALL_GRANTED,
    NONE_GRANTED,
    CollaboratorRole,
    PermissionBundle,
    default_permissions,
    merge_permissions,
)
from stemhub.kernel.repositories.collaborators import CollaboratorRepository
from stemhub.kernel.repositories.projects import ProjectRepository


class AccessKind(str, Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"
    NONE = "none"


@dataclass(frozen=True)
class ProjectAccess:
    """A user's relationship to one project."""

    kind: AccessKind
    project: Project
    user_id: uuid.UUID
    collaborator: Optional[Collaborator] = None

    @property
    def is_owner(self) -> bool:
        return self.kind is AccessKind.OWNER

    @property
    def is_collaborator(self) -> bool:
        return self.kind is AccessKind.COLLABORATOR

    @property
    def has_access(self) -> bool:
        return self.kind is not AccessKind.NONE

    @property
    def role(self) -> Optional[CollaboratorRole]:
        """The collaborator's role; None for the owner, no access, or an unknown stored value."""
        if self.collaborator is None:
            return None
        return CollaboratorRole.parse(self.collaborator.role)

    def effective_permissions(self) -> PermissionBundle:
        """
        Owner: everything. Collaborator: role defaults merged with the stored
        flags. No access: nothing.
        """
        if self.is_owner:
            return ALL_GRANTED
        if self.collaborator is None:
            return NONE_GRANTED
        return merge_permissions(
            default_permissions(self.collaborator.role),
            self.collaborator.stored_permissions(),
        )


class ProjectAccessEvaluator:
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.collaborators = CollaboratorRepository(session)
    
    async def load_project(self, project_id: uuid.UUID) -> Project:
        """
        Raises:
            NotFoundError: the project does not exist
        """
        return await self.projects.get_or_raise(project_id)
    
    async def classify(self, project: Project, user_id: uuid.UUID) -> ProjectAccess:
        """Owner iff owner_id matches, else the collaborator row if any, else no access."""
        if project.owner_id == user_id:
            return ProjectAccess(AccessKind.OWNER, project, user_id)
        
        collaborator = await self.collaborators.get(project.id, user_id)
        if collaborator is not None:
            return ProjectAccess(AccessKind.COLLABORATOR, project, user_id, collaborator)
        
        return ProjectAccess(AccessKind.NONE, project, user_id)
    
    async def classify_by_id(self, project_id: uuid.UUID, user_id: uuid.UUID) -> ProjectAccess:
        """Load the project (NotFound first), then classify."""
        project = await self.load_project(project_id)
        return await self.classify(project, user_id)
    
    async def has_access(self, project: Project, user_id: uuid.UUID) -> bool:
        access = await self.classify(project, user_id)
        return access.has_access
