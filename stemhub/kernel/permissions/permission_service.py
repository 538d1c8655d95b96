"""
Resource permission gate.

Consulted before every stem/segment mutation. Reads only need access to the
project; writes need a specific capability:

    create          Capability.ADD_CHILDREN
    update/reorder  Capability.EDIT
    delete          Capability.DELETE_CHILDREN
"""

import uuid
from typing import Dict, Union

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import ForbiddenError
from stemhub.kernel.permissions.access import ProjectAccess, ProjectAccessEvaluator
from stemhub.kernel.permissions.roles import Capability
from stemhub.logging_config import get_logger

logger = get_logger(__name__)

NO_ACCESS = "You do not have access to this project"
NOT_A_COLLABORATOR = "You are not a collaborator on this project"

# Subset of capabilities the stem/segment UI probes for
SUMMARY_CAPABILITIES = (
    Capability.ADD_CHILDREN,
    Capability.DELETE_CHILDREN,
    Capability.EDIT,
)


class PermissionService:
    """
    Capability checks for project-scoped resources.
    
    Usage:
        gate = PermissionService(session)
        await gate.require_capability(project_id, user_id, Capability.EDIT)
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.evaluator = ProjectAccessEvaluator(session)
    
    async def require_access(self, project_id: uuid.UUID, user_id: uuid.UUID) -> ProjectAccess:
        """
        Owner or any collaborator may pass.
        
        Raises:
            NotFoundError: project does not exist
            ForbiddenError: user has no relationship to the project
        """
        access = await self.evaluator.classify_by_id(project_id, user_id)
        if not access.has_access:
            logger.debug(
                "Access denied",
                extra={"project_id": str(project_id), "user_id": str(user_id)},
            )
            raise ForbiddenError(NO_ACCESS)
        return access
    
    async def require_capability(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        capability: Union[Capability, str],
    ) -> ProjectAccess:
        """
        Require one capability on a project.
        
        The owner always passes, with or without a collaborator row.
        
        Raises:
            NotFoundError: project does not exist
            ForbiddenError: no relationship, or the effective flag is false
        """
        capability = Capability(capability)
        access = await self.require_access(project_id, user_id)
        if access.is_owner:
            return access
        
        if not access.effective_permissions().granted(capability):
            logger.debug(
                "Capability denied",
                extra={
                    "project_id": str(project_id),
                    "user_id": str(user_id),
                    "capability": capability.value,
                },
            )
            raise ForbiddenError(
                f"Missing capability: {capability.value}",
                {"capability": capability.value},
            )
        return access
    
    async def check_capability(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        capability: Union[Capability, str],
    ) -> bool:
        """Boolean form of require_capability. NotFoundError still propagates."""
        try:
            await self.require_capability(project_id, user_id, capability)
        except ForbiddenError:
            return False
        return True
    
    async def get_effective_permission_summary(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Dict[str, bool]:
        """
        ``{can_add_children, can_delete_children, can_edit}`` for the user.
        
        Raises:
            NotFoundError: project does not exist
            ForbiddenError: user is neither owner nor collaborator
        """
        access = await self.evaluator.classify_by_id(project_id, user_id)
        if not access.has_access:
            raise ForbiddenError(NOT_A_COLLABORATOR)
        
        bundle = access.effective_permissions()
        return {capability.value: bundle.granted(capability) for capability in SUMMARY_CAPABILITIES}
