"""
Collaboration manager - the collaborator lifecycle on a project.

Each operation evaluates its checks in a fixed order:
project exists -> caller is allowed -> business-rule conflicts -> target row.
A caller without the right privileges always gets ForbiddenError, never
ConflictError or NotFoundError about the target.
"""

import uuid
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import ConflictError, ForbiddenError, InputValidationError, NotFoundError
from stemhub.kernel.identity.identity_service import IdentityService
from stemhub.kernel.models.collaborator import Collaborator
from stemhub.kernel.permissions.access import ProjectAccess, ProjectAccessEvaluator
from stemhub.kernel.permissions.roles import (
    Capability,
    CollaboratorRole,
    PermissionBundle,
    default_permissions,
    merge_permissions,
)
from stemhub.kernel.repositories.collaborators import ALREADY_COLLABORATOR, CollaboratorRepository
from stemhub.logging_config import get_logger

logger = get_logger(__name__)

PermissionOverride = Optional[Mapping[str, Any]]


class CollaborationService:
    """
    Invite, list, update, remove and leave.

    Owner and collaborators are told apart by ProjectAccessEvaluator.classify;
    the owner never has a collaborator row and can never be given one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.evaluator = ProjectAccessEvaluator(session)
        self.collaborators = CollaboratorRepository(session)
        self.identity = IdentityService(session)

    async def invite_collaborator(
        self,
        project_id: uuid.UUID,
        inviter_id: uuid.UUID,
        email: str,
        role: Union[CollaboratorRole, str] = CollaboratorRole.CONTRIBUTOR,
        permissions: PermissionOverride = None,
    ) -> Collaborator:
        """
        Invite a user (by email) to collaborate on a project.

        Args:
            project_id: Project to invite into
            inviter_id: Acting user
            email: Email of the account to add
            role: Role for the new collaborator
            permissions: Optional partial override of the role defaults

        Returns:
            The created Collaborator, with ``user`` loaded

        Raises:
            NotFoundError: project missing, or no account for ``email``
            ForbiddenError: inviter is not the owner and lacks can_invite_others
            ConflictError: target is the owner, or already a collaborator
        """
        access = await self.evaluator.classify_by_id(project_id, inviter_id)
        if not self._can_invite(access):
            raise ForbiddenError("Insufficient permissions to invite collaborators")

        invited = await self.identity.resolve_user_by_email(email)

        if invited.id == access.project.owner_id:
            raise ConflictError("Project owner is automatically a collaborator")

        if await self.collaborators.get(project_id, invited.id) is not None:
            raise ConflictError(ALREADY_COLLABORATOR)

        new_role = self._require_role(role)
        effective = merge_permissions(default_permissions(new_role), permissions)

        collaborator = await self.collaborators.create(
            project_id=project_id,
            user_id=invited.id,
            role=new_role,
            permissions=effective,
        )

        logger.info(
            "Collaborator invited",
            extra={
                "project_id": str(project_id),
                "user_id": str(invited.id),
                "invited_by": str(inviter_id),
                "role": new_role.value,
            },
        )
        return collaborator

    async def list_collaborators(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> List[Collaborator]:
        """
        All collaborators, ADMIN first, then CONTRIBUTOR, then VIEWER, each
        group oldest first. The owner is not included.

        Raises:
            NotFoundError: project missing
            ForbiddenError: requester has no access to the project
        """
        access = await self.evaluator.classify_by_id(project_id, user_id)
        if not access.has_access:
            raise ForbiddenError(
                "Access denied: You do not have permission to view this project's collaborators"
            )
        return await self.collaborators.list_by_project(project_id)

    async def update_collaborator(
        self,
        project_id: uuid.UUID,
        updater_id: uuid.UUID,
        collaborator_user_id: uuid.UUID,
        role: Optional[Union[CollaboratorRole, str]] = None,
        permissions: PermissionOverride = None,
    ) -> Collaborator:
        """
        Change a collaborator's role and/or capability flags.

        A new role resets the flags to that role's defaults before applying
        ``permissions``. Without a role, ``permissions`` is merged onto the
        flags already stored.

        Raises:
            NotFoundError: project missing, or target has no collaborator row
            ForbiddenError: updater is neither owner nor ADMIN collaborator
            ConflictError: target is the project owner
        """
        access = await self.evaluator.classify_by_id(project_id, updater_id)
        if not self._can_manage(access):
            raise ForbiddenError("Insufficient permissions to update collaborators")

        if collaborator_user_id == access.project.owner_id:
            raise ConflictError("Cannot update project owner as collaborator")

        existing = await self.collaborators.get(project_id, collaborator_user_id)
        if existing is None:
            raise NotFoundError("Collaborator")

        changes: Dict[str, Any] = {}
        if role is not None:
            new_role = self._require_role(role)
            bundle = merge_permissions(default_permissions(new_role), permissions)
            changes["role"] = new_role.value
        else:
            bundle = merge_permissions(
                PermissionBundle(**existing.stored_permissions()),
                permissions,
            )
        changes.update(bundle.as_dict())

        updated = await self.collaborators.update(existing.id, **changes)
        logger.info(
            "Collaborator updated",
            extra={
                "project_id": str(project_id),
                "user_id": str(collaborator_user_id),
                "updated_by": str(updater_id),
                "role": updated.role,
            },
        )
        return updated

    async def remove_collaborator(
        self,
        project_id: uuid.UUID,
        remover_id: uuid.UUID,
        collaborator_user_id: uuid.UUID,
    ) -> None:
        """
        Remove a collaborator from a project.

        Raises:
            NotFoundError: project missing, or target has no collaborator row
            ForbiddenError: remover is neither owner nor ADMIN collaborator
            ConflictError: target is the project owner
        """
        access = await self.evaluator.classify_by_id(project_id, remover_id)
        if not self._can_manage(access):
            raise ForbiddenError("Insufficient permissions to remove collaborators")

        if collaborator_user_id == access.project.owner_id:
            raise ConflictError("Cannot remove project owner as collaborator")

        existing = await self.collaborators.get(project_id, collaborator_user_id)
        if existing is None:
            raise NotFoundError("Collaborator")

        await self.collaborators.delete(existing.id)
        logger.info(
            "Collaborator removed",
            extra={
                "project_id": str(project_id),
                "user_id": str(collaborator_user_id),
                "removed_by": str(remover_id),
            },
        )

    async def leave_project(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """
        Remove the caller's own collaborator row.

        Raises:
            NotFoundError: project missing
            ConflictError: caller is the owner
            ForbiddenError: caller is not a collaborator
        """
        access = await self.evaluator.classify_by_id(project_id, user_id)
        if access.is_owner:
            raise ConflictError("Project owner cannot leave the project")
        if not access.is_collaborator:
            raise ForbiddenError("You are not a collaborator on this project")

        await self.collaborators.delete(access.collaborator.id)
        logger.info(
            "Collaborator left project",
            extra={"project_id": str(project_id), "user_id": str(user_id)},
        )

    async def get_collaborator_permissions(
        self,
        project_id: uuid.UUID,
        requester_id: uuid.UUID,
        collaborator_user_id: uuid.UUID,
    ) -> Dict[str, Any]:
        """
        Role and stored capability flags of one collaborator.

        The owner has no collaborator row, so asking about the owner here is
        NotFound; callers that need the owner's view should treat the owner
        as holding every capability.

        Returns:
            ``{"role": str, "permissions": {flag: bool, ...}}``

        Raises:
            NotFoundError: project missing, or target has no collaborator row
            ForbiddenError: requester has no access to the project
        """
        access = await self.evaluator.classify_by_id(project_id, requester_id)
        if not access.has_access:
            raise ForbiddenError("Access denied: You do not have permission to view permissions")

        collaborator = await self.collaborators.get(project_id, collaborator_user_id)
        if collaborator is None:
            raise NotFoundError("Collaborator")

        return {
            "role": collaborator.role,
            "permissions": collaborator.stored_permissions(),
        }

    @staticmethod
    def _can_invite(access: ProjectAccess) -> bool:
        if access.is_owner:
            return True
        return access.is_collaborator and access.effective_permissions().granted(
            Capability.INVITE_OTHERS
        )

    @staticmethod
    def _can_manage(access: ProjectAccess) -> bool:
        """Owner, or a collaborator whose role is ADMIN."""
        return access.is_owner or access.role is CollaboratorRole.ADMIN

    @staticmethod
    def _require_role(role: Union[CollaboratorRole, str]) -> CollaboratorRole:
        parsed = CollaboratorRole.parse(role)
        if parsed is None:
            raise InputValidationError(f"Unknown role: {role}", {"role": str(role)})
        return parsed
