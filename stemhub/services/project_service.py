"""
Project service - project lifecycle around the ownership rule.

The creating user becomes the owner. Only the owner may archive or delete;
settings edits go through the usual can_edit capability.
"""

import uuid
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import ForbiddenError, InputValidationError
from stemhub.kernel.models.project import Project
from stemhub.kernel.permissions.access import ProjectAccessEvaluator
from stemhub.kernel.permissions.permission_service import PermissionService
from stemhub.kernel.permissions.roles import Capability
from stemhub.kernel.repositories.projects import ProjectRepository
from stemhub.logging_config import get_logger
from stemhub.services.stem_service import pick_fields, reject_null_fields

logger = get_logger(__name__)

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MIN_TEMPO = 60
MAX_TEMPO = 200

PROJECT_FIELDS = frozenset({"name", "description", "tempo", "is_public"})
PROJECT_REQUIRED_FIELDS = frozenset({"tempo", "is_public"})


def validate_project_fields(fields: Mapping[str, Any], creating: bool = False) -> None:
    """
    Check name, description and tempo.

    Raises:
        InputValidationError: first rule that fails
    """
    if creating or "name" in fields:
        name = fields.get("name")
        if not name or not str(name).strip():
            raise InputValidationError("Project name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise InputValidationError(
                f"Project name must be {MAX_NAME_LENGTH} characters or less"
            )

    description = fields.get("description")
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InputValidationError(
            f"Project description must be {MAX_DESCRIPTION_LENGTH} characters or less"
        )

    tempo = fields.get("tempo")
    if tempo is not None and not MIN_TEMPO <= tempo <= MAX_TEMPO:
        raise InputValidationError(f"Tempo must be between {MIN_TEMPO} and {MAX_TEMPO} BPM")


class ProjectService:

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.evaluator = ProjectAccessEvaluator(session)
        self.gate = PermissionService(session)

    async def create_project(self, owner_id: uuid.UUID, data: Mapping[str, Any]) -> Project:
        """
        Create a project owned by ``owner_id``.

        Raises:
            InputValidationError: name, description or tempo out of range
        """
        fields = pick_fields(data, PROJECT_FIELDS)
        validate_project_fields(fields, creating=True)
        fields["name"] = fields["name"].strip()
        if fields.get("tempo") is None:
            fields.pop("tempo", None)
        if fields.get("is_public") is None:
            fields.pop("is_public", None)

        project = await self.projects.create(owner_id=owner_id, **fields)
        logger.info(
            "Project created",
            extra={"project_id": str(project.id), "owner_id": str(owner_id)},
        )
        return project

    async def get_project(self, project_id: uuid.UUID, user_id: uuid.UUID) -> Project:
        """
        Fetch a project the user can see. Public projects are readable by
        anyone; the access timestamp is only touched for members.
        """
        project = await self.evaluator.load_project(project_id)
        access = await self.evaluator.classify(project, user_id)
        if not access.has_access:
            if not project.is_public:
                raise ForbiddenError("You do not have access to this project")
            return project

        await self.projects.touch_last_accessed(project_id)
        return project

    async def list_user_projects(self, user_id: uuid.UUID) -> List[Project]:
        """Owned and collaborating projects, most recently accessed first."""
        return await self.projects.list_for_user(user_id)

    async def list_public_projects(self) -> List[Project]:
        return await self.projects.list_public()

    async def update_project(
        self,
        project_id: uuid.UUID,
        data: Mapping[str, Any],
        user_id: uuid.UUID,
    ) -> Project:
        """Edit project settings. Requires can_edit."""
        await self.gate.require_capability(project_id, user_id, Capability.EDIT)

        fields = pick_fields(data, PROJECT_FIELDS)
        validate_project_fields(fields)
        reject_null_fields(fields, PROJECT_REQUIRED_FIELDS)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
        return await self.projects.update(project_id, **fields)

    async def archive_project(self, project_id: uuid.UUID, user_id: uuid.UUID) -> Project:
        """Mark a project inactive. Owner only."""
        await self._require_owner(project_id, user_id, "Only the project owner can archive the project")
        project = await self.projects.update(project_id, is_active=False)
        logger.info("Project archived", extra={"project_id": str(project_id), "user_id": str(user_id)})
        return project

    async def delete_project(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a project with its collaborators, stems and segments. Owner only."""
        await self._require_owner(project_id, user_id, "Only the project owner can delete the project")
        await self.projects.delete(project_id)
        logger.info("Project deleted", extra={"project_id": str(project_id), "user_id": str(user_id)})

    async def get_project_permissions(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Dict[str, Optional[Any]]:
        """Relationship and effective capability flags of the caller."""
        access = await self.gate.require_access(project_id, user_id)
        return {
            "is_owner": access.is_owner,
            "role": access.role.value if access.role is not None else None,
            "permissions": access.effective_permissions().as_dict(),
        }

    async def _require_owner(self, project_id: uuid.UUID, user_id: uuid.UUID, message: str) -> None:
        access = await self.evaluator.classify_by_id(project_id, user_id)
        if not access.is_owner:
            raise ForbiddenError(message)
