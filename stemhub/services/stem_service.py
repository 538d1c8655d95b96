"""
Stem service - permission-gated CRUD over a project's stems.
"""

import uuid
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import InputValidationError, NotFoundError
from stemhub.kernel.models.stem import Stem
from stemhub.kernel.permissions.permission_service import PermissionService
from stemhub.kernel.permissions.roles import Capability
from stemhub.kernel.repositories.projects import ProjectRepository
from stemhub.kernel.repositories.resources import StemRepository
from stemhub.logging_config import get_logger

logger = get_logger(__name__)

STEM_CREATE_FIELDS = frozenset({
    "name", "color", "volume", "pan", "instrument_type", "midi_channel", "order",
})
STEM_UPDATE_FIELDS = STEM_CREATE_FIELDS | {"is_muted", "is_soloed"}

# NOT NULL columns; None may not be written to these
STEM_REQUIRED_FIELDS = frozenset({
    "name", "color", "volume", "pan", "is_muted", "is_soloed", "order",
})


def pick_fields(data: Mapping[str, Any], allowed: frozenset) -> Dict[str, Any]:
    """Keep only the writable columns that were actually supplied."""
    return {key: value for key, value in data.items() if key in allowed}


def reject_null_fields(fields: Mapping[str, Any], required: frozenset) -> None:
    """
    Refuse an explicit None for a column that cannot hold one.

    Raises:
        InputValidationError: naming every offending field
    """
    nulls = sorted(key for key, value in fields.items() if key in required and value is None)
    if nulls:
        raise InputValidationError(
            f"Fields cannot be null: {', '.join(nulls)}",
            {"fields": nulls},
        )


class StemService:

    def __init__(self, session: AsyncSession):
        self.session = session
        self.gate = PermissionService(session)
        self.stems = StemRepository(session)
        self.projects = ProjectRepository(session)

    async def list_stems(self, project_id: uuid.UUID, user_id: uuid.UUID) -> List[Stem]:
        """All stems of a project in play order."""
        await self.gate.require_access(project_id, user_id)
        await self.projects.touch_last_accessed(project_id)
        return await self.stems.list_by_parent(project_id)

    async def get_stem(self, stem_id: uuid.UUID, user_id: uuid.UUID) -> Stem:
        stem = await self.stems.get_or_raise(stem_id)
        await self.gate.require_access(stem.project_id, user_id)
        return stem

    async def get_stem_with_segments(self, stem_id: uuid.UUID, user_id: uuid.UUID) -> Stem:
        stem = await self.stems.get_with_segments(stem_id)
        if stem is None:
            raise NotFoundError("Stem", {"id": str(stem_id)})
        await self.gate.require_access(stem.project_id, user_id)
        return stem

    async def list_by_instrument_type(
        self,
        project_id: uuid.UUID,
        instrument_type: str,
        user_id: uuid.UUID,
    ) -> List[Stem]:
        await self.gate.require_access(project_id, user_id)
        return await self.stems.list_by_instrument_type(project_id, instrument_type)

    async def create_stem(
        self,
        project_id: uuid.UUID,
        data: Mapping[str, Any],
        user_id: uuid.UUID,
    ) -> Stem:
        """
        Add a stem to a project. Requires can_add_children.

        Without an explicit ``order`` the stem goes to the end of the list.
        """
        await self.gate.require_capability(project_id, user_id, Capability.ADD_CHILDREN)

        fields = pick_fields(data, STEM_CREATE_FIELDS)
        if fields.get("order") is None:
            fields["order"] = await self.stems.next_order(project_id)
        reject_null_fields(fields, STEM_REQUIRED_FIELDS)

        stem = await self.stems.create(user_id, project_id=project_id, **fields)
        logger.info(
            "Stem created",
            extra={"project_id": str(project_id), "stem_id": str(stem.id), "user_id": str(user_id)},
        )
        return stem

    async def update_stem(
        self,
        stem_id: uuid.UUID,
        data: Mapping[str, Any],
        user_id: uuid.UUID,
    ) -> Stem:
        """
        Edit a stem. Requires can_edit; bumps the version.

        Raises:
            InputValidationError: a NOT NULL field was sent as None
        """
        existing = await self.stems.get_or_raise(stem_id)
        await self.gate.require_capability(existing.project_id, user_id, Capability.EDIT)

        fields = pick_fields(data, STEM_UPDATE_FIELDS)
        reject_null_fields(fields, STEM_REQUIRED_FIELDS)
        return await self.stems.update(stem_id, user_id, **fields)

    async def delete_stem(self, stem_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a stem and its segments. Requires can_delete_children."""
        existing = await self.stems.get_or_raise(stem_id)
        await self.gate.require_capability(existing.project_id, user_id, Capability.DELETE_CHILDREN)

        await self.stems.delete(stem_id)
        logger.info(
            "Stem deleted",
            extra={"project_id": str(existing.project_id), "stem_id": str(stem_id), "user_id": str(user_id)},
        )

    async def reorder_stems(
        self,
        project_id: uuid.UUID,
        orders: Sequence[Tuple[uuid.UUID, int]],
        user_id: uuid.UUID,
    ) -> List[Stem]:
        """
        Move stems to new positions. Requires can_edit.

        Raises:
            InputValidationError: a stem is missing or belongs to another project
        """
        await self.gate.require_capability(project_id, user_id, Capability.EDIT)

        for stem_id, _ in orders:
            stem = await self.stems.get(stem_id)
            if stem is None or stem.project_id != project_id:
                raise InputValidationError(
                    f"Stem {stem_id} does not belong to project {project_id}",
                    {"stem_id": str(stem_id)},
                )

        return await self.stems.reorder(orders, user_id)

    async def get_stem_permissions(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Dict[str, bool]:
        """What the stem editor may offer this user."""
        return await self.gate.get_effective_permission_summary(project_id, user_id)
