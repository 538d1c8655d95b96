"""
Segment service - permission-gated CRUD over the timed regions of a stem.

Overlapping segments are allowed (layered MIDI is normal). Overlap is
detected on every create/retime, logged, and handed back to the caller in
SegmentWriteResult; it never fails the write.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.config import get_settings
from stemhub.kernel.errors import InputValidationError
from stemhub.kernel.models.stem import Segment, SegmentType, Stem
from stemhub.kernel.permissions.permission_service import PermissionService
from stemhub.kernel.permissions.roles import Capability
from stemhub.kernel.repositories.resources import SegmentRepository, StemRepository
from stemhub.kernel.versioning import validate_segment_timing
from stemhub.logging_config import get_logger
from stemhub.services.stem_service import pick_fields, reject_null_fields

logger = get_logger(__name__)

SEGMENT_CREATE_FIELDS = frozenset({
    "type", "name", "start_time", "end_time", "content", "volume", "fade_in", "fade_out",
})
SEGMENT_UPDATE_FIELDS = SEGMENT_CREATE_FIELDS - {"type"}

# NOT NULL columns outside the timing pair, which validate_segment_timing covers
SEGMENT_REQUIRED_FIELDS = frozenset({"name", "volume"})


@dataclass
class SegmentWriteResult:
    """A written segment plus the ids of other segments it now overlaps."""

    segment: Segment
    overlapping_ids: List[uuid.UUID] = field(default_factory=list)

    @property
    def has_overlap(self) -> bool:
        return bool(self.overlapping_ids)


def _segment_type(value: Any) -> SegmentType:
    try:
        return SegmentType(value)
    except ValueError:
        raise InputValidationError(f"Unknown segment type: {value}", {"type": str(value)})


class SegmentService:

    def __init__(self, session: AsyncSession, max_duration: Optional[float] = None):
        self.session = session
        self.gate = PermissionService(session)
        self.stems = StemRepository(session)
        self.segments = SegmentRepository(session)
        self.max_duration = (
            max_duration if max_duration is not None else get_settings().max_segment_duration_ms
        )

    async def list_segments(self, stem_id: uuid.UUID, user_id: uuid.UUID) -> List[Segment]:
        """Segments of a stem ordered by start time."""
        await self._stem_with_access(stem_id, user_id)
        return await self.segments.list_by_parent(stem_id)

    async def get_segment(self, segment_id: uuid.UUID, user_id: uuid.UUID) -> Segment:
        segment = await self.segments.get_or_raise(segment_id)
        await self._stem_with_access(segment.stem_id, user_id)
        return segment

    async def get_segments_by_time_range(
        self,
        stem_id: uuid.UUID,
        start_time: float,
        end_time: float,
        user_id: uuid.UUID,
    ) -> List[Segment]:
        """Segments whose [start, end) intersects [start_time, end_time)."""
        if end_time <= start_time:
            raise InputValidationError(
                "Invalid time range: end time must be after start time",
                {"start_time": start_time, "end_time": end_time},
            )
        await self._stem_with_access(stem_id, user_id)
        return await self.segments.find_by_time_range(stem_id, start_time, end_time)

    async def get_segments_by_type(
        self,
        stem_id: uuid.UUID,
        segment_type: Any,
        user_id: uuid.UUID,
    ) -> List[Segment]:
        parsed = _segment_type(segment_type)
        await self._stem_with_access(stem_id, user_id)
        return await self.segments.find_by_type(stem_id, parsed)

    async def find_overlaps(self, segment_id: uuid.UUID, user_id: uuid.UUID) -> List[Segment]:
        """Other segments on the same stem that intersect this one."""
        segment = await self.get_segment(segment_id, user_id)
        return await self.segments.find_overlapping(
            segment.stem_id, segment.start_time, segment.end_time, exclude_id=segment.id
        )

    async def create_segment(
        self,
        stem_id: uuid.UUID,
        data: Mapping[str, Any],
        user_id: uuid.UUID,
    ) -> SegmentWriteResult:
        """
        Add a segment to a stem. Requires can_add_children on the stem's project.

        Raises:
            NotFoundError: stem or project missing
            ForbiddenError: capability missing
            InputValidationError: bad timing or segment type
        """
        stem = await self.stems.get_or_raise(stem_id)
        await self.gate.require_capability(stem.project_id, user_id, Capability.ADD_CHILDREN)

        fields = pick_fields(data, SEGMENT_CREATE_FIELDS)
        fields["type"] = _segment_type(fields.get("type")).value
        reject_null_fields(fields, SEGMENT_REQUIRED_FIELDS)
        validate_segment_timing(fields.get("start_time"), fields.get("end_time"), self.max_duration)

        overlapping = await self._detect_overlap(stem_id, fields["start_time"], fields["end_time"])
        segment = await self.segments.create(user_id, stem_id=stem_id, **fields)
        return SegmentWriteResult(segment, overlapping)

    async def update_segment(
        self,
        segment_id: uuid.UUID,
        data: Mapping[str, Any],
        user_id: uuid.UUID,
    ) -> SegmentWriteResult:
        """
        Edit a segment. Requires can_edit; bumps the version.

        Timing is re-validated against the merged old/new interval whenever
        either bound changes. A bound sent as None is invalid timing, not
        "keep the old value".
        """
        existing = await self.segments.get_or_raise(segment_id)
        stem = await self.stems.get_or_raise(existing.stem_id)
        await self.gate.require_capability(stem.project_id, user_id, Capability.EDIT)

        fields = pick_fields(data, SEGMENT_UPDATE_FIELDS)
        reject_null_fields(fields, SEGMENT_REQUIRED_FIELDS)
        overlapping: List[uuid.UUID] = []
        if "start_time" in fields or "end_time" in fields:
            start_time = fields.get("start_time", existing.start_time)
            end_time = fields.get("end_time", existing.end_time)
            validate_segment_timing(start_time, end_time, self.max_duration)
            overlapping = await self._detect_overlap(
                existing.stem_id, start_time, end_time, exclude_id=segment_id
            )

        segment = await self.segments.update(segment_id, user_id, **fields)
        return SegmentWriteResult(segment, overlapping)

    async def delete_segment(self, segment_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a segment. Requires can_delete_children."""
        existing = await self.segments.get_or_raise(segment_id)
        stem = await self.stems.get_or_raise(existing.stem_id)
        await self.gate.require_capability(stem.project_id, user_id, Capability.DELETE_CHILDREN)

        await self.segments.delete(segment_id)

    async def duplicate_segment(self, segment_id: uuid.UUID, user_id: uuid.UUID) -> SegmentWriteResult:
        """
        Copy a segment to just after the original, same duration.

        The copy is a new resource (version 1) so it needs can_add_children.
        """
        original = await self.segments.get_or_raise(segment_id)
        stem = await self.stems.get_or_raise(original.stem_id)
        await self.gate.require_capability(stem.project_id, user_id, Capability.ADD_CHILDREN)

        duration = original.end_time - original.start_time
        start_time = original.end_time
        end_time = original.end_time + duration
        validate_segment_timing(start_time, end_time, self.max_duration)

        overlapping = await self._detect_overlap(original.stem_id, start_time, end_time)
        copy = await self.segments.create(
            user_id,
            stem_id=original.stem_id,
            type=original.type,
            name=f"{original.name} (Copy)",
            start_time=start_time,
            end_time=end_time,
            content=original.content,
            volume=original.volume,
            fade_in=original.fade_in,
            fade_out=original.fade_out,
        )
        return SegmentWriteResult(copy, overlapping)

    async def _stem_with_access(self, stem_id: uuid.UUID, user_id: uuid.UUID) -> Stem:
        stem = await self.stems.get_or_raise(stem_id)
        await self.gate.require_access(stem.project_id, user_id)
        return stem

    async def _detect_overlap(
        self,
        stem_id: uuid.UUID,
        start_time: float,
        end_time: float,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> List[uuid.UUID]:
        overlapping = await self.segments.find_overlapping(stem_id, start_time, end_time, exclude_id)
        ids = [segment.id for segment in overlapping]
        if ids:
            logger.warning(
                "Segment overlap detected",
                extra={
                    "stem_id": str(stem_id),
                    "overlapping_ids": [str(segment_id) for segment_id in ids],
                },
            )
        return ids
