"""
Stores for the versioned resources (stems and segments).

All writes go through VersionedRepository so the version contract in
``stemhub.kernel.versioning`` is applied in one place.
"""

import uuid
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stemhub.kernel.errors import NotFoundError
from stemhub.kernel.models.stem import Segment, SegmentType, Stem
from stemhub.kernel.versioning import creation_stamp, update_stamp

ModelT = TypeVar("ModelT", Stem, Segment)


class VersionedRepository(Generic[ModelT]):
    """
    Shared CRUD for a versioned model.

    Subclasses set ``model``, ``parent_column`` and ``resource_name``.
    """
    
    model: Type[ModelT]
    parent_column: str
    resource_name: str
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    def _order_by(self) -> Sequence[Any]:
        return (self.model.created_at,)
    
    async def get(self, resource_id: uuid.UUID) -> Optional[ModelT]:
        query = select(self.model).where(self.model.id == resource_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def get_or_raise(self, resource_id: uuid.UUID) -> ModelT:
        resource = await self.get(resource_id)
        if resource is None:
            raise NotFoundError(self.resource_name, {"id": str(resource_id)})
        return resource
    
    async def list_by_parent(self, parent_id: uuid.UUID) -> List[ModelT]:
        query = (
            select(self.model)
            .where(getattr(self.model, self.parent_column) == parent_id)
            .order_by(*self._order_by())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def create(self, actor_id: uuid.UUID, **fields) -> ModelT:
        """Insert with version 1 and last_modified_by = actor."""
        resource = self.model(**fields, **creation_stamp(actor_id))
        self.session.add(resource)
        await self.session.flush()
        return await self._reload(resource.id)
    
    async def update(self, resource_id: uuid.UUID, actor_id: uuid.UUID, **fields) -> ModelT:
        """Write ``fields`` and bump the version in a single statement."""
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == resource_id)
            .values(**fields, **update_stamp(self.model, actor_id))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(self.resource_name, {"id": str(resource_id)})
        return await self._reload(resource_id)
    
    async def delete(self, resource_id: uuid.UUID) -> None:
        await self.session.execute(delete(self.model).where(self.model.id == resource_id))
    
    async def _reload(self, resource_id: uuid.UUID) -> ModelT:
        resource = await self.session.get(self.model, resource_id, populate_existing=True)
        if resource is None:
            raise NotFoundError(self.resource_name, {"id": str(resource_id)})
        return resource


class StemRepository(VersionedRepository[Stem]):
    model = Stem
    parent_column = "project_id"
    resource_name = "Stem"
    
    def _order_by(self) -> Sequence[Any]:
        return (Stem.order.asc(), Stem.created_at.asc())
    
    async def next_order(self, project_id: uuid.UUID) -> int:
        """First free position at the end of the project's stem list."""
        result = await self.session.execute(
            select(func.max(Stem.order)).where(Stem.project_id == project_id)
        )
        current = result.scalar()
        return 0 if current is None else current + 1
    
    async def get_with_segments(self, stem_id: uuid.UUID) -> Optional[Stem]:
        query = (
            select(Stem)
            .where(Stem.id == stem_id)
            .options(selectinload(Stem.segments))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def list_by_instrument_type(self, project_id: uuid.UUID, instrument_type: str) -> List[Stem]:
        query = (
            select(Stem)
            .where(Stem.project_id == project_id, Stem.instrument_type == instrument_type)
            .order_by(*self._order_by())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def reorder(
        self,
        orders: Sequence[Tuple[uuid.UUID, int]],
        actor_id: uuid.UUID,
    ) -> List[Stem]:
        """Apply new positions; each moved stem gets its own version bump."""
        return [
            await self.update(stem_id, actor_id, order=order)
            for stem_id, order in orders
        ]
    
    async def delete(self, resource_id: uuid.UUID) -> None:
        await self.session.execute(delete(Segment).where(Segment.stem_id == resource_id))
        await super().delete(resource_id)


class SegmentRepository(VersionedRepository[Segment]):
    model = Segment
    parent_column = "stem_id"
    resource_name = "Segment"
    
    def _order_by(self) -> Sequence[Any]:
        return (Segment.start_time.asc(), Segment.created_at.asc())
    
    async def find_by_time_range(
        self,
        stem_id: uuid.UUID,
        start_time: float,
        end_time: float,
    ) -> List[Segment]:
        """Segments on the stem whose [start, end) intersects [start_time, end_time)."""
        query = (
            select(Segment)
            .where(
                Segment.stem_id == stem_id,
                Segment.start_time < end_time,
                Segment.end_time > start_time,
            )
            .order_by(*self._order_by())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def find_overlapping(
        self,
        stem_id: uuid.UUID,
        start_time: float,
        end_time: float,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> List[Segment]:
        """Like find_by_time_range, minus the segment being written."""
        segments = await self.find_by_time_range(stem_id, start_time, end_time)
        return [segment for segment in segments if segment.id != exclude_id]
    
    async def find_by_type(self, stem_id: uuid.UUID, segment_type: SegmentType) -> List[Segment]:
        query = (
            select(Segment)
            .where(Segment.stem_id == stem_id, Segment.type == segment_type.value)
            .order_by(*self._order_by())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
