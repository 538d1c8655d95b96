"""
Stem and segment models.

Both are versioned resources: ``version`` starts at 1 and every successful
update bumps it by one in the same UPDATE statement that writes the change.
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stemhub.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from stemhub.kernel.models.project import Project


class SegmentType(str, Enum):
    """Kind of content a segment carries."""
    MIDI = "MIDI"
    AUDIO = "AUDIO"


class VersionedMixin:
    """Optimistic version counter plus the last writer."""
    
    version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    last_modified_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
    )


class Stem(Base, TimestampMixin, VersionedMixin):
    """A single track within a project."""
    
    __tablename__ = "stems"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#3B82F6", nullable=False)
    volume: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    pan: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    is_muted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_soloed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    instrument_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    midi_channel: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    
    # Relationships
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="stems",
    )
    segments: Mapped[List["Segment"]] = relationship(
        "Segment",
        back_populates="stem",
        cascade="all, delete-orphan",
        order_by="Segment.start_time",
    )
    
    __table_args__ = (
        Index("ix_stems_project_order", "project_id", "order"),
    )
    
    def __repr__(self) -> str:
        return f"<Stem {self.name} v{self.version}>"


class Segment(Base, TimestampMixin, VersionedMixin):
    """A timed region of MIDI or audio on a stem. Times are milliseconds."""
    
    __tablename__ = "stem_segments"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    stem_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("stems.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[SegmentType] = mapped_column(String(10), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[float] = mapped_column(Float, nullable=False)
    end_time: Mapped[float] = mapped_column(Float, nullable=False)
    content: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    volume: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    fade_in: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    fade_out: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    
    # Relationships
    stem: Mapped["Stem"] = relationship(
        "Stem",
        back_populates="segments",
    )
    
    __table_args__ = (
        Index("ix_stem_segments_stem_time", "stem_id", "start_time", "end_time"),
    )
    
    def __repr__(self) -> str:
        return f"<Segment {self.name} [{self.start_time}, {self.end_time}) v{self.version}>"
