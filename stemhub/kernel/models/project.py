"""
Music project model.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stemhub.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from stemhub.kernel.models.user import User
    from stemhub.kernel.models.collaborator import Collaborator
    from stemhub.kernel.models.stem import Stem


class Project(Base, TimestampMixin):
    """
    Top-level container for stems.

    The owner is implicit: it is never stored as a Collaborator row.
    """
    
    __tablename__ = "projects"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    tempo: Mapped[int] = mapped_column(
        default=120,
        nullable=False,
    )
    
    # Ownership
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    
    # Visibility and lifecycle
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    
    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="owned_projects",
        foreign_keys=[owner_id],
    )
    collaborators: Mapped[List["Collaborator"]] = relationship(
        "Collaborator",
        back_populates="project",
        cascade="all, delete-orphan",
    )
    stems: Mapped[List["Stem"]] = relationship(
        "Stem",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Project {self.name[:50]}>"
