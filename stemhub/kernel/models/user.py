"""
User account model.

Credentials live with the identity provider; this table only holds what the
collaboration engine needs to resolve and display a user.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stemhub.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from stemhub.kernel.models.project import Project
    from stemhub.kernel.models.collaborator import Collaborator


class User(Base, TimestampMixin):
    """User account model."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    avatar: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    
    # Relationships
    owned_projects: Mapped[List["Project"]] = relationship(
        "Project",
        back_populates="owner",
        foreign_keys="Project.owner_id",
    )
    collaborations: Mapped[List["Collaborator"]] = relationship(
        "Collaborator",
        back_populates="user",
        foreign_keys="Collaborator.user_id",
    )
    
    def __repr__(self) -> str:
        return f"<User {self.email}>"
