"""
Project collaborator model.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Dict

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stemhub.kernel.models.base import Base, generate_uuid, utcnow
from stemhub.kernel.permissions.roles import Capability

if TYPE_CHECKING:
    from stemhub.kernel.models.project import Project
    from stemhub.kernel.models.user import User


class Collaborator(Base):
    """
    A non-owner user's membership in a project.

    The capability flags are seeded from the role defaults when the row is
    created or its role changes, and may diverge through explicit overrides.
    """
    
    __tablename__ = "project_collaborators"
    
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
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    # Stored as the raw string so an unknown value can still be read back
    # and fail closed in default_permissions().
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    
    # Capability flags
    can_edit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_add_children: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_delete_children: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_invite_others: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_export: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    last_active_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    
    # Relationships
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="collaborators",
    )
    user: Mapped["User"] = relationship(
        "User",
        back_populates="collaborations",
        foreign_keys=[user_id],
        lazy="joined",
    )
    
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_collaborators_project_user"),
    )
    
    def stored_permissions(self) -> Dict[str, bool]:
        """The five capability flags exactly as persisted."""
        return {capability.value: bool(getattr(self, capability.value)) for capability in Capability}
    
    def __repr__(self) -> str:
        return f"<Collaborator project={self.project_id} user={self.user_id} role={self.role}>"
