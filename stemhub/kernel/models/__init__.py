"""
Kernel Data Models

SQLAlchemy models for users, projects, collaborators and the versioned
stem/segment resources.
"""

from stemhub.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from stemhub.kernel.models.user import User
from stemhub.kernel.models.project import Project
from stemhub.kernel.models.collaborator import Collaborator
from stemhub.kernel.models.stem import Stem, Segment, SegmentType, VersionedMixin

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # Identity
    "User",
    # Projects
    "Project",
    "Collaborator",
    # Versioned resources
    "Stem",
    "Segment",
    "SegmentType",
    "VersionedMixin",
]
