"""
Stores over the async SQLAlchemy session.

The engine never queries the database directly; it goes through these.
"""

from stemhub.kernel.repositories.projects import ProjectRepository
from stemhub.kernel.repositories.collaborators import CollaboratorRepository
from stemhub.kernel.repositories.resources import (
    SegmentRepository,
    StemRepository,
    VersionedRepository,
)

__all__ = [
    "ProjectRepository",
    "CollaboratorRepository",
    "SegmentRepository",
    "StemRepository",
    "VersionedRepository",
]
