"""
Application services. Each takes an AsyncSession and gates every call
through the permission engine in ``stemhub.kernel.permissions``.
"""

from stemhub.services.collaboration_service import CollaborationService
from stemhub.services.project_service import ProjectService
from stemhub.services.segment_service import SegmentService, SegmentWriteResult
from stemhub.services.stem_service import StemService

__all__ = [
    "CollaborationService",
    "ProjectService",
    "SegmentService",
    "SegmentWriteResult",
    "StemService",
]
