"""
Pydantic schemas for API request/response validation.
"""

from stemhub.schemas.collaboration import (
    CollaboratorInvite,
    CollaboratorPermissionsResponse,
    CollaboratorResponse,
    CollaboratorUpdate,
    EffectivePermissionsResponse,
    PermissionOverride,
    UserSummary,
)
from stemhub.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
from stemhub.schemas.project import (
    ProjectAccessResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from stemhub.schemas.segment import (
    SegmentCreate,
    SegmentResponse,
    SegmentUpdate,
    SegmentWriteResponse,
)
from stemhub.schemas.stem import (
    StemCreate,
    StemOrder,
    StemReorderRequest,
    StemResponse,
    StemUpdate,
    StemWithSegmentsResponse,
)

__all__ = [
    "CollaboratorInvite",
    "CollaboratorPermissionsResponse",
    "CollaboratorResponse",
    "CollaboratorUpdate",
    "EffectivePermissionsResponse",
    "PermissionOverride",
    "UserSummary",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    "ProjectAccessResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "SegmentCreate",
    "SegmentResponse",
    "SegmentUpdate",
    "SegmentWriteResponse",
    "StemCreate",
    "StemOrder",
    "StemReorderRequest",
    "StemResponse",
    "StemUpdate",
    "StemWithSegmentsResponse",
]
