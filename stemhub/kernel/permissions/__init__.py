"""
Permission Core - role defaults, access classification and the capability gate.

Submodules:
    roles               pure role -> capability mapping and override merge
    access              owner / collaborator / no-access classification
    permission_service  the gate consulted before every stem/segment mutation

Only the pure role model is re-exported here; the other two depend on the
data models, which themselves depend on ``roles``.
"""

from stemhub.kernel.permissions.roles import (
    ALL_GRANTED,
    NONE_GRANTED,
    Capability,
    CollaboratorRole,
    PermissionBundle,
    ROLE_RANK,
    default_permissions,
    merge_permissions,
)

__all__ = [
    "ALL_GRANTED",
    "NONE_GRANTED",
    "Capability",
    "CollaboratorRole",
    "PermissionBundle",
    "ROLE_RANK",
    "default_permissions",
    "merge_permissions",
]
