"""
Collaboration schemas.
"""

import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, EmailStr

from stemhub.kernel.permissions.roles import CollaboratorRole


class PermissionOverride(BaseModel):
    """Partial capability override. Omitted flags keep the role default."""
    
    can_edit: Optional[bool] = None
    can_add_children: Optional[bool] = None
    can_delete_children: Optional[bool] = None
    can_invite_others: Optional[bool] = None
    can_export: Optional[bool] = None


class CollaboratorInvite(BaseModel):
    """Invite a user by email."""
    
    email: EmailStr
    role: CollaboratorRole = CollaboratorRole.CONTRIBUTOR
    permissions: Optional[PermissionOverride] = None


class CollaboratorUpdate(BaseModel):
    """Change a collaborator's role and/or flags."""
    
    role: Optional[CollaboratorRole] = None
    permissions: Optional[PermissionOverride] = None


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    display_name: Optional[str]
    avatar: Optional[str]
    
    class Config:
        from_attributes = True


class CollaboratorResponse(BaseModel):
    """Collaborator row with the embedded user summary."""
    
    id: uuid.UUID
    project_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    can_edit: bool
    can_add_children: bool
    can_delete_children: bool
    can_invite_others: bool
    can_export: bool
    joined_at: datetime
    last_active_at: datetime
    user: UserSummary
    
    class Config:
        from_attributes = True


class CollaboratorPermissionsResponse(BaseModel):
    """Stored role and flags of one collaborator."""
    
    role: str
    permissions: Dict[str, bool]


class EffectivePermissionsResponse(BaseModel):
    """What the stem/segment editor may offer the caller."""
    
    can_add_children: bool
    can_delete_children: bool
    can_edit: bool
