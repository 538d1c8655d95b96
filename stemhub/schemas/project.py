"""
Project schemas.
"""

import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Project creation request."""
    
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    tempo: Optional[int] = Field(None, ge=60, le=200)
    is_public: bool = False


class ProjectUpdate(BaseModel):
    """Project update request."""
    
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    tempo: Optional[int] = Field(None, ge=60, le=200)
    is_public: Optional[bool] = None


class ProjectResponse(BaseModel):
    """Project response."""
    
    id: uuid.UUID
    name: str
    description: Optional[str]
    tempo: int
    owner_id: uuid.UUID
    is_public: bool
    is_active: bool
    last_accessed_at: datetime
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class ProjectAccessResponse(BaseModel):
    """The caller's relationship to a project."""
    
    is_owner: bool
    role: Optional[str] = None
    permissions: Dict[str, bool]
