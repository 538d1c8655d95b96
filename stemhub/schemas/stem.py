"""
Stem schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stemhub.schemas.segment import SegmentResponse


class StemCreate(BaseModel):
    """Stem creation request."""
    
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    volume: Optional[float] = Field(None, ge=0.0, le=1.0)
    pan: Optional[float] = Field(None, ge=-1.0, le=1.0)
    instrument_type: Optional[str] = Field(None, max_length=50)
    midi_channel: Optional[int] = Field(None, ge=1, le=16)
    order: Optional[int] = Field(None, ge=0)


class StemUpdate(BaseModel):
    """Stem update request. Only the supplied fields change."""
    
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    volume: Optional[float] = Field(None, ge=0.0, le=1.0)
    pan: Optional[float] = Field(None, ge=-1.0, le=1.0)
    is_muted: Optional[bool] = None
    is_soloed: Optional[bool] = None
    instrument_type: Optional[str] = Field(None, max_length=50)
    midi_channel: Optional[int] = Field(None, ge=1, le=16)
    order: Optional[int] = Field(None, ge=0)


class StemOrder(BaseModel):
    id: uuid.UUID
    order: int = Field(..., ge=0)


class StemReorderRequest(BaseModel):
    """New positions for some or all stems of a project."""
    
    stems: List[StemOrder] = Field(..., min_length=1)


class StemResponse(BaseModel):
    """Stem response."""
    
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    color: str
    volume: float
    pan: float
    is_muted: bool
    is_soloed: bool
    instrument_type: Optional[str]
    midi_channel: Optional[int]
    order: int
    version: int
    last_modified_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class StemWithSegmentsResponse(StemResponse):
    segments: List[SegmentResponse] = []
