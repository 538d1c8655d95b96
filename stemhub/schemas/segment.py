"""
Segment schemas.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from stemhub.kernel.models.stem import SegmentType


class SegmentCreate(BaseModel):
    """
    Segment creation request.

    Times are milliseconds from the start of the project. Range checks
    (end after start, maximum length) happen in the service so the rule
    lives in one place.
    """
    
    type: SegmentType
    name: str = Field(..., min_length=1, max_length=100)
    start_time: float
    end_time: float
    content: Optional[Any] = None
    volume: Optional[float] = Field(None, ge=0.0, le=1.0)
    fade_in: Optional[float] = Field(None, ge=0.0)
    fade_out: Optional[float] = Field(None, ge=0.0)


class SegmentUpdate(BaseModel):
    """Segment update request. Only the supplied fields change."""
    
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    content: Optional[Any] = None
    volume: Optional[float] = Field(None, ge=0.0, le=1.0)
    fade_in: Optional[float] = Field(None, ge=0.0)
    fade_out: Optional[float] = Field(None, ge=0.0)


class SegmentResponse(BaseModel):
    """Segment response."""
    
    id: uuid.UUID
    stem_id: uuid.UUID
    type: str
    name: str
    start_time: float
    end_time: float
    content: Optional[Any]
    volume: float
    fade_in: Optional[float]
    fade_out: Optional[float]
    version: int
    last_modified_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class SegmentWriteResponse(BaseModel):
    """A written segment plus any segments it now overlaps."""
    
    segment: SegmentResponse
    overlapping_ids: List[uuid.UUID] = []
    has_overlap: bool = False
