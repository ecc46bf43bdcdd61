"""
Pydantic models for live‑event listings.

An event is a scheduled broadcast hosted by an agency, usually a match
between two featured participants.  ``EventCreate`` is used for
requests; ``EventRead`` adds the stored fields.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, examples=["Weekly PK Contest"])
    description: Optional[str] = None
    agency_name: str = Field(..., min_length=1, examples=["Elite Agency"])
    agency_logo: Optional[str] = None
    participant1_name: Optional[str] = None
    participant1_avatar: Optional[str] = None
    participant2_name: Optional[str] = None
    participant2_avatar: Optional[str] = None


class EventCreate(EventBase):
    scheduled_at: datetime = Field(..., examples=["2025-09-01T20:00:00Z"])


class EventUpdate(BaseModel):
    """Schema for updating an event.

    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    agency_name: Optional[str] = Field(None, min_length=1)
    agency_logo: Optional[str] = None
    participant1_name: Optional[str] = None
    participant1_avatar: Optional[str] = None
    participant2_name: Optional[str] = None
    participant2_avatar: Optional[str] = None
    participant_count: Optional[int] = Field(None, ge=0)
    participants: Optional[List[str]] = None
    scheduled_at: Optional[datetime] = None
    is_live: Optional[bool] = None


class EventRead(EventBase):
    id: int
    scheduled_at: str
    participant_count: int = 0
    participants: List[str] = []
    is_live: bool = False
    created_by: int
    created_at: Optional[str] = None
