"""
Pydantic schemas for support tickets.

A ticket is a single request from a member: a subject, a message and a
status that staff move through ``open``, ``in_progress``, ``resolved``
and ``closed``.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, description="Subject of the support request")
    message: str = Field(..., min_length=1, description="Details of the request")


class TicketUpdate(BaseModel):
    """Staff update.  Only provided fields are changed."""

    status: Optional[TicketStatus] = None
    subject: Optional[str] = Field(None, min_length=1)
    message: Optional[str] = Field(None, min_length=1)


class TicketRead(BaseModel):
    id: int
    user_id: int
    subject: str
    message: str
    status: TicketStatus
    created_at: Optional[str] = None
