"""
Pydantic schemas for one‑to‑one private conversations.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .user import UserPublic


class ConversationCreate(BaseModel):
    participant_id: int = Field(..., description="The other member of the conversation")


class PrivateConversationRead(BaseModel):
    id: int
    participant1_id: int
    participant2_id: int
    last_message_at: Optional[str] = None
    created_at: Optional[str] = None


class PrivateMessageRead(BaseModel):
    id: int
    conversation_id: int
    user_id: int
    content: str
    created_at: Optional[str] = None
    sender: Optional[UserPublic] = None


class ConversationSummary(PrivateConversationRead):
    """Inbox entry: the conversation with both participants and the
    most recent message, if any."""

    participant1: Optional[UserPublic] = None
    participant2: Optional[UserPublic] = None
    last_message: Optional[PrivateMessageRead] = None
