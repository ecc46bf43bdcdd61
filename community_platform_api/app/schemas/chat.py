"""
Pydantic schemas for chat groups and group messages.

Timestamps are ``str`` because SQLite returns them as text.  Message
payloads embed the sender's public profile under ``user``; it is
``None`` when the sender's account has been deleted.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.roles import Role
from .user import UserPublic


class ChatGroupCreate(BaseModel):
    """Schema for creating a public chat group.

    ``name`` is trimmed by the service and must not be blank.
    ``required_role`` is the lowest role allowed to see the group.
    """

    name: str = Field(..., description="Group name")
    description: Optional[str] = Field(None, description="Optional description")
    required_role: Role = Field(Role.USER, description="Minimum role that can see the group")


class PrivateGroupRequest(BaseModel):
    """Moderator request to open a private group with another user."""

    target_user_id: Optional[int] = Field(None, description="User to chat with")


class ChatGroupRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    required_role: Role = Role.USER
    is_private: bool = False
    participants: Optional[List[int]] = None
    created_by: int
    created_at: Optional[str] = None


class MessageCreate(BaseModel):
    content: str = Field(..., description="Message text; must not be blank")


class GroupMessageCreate(MessageCreate):
    """Message body for the flat ``POST /chat/messages`` route, which
    names the target group in the body instead of the path."""

    group_id: int


class MessageUpdate(BaseModel):
    content: str = Field(..., description="Replacement text; must not be blank")


class ChatMessageRead(BaseModel):
    id: int
    group_id: int
    user_id: int
    content: str
    created_at: Optional[str] = None
    user: Optional[UserPublic] = None


class ClearMessagesResult(BaseModel):
    deleted: int
    detail: str
