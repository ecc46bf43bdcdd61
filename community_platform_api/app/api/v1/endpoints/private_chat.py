"""
Private conversation endpoints for API v1.

Any member can open a one‑to‑one conversation with another member.
Only the two participants can read or post to it.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.security import get_current_user
from community_platform_api.app.schemas.chat import MessageCreate, MessageUpdate
from community_platform_api.app.schemas.private_chat import (
    ConversationCreate,
    ConversationSummary,
    PrivateConversationRead,
    PrivateMessageRead,
)
from community_platform_api.app.services.private_chat_service import PrivateChatService

router = APIRouter()


@router.get("/private-conversations", response_model=List[ConversationSummary])
async def list_conversations(current_user: dict = Depends(get_current_user)) -> List[ConversationSummary]:
    """Inbox of the current user, most recently active first."""
    return await PrivateChatService.list_conversations(current_user)


@router.post("/private-conversations", response_model=PrivateConversationRead)
async def open_conversation(
    data: ConversationCreate,
    current_user: dict = Depends(get_current_user),
) -> PrivateConversationRead:
    """Return the conversation with ``participant_id``, creating it if needed."""
    try:
        return await PrivateChatService.resolve_conversation(data.participant_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/private-conversations/{conversation_id}/messages", response_model=List[PrivateMessageRead])
async def list_messages(
    conversation_id: int,
    current_user: dict = Depends(get_current_user),
) -> List[PrivateMessageRead]:
    try:
        return await PrivateChatService.list_messages(conversation_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.post(
    "/private-conversations/{conversation_id}/messages",
    response_model=PrivateMessageRead,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: int,
    data: MessageCreate,
    current_user: dict = Depends(get_current_user),
) -> PrivateMessageRead:
    try:
        return await PrivateChatService.send_message(conversation_id, data.content, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.patch("/private-messages/{message_id}", response_model=PrivateMessageRead)
async def edit_message(
    message_id: int,
    data: MessageUpdate,
    current_user: dict = Depends(get_current_user),
) -> PrivateMessageRead:
    try:
        return await PrivateChatService.edit_message(message_id, data.content, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/private-messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: int,
    current_user: dict = Depends(get_current_user),
) -> None:
    try:
        await PrivateChatService.delete_message(message_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
