"""
Chat group and group message endpoints for API v1.

Group listing applies the visibility rules in ``ChatService``: members
only ever see public groups their role unlocks and private groups they
take part in.  Moderators create groups, open private groups with
members and clear groups; only administrators delete groups.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import get_current_user, require_roles
from community_platform_api.app.schemas.chat import (
    ChatGroupCreate,
    ChatGroupRead,
    ChatMessageRead,
    ClearMessagesResult,
    GroupMessageCreate,
    MessageCreate,
    MessageUpdate,
    PrivateGroupRequest,
)
from community_platform_api.app.services.chat_service import ChatService

router = APIRouter()


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

@router.get("/groups", response_model=List[ChatGroupRead])
async def list_groups(current_user: dict = Depends(get_current_user)) -> List[ChatGroupRead]:
    """Return the groups visible to the current user, oldest first."""
    return await ChatService.list_groups(current_user)


@router.post("/groups", response_model=ChatGroupRead, status_code=status.HTTP_201_CREATED)
async def create_group(
    data: ChatGroupCreate,
    current_user: dict = Depends(require_roles(Role.MOD, Role.ADMIN)),
) -> ChatGroupRead:
    try:
        return await ChatService.create_group(data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/private", response_model=ChatGroupRead)
async def open_private_group(
    data: PrivateGroupRequest,
    response: Response,
    current_user: dict = Depends(require_roles(Role.MOD, Role.ADMIN)),
) -> ChatGroupRead:
    """Return the private group between the moderator and a member.

    Responds 200 with the existing group, or 201 when one is created.
    """
    try:
        group, created = await ChatService.resolve_private_group(data.target_user_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return group


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    """Delete a group together with all of its messages."""
    try:
        await ChatService.delete_group(group_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@router.get("/groups/{group_id}/messages", response_model=List[ChatMessageRead])
async def list_group_messages(
    group_id: int,
    current_user: dict = Depends(get_current_user),
) -> List[ChatMessageRead]:
    try:
        return await ChatService.list_messages(group_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/messages", response_model=List[ChatMessageRead])
async def list_messages(
    group_id: Optional[int] = Query(None, description="Group to read"),
    current_user: dict = Depends(get_current_user),
) -> List[ChatMessageRead]:
    if group_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="group_id is required")
    try:
        return await ChatService.list_messages(group_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/groups/{group_id}/messages", response_model=ChatMessageRead, status_code=status.HTTP_201_CREATED)
async def send_group_message(
    group_id: int,
    data: MessageCreate,
    current_user: dict = Depends(get_current_user),
) -> ChatMessageRead:
    try:
        return await ChatService.send_message(group_id, data.content, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/messages", response_model=ChatMessageRead, status_code=status.HTTP_201_CREATED)
async def send_message(
    data: GroupMessageCreate,
    current_user: dict = Depends(get_current_user),
) -> ChatMessageRead:
    try:
        return await ChatService.send_message(data.group_id, data.content, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.patch("/messages/{message_id}", response_model=ChatMessageRead)
async def edit_message(
    message_id: int,
    data: MessageUpdate,
    current_user: dict = Depends(get_current_user),
) -> ChatMessageRead:
    """Edit a message.  Only its sender may do so."""
    try:
        return await ChatService.edit_message(message_id, data.content, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: int,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete a message as its sender or as a moderator."""
    try:
        await ChatService.delete_message(message_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None


@router.delete("/groups/{group_id}/messages", response_model=ClearMessagesResult)
async def clear_messages(
    group_id: int,
    current_user: dict = Depends(require_roles(Role.MOD, Role.ADMIN)),
) -> ClearMessagesResult:
    try:
        deleted = await ChatService.clear_messages(group_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return ClearMessagesResult(deleted=deleted, detail=f"Deleted {deleted} messages")
