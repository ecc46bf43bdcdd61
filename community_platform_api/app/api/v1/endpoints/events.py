"""
Event endpoints for API v1.

Members browse the schedule; administrators manage it.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import get_current_user, require_roles
from community_platform_api.app.schemas.event import EventCreate, EventRead, EventUpdate
from community_platform_api.app.services.event_service import EventService

router = APIRouter()


@router.get("", response_model=List[EventRead])
async def list_events(current_user: dict = Depends(get_current_user)) -> List[EventRead]:
    """Return all events, soonest first."""
    return await EventService.list_events()


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: int, current_user: dict = Depends(get_current_user)) -> EventRead:
    try:
        return await EventService.get_event(event_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> EventRead:
    return await EventService.create_event(event, current_user)


@router.patch("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: int,
    updates: EventUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> EventRead:
    """Update an event.  Only fields present in the body change."""
    try:
        return await EventService.update_event(event_id, updates, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    try:
        await EventService.delete_event(event_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
