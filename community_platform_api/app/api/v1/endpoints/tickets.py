"""
API endpoints for support tickets.

Members open tickets and list their own.  Moderators and
administrators list every ticket, update status and delete tickets.
The admin dashboard reads the most recent tickets from
``/admin/tickets/recent``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import get_current_user, require_roles
from community_platform_api.app.schemas.ticket import TicketCreate, TicketRead, TicketUpdate
from community_platform_api.app.services.ticket_service import TicketService

router = APIRouter()


@router.post("/tickets", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    current_user: dict = Depends(get_current_user),
) -> TicketRead:
    try:
        return await TicketService.create_ticket(data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/tickets", response_model=List[TicketRead])
async def list_tickets(current_user: dict = Depends(get_current_user)) -> List[TicketRead]:
    """Return tickets visible to the current user, newest first.

    Moderators and administrators see all tickets; members see only
    their own.
    """
    return await TicketService.list_tickets(current_user)


@router.get("/admin/tickets/recent", response_model=List[TicketRead])
async def recent_tickets(current_user: dict = Depends(require_roles(Role.ADMIN))) -> List[TicketRead]:
    return await TicketService.recent_tickets()


@router.patch("/tickets/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: int,
    data: TicketUpdate,
    current_user: dict = Depends(require_roles(Role.MOD, Role.ADMIN)),
) -> TicketRead:
    try:
        return await TicketService.update_ticket(ticket_id, data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/tickets/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(
    ticket_id: int,
    current_user: dict = Depends(require_roles(Role.MOD, Role.ADMIN)),
) -> None:
    try:
        await TicketService.delete_ticket(ticket_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
