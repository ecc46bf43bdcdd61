"""
Announcement endpoints for API v1.

Reading is public so the landing page can show the current
announcement before sign‑in.  Publishing and deleting are
administrator actions under ``/admin/announcements``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import require_roles
from community_platform_api.app.schemas.content import AnnouncementCreate, AnnouncementRead
from community_platform_api.app.services.announcement_service import AnnouncementService

router = APIRouter()


@router.get("/announcements", response_model=List[AnnouncementRead])
async def list_announcements() -> List[AnnouncementRead]:
    return await AnnouncementService.list_announcements()


@router.get("/announcements/active", response_model=Optional[AnnouncementRead])
async def active_announcement() -> Optional[AnnouncementRead]:
    """Return the active announcement, or ``null`` if none is active."""
    return await AnnouncementService.get_active()


@router.post("/admin/announcements", response_model=AnnouncementRead, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> AnnouncementRead:
    """Publish an announcement.  Every other announcement is deactivated."""
    return await AnnouncementService.create_announcement(data, current_user)


@router.delete("/admin/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    try:
        await AnnouncementService.delete_announcement(announcement_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
