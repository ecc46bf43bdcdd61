"""
Embedded site endpoints for API v1.

Members see the active sites; administrators manage the full list
under ``/admin/embedded-sites``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import get_current_user, require_roles
from community_platform_api.app.schemas.content import (
    EmbeddedSiteCreate,
    EmbeddedSiteRead,
    EmbeddedSiteUpdate,
)
from community_platform_api.app.services.embedded_site_service import EmbeddedSiteService

router = APIRouter()


@router.get("/embedded-sites", response_model=List[EmbeddedSiteRead])
async def list_active_sites(current_user: dict = Depends(get_current_user)) -> List[EmbeddedSiteRead]:
    return await EmbeddedSiteService.list_sites(active_only=True)


@router.get("/admin/embedded-sites", response_model=List[EmbeddedSiteRead])
async def list_sites(current_user: dict = Depends(require_roles(Role.ADMIN))) -> List[EmbeddedSiteRead]:
    return await EmbeddedSiteService.list_sites()


@router.post("/admin/embedded-sites", response_model=EmbeddedSiteRead, status_code=status.HTTP_201_CREATED)
async def create_site(
    data: EmbeddedSiteCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> EmbeddedSiteRead:
    return await EmbeddedSiteService.create_site(data, current_user)


@router.patch("/admin/embedded-sites/{site_id}", response_model=EmbeddedSiteRead)
async def update_site(
    site_id: int,
    data: EmbeddedSiteUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> EmbeddedSiteRead:
    try:
        return await EmbeddedSiteService.update_site(site_id, data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/admin/embedded-sites/{site_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site(
    site_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    try:
        await EmbeddedSiteService.delete_site(site_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
