"""
Banner carousel endpoints for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import require_roles
from community_platform_api.app.schemas.content import BannerCreate, BannerRead, BannerUpdate
from community_platform_api.app.services.banner_service import BannerService

router = APIRouter()


@router.get("/banners", response_model=List[BannerRead])
async def list_active_banners() -> List[BannerRead]:
    """Public carousel: active banners in display order."""
    return await BannerService.list_banners(active_only=True)


@router.get("/admin/banners", response_model=List[BannerRead])
async def list_banners(current_user: dict = Depends(require_roles(Role.ADMIN))) -> List[BannerRead]:
    return await BannerService.list_banners()


@router.post("/admin/banners", response_model=BannerRead, status_code=status.HTTP_201_CREATED)
async def create_banner(
    data: BannerCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> BannerRead:
    return await BannerService.create_banner(data, current_user)


@router.patch("/admin/banners/{banner_id}", response_model=BannerRead)
async def update_banner(
    banner_id: int,
    data: BannerUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> BannerRead:
    try:
        return await BannerService.update_banner(banner_id, data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/admin/banners/{banner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_banner(
    banner_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    try:
        await BannerService.delete_banner(banner_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
