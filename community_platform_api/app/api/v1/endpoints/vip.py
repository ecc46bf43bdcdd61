"""
VIP download area endpoints for API v1.

Listing requires at least the VIP role; managing the list is reserved
for administrators.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import require_min_role, require_roles
from community_platform_api.app.schemas.content import VipAppCreate, VipAppRead
from community_platform_api.app.services.vip_app_service import VipAppService

router = APIRouter()


@router.get("/apps", response_model=List[VipAppRead])
async def list_apps(current_user: dict = Depends(require_min_role(Role.VIP))) -> List[VipAppRead]:
    return await VipAppService.list_apps()


@router.post("/apps", response_model=VipAppRead, status_code=status.HTTP_201_CREATED)
async def create_app(
    data: VipAppCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> VipAppRead:
    try:
        return await VipAppService.create_app(data, current_user)
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/apps/{app_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_app(
    app_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    try:
        await VipAppService.delete_app(app_id, current_user)
    except ValueError as e:
        raise to_http_exception(e)
    return None
