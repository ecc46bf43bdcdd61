"""
Administrator user management for API v1.

All routes require the ADMIN role.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import require_roles
from community_platform_api.app.schemas.user import AdminUserCreate, AdminUserUpdate, UserPublic
from community_platform_api.app.services.user_service import ADMIN_FIELDS, UserService

router = APIRouter()


@router.get("", response_model=List[UserPublic])
async def list_users(current_user: dict = Depends(require_roles(Role.ADMIN))) -> List[UserPublic]:
    return await UserService.list_users()


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: AdminUserCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> UserPublic:
    """Create an account with an explicit role and level."""
    try:
        return await UserService.create_user(
            username=data.username,
            password=data.password,
            display_name=data.display_name,
            role=data.role,
            level=data.level,
            actor_id=current_user["user_id"],
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.patch("/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: int,
    data: AdminUserUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> UserPublic:
    """Change a user's role, level or display name."""
    try:
        return await UserService.update_user(
            user_id,
            data.model_dump(exclude_unset=True),
            allowed_fields=ADMIN_FIELDS,
            actor_id=current_user["user_id"],
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    """Delete an account.  Administrators cannot delete themselves."""
    try:
        await UserService.delete_user(user_id, actor_id=current_user["user_id"])
    except ValueError as e:
        raise to_http_exception(e)
    return None
