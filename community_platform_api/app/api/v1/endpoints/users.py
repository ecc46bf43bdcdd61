"""
User endpoints for API v1.

Any signed‑in member can list the member directory and edit their own
profile.  Account management lives in ``admin_users``.
"""

from typing import List

from fastapi import APIRouter, Depends

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.security import get_current_user
from community_platform_api.app.schemas.user import ProfileUpdate, UserPublic
from community_platform_api.app.services.user_service import PROFILE_FIELDS, UserService

router = APIRouter()


@router.get("", response_model=List[UserPublic])
async def list_users(current_user: dict = Depends(get_current_user)) -> List[UserPublic]:
    return await UserService.list_users()


@router.patch("/me", response_model=UserPublic)
async def update_profile(
    data: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserPublic:
    """Update the current user's display name and/or avatar."""
    try:
        return await UserService.update_user(
            current_user["user_id"],
            data.model_dump(exclude_unset=True),
            allowed_fields=PROFILE_FIELDS,
            actor_id=current_user["user_id"],
        )
    except ValueError as e:
        raise to_http_exception(e)
