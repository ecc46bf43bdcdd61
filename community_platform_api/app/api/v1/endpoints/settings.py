"""
Site settings endpoints for API v1.

Each setting has a ``GET`` for clients and an administrator‑only
``POST`` that replaces it.  Music, featured members and branding are
readable without signing in because the public pages use them.
"""

from fastapi import APIRouter, Depends

from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import get_current_user, require_roles
from community_platform_api.app.schemas.settings import (
    BrandingSettings,
    BrandingUpdate,
    FeaturedMembers,
    FilmSettings,
    MusicSettings,
)
from community_platform_api.app.services.settings_service import SettingsService

router = APIRouter()


@router.get("/film", response_model=FilmSettings)
async def get_film(current_user: dict = Depends(get_current_user)) -> FilmSettings:
    return await SettingsService.get_film()


@router.post("/film", response_model=FilmSettings)
async def set_film(
    data: FilmSettings,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> FilmSettings:
    return await SettingsService.set_film(data, current_user["user_id"])


@router.get("/music", response_model=MusicSettings)
async def get_music() -> MusicSettings:
    return await SettingsService.get_music()


@router.post("/music", response_model=MusicSettings)
async def set_music(
    data: MusicSettings,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> MusicSettings:
    return await SettingsService.set_music(data, current_user["user_id"])


@router.get("/featured-members", response_model=FeaturedMembers)
async def get_featured_members() -> FeaturedMembers:
    return await SettingsService.get_featured_members()


@router.post("/featured-members", response_model=FeaturedMembers)
async def set_featured_members(
    data: FeaturedMembers,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> FeaturedMembers:
    return await SettingsService.set_featured_members(data, current_user["user_id"])


@router.get("/branding", response_model=BrandingSettings)
async def get_branding() -> BrandingSettings:
    return await SettingsService.get_branding()


@router.post("/branding", response_model=BrandingSettings)
async def set_branding(
    data: BrandingUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> BrandingSettings:
    """Update the site name and/or flag toggle; omitted fields keep their value."""
    return await SettingsService.set_branding(data, current_user["user_id"])
