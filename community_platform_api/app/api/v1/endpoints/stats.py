"""
Dashboard statistics endpoint for API v1.
"""

from fastapi import APIRouter, Depends

from community_platform_api.app.core.security import get_current_user
from community_platform_api.app.schemas.settings import PlatformStats
from community_platform_api.app.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("", response_model=PlatformStats)
async def overview(current_user: dict = Depends(get_current_user)) -> PlatformStats:
    return await StatisticsService.overview()
