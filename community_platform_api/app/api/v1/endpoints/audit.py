"""Audit trail for administrators."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import require_roles
from community_platform_api.app.schemas.content import AuditLogEntry
from community_platform_api.app.services.audit_service import AuditService

router = APIRouter()


@router.get("/logs", response_model=List[AuditLogEntry])
async def list_audit_logs(
    user_id: Optional[int] = Query(None, description="Acting user"),
    object_type: Optional[str] = Query(None, description="chat_group, ticket, banner, ..."),
    action: Optional[str] = Query(None, description="create, update, delete or clear"),
    start_date: Optional[str] = Query(None, description="ISO date, inclusive"),
    end_date: Optional[str] = Query(None, description="ISO date, inclusive"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> List[AuditLogEntry]:
    return await AuditService.list_logs(
        user_id=user_id,
        object_type=object_type,
        action=action,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
