"""
Business logic for the VIP download area.
"""

import logging
from typing import List

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError, ValidationError
from community_platform_api.app.schemas.content import VipAppCreate, VipAppRead
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

APP_COLUMNS = "id, name, description, image_url, download_url, version, size, created_at"


def _row_to_app(row) -> VipAppRead:
    return VipAppRead(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        image_url=row["image_url"],
        download_url=row["download_url"],
        version=row["version"],
        size=row["size"],
        created_at=row["created_at"],
    )


class VipAppService:
    @classmethod
    async def list_apps(cls) -> List[VipAppRead]:
        """Return the apps newest first."""
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {APP_COLUMNS} FROM vip_apps ORDER BY created_at DESC, id DESC").fetchall()
            return [_row_to_app(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def create_app(cls, data: VipAppCreate, current_user: dict) -> VipAppRead:
        """Add an app.  ``name`` and ``download_url`` must not be blank."""
        name = (data.name or "").strip()
        download_url = (data.download_url or "").strip()
        if not name or not download_url:
            raise ValidationError("Name and download URL are required")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO vip_apps (name, description, image_url, download_url, version, size) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (name, data.description, data.image_url, download_url, data.version, data.size),
            )
            app_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {APP_COLUMNS} FROM vip_apps WHERE id = ?", (app_id,)).fetchone()
        finally:
            conn.close()
        logger.info("User %s added VIP app %s (%s)", current_user["user_id"], app_id, name)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="vip_app",
            object_id=app_id,
            details={"name": name},
        )
        return _row_to_app(row)

    @classmethod
    async def delete_app(cls, app_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM vip_apps WHERE id = ?", (app_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"VIP app {app_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted VIP app %s", current_user["user_id"], app_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="vip_app",
            object_id=app_id,
        )
