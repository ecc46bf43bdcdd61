"""
Business logic for site announcements.

At most one announcement is active at a time: publishing a new one
deactivates every other announcement in the same transaction.
"""

import logging
from typing import List, Optional

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError
from community_platform_api.app.schemas.content import AnnouncementCreate, AnnouncementRead
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

ANNOUNCEMENT_COLUMNS = "id, content, is_active, created_by, created_at"


def _row_to_announcement(row) -> AnnouncementRead:
    return AnnouncementRead(
        id=row["id"],
        content=row["content"],
        is_active=bool(row["is_active"]),
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class AnnouncementService:
    @classmethod
    async def list_announcements(cls) -> List[AnnouncementRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {ANNOUNCEMENT_COLUMNS} FROM announcements ORDER BY created_at DESC, id DESC"
            ).fetchall()
            return [_row_to_announcement(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_active(cls) -> Optional[AnnouncementRead]:
        """Return the active announcement, or ``None`` if there is none."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {ANNOUNCEMENT_COLUMNS} FROM announcements WHERE is_active = 1 "
                "ORDER BY created_at DESC, id DESC LIMIT 1"
            ).fetchone()
        finally:
            conn.close()
        return _row_to_announcement(row) if row else None

    @classmethod
    async def create_announcement(cls, data: AnnouncementCreate, current_user: dict) -> AnnouncementRead:
        """Publish an announcement and make it the only active one."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("UPDATE announcements SET is_active = 0 WHERE is_active = 1")
            cursor.execute(
                "INSERT INTO announcements (content, is_active, created_by) VALUES (?, 1, ?)",
                (data.content, current_user["user_id"]),
            )
            announcement_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(
                f"SELECT {ANNOUNCEMENT_COLUMNS} FROM announcements WHERE id = ?", (announcement_id,)
            ).fetchone()
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create announcement: %s", e)
            raise
        finally:
            conn.close()
        logger.info("User %s published announcement %s", current_user["user_id"], announcement_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="announcement",
            object_id=announcement_id,
        )
        return _row_to_announcement(row)

    @classmethod
    async def delete_announcement(cls, announcement_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM announcements WHERE id = ?", (announcement_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Announcement {announcement_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted announcement %s", current_user["user_id"], announcement_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="announcement",
            object_id=announcement_id,
        )
