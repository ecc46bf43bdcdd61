"""
Business logic for the dashboard banner carousel.
"""

import logging
from typing import List

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError
from community_platform_api.app.schemas.content import BannerCreate, BannerRead, BannerUpdate
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

BANNER_COLUMNS = (
    "id, title, description, image_url, cta_label, cta_url, animation_type, "
    "is_active, display_order, created_by, created_at"
)


def _row_to_banner(row) -> BannerRead:
    return BannerRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        image_url=row["image_url"],
        cta_label=row["cta_label"],
        cta_url=row["cta_url"],
        animation_type=row["animation_type"],
        is_active=bool(row["is_active"]),
        display_order=row["display_order"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class BannerService:
    """Service for carousel banners."""

    @classmethod
    async def list_banners(cls, active_only: bool = False) -> List[BannerRead]:
        """List banners by display order.  The public carousel passes
        ``active_only=True``; the admin console sees all of them."""
        query = f"SELECT {BANNER_COLUMNS} FROM banners"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY display_order ASC, id ASC"
        conn = get_connection()
        try:
            return [_row_to_banner(row) for row in conn.execute(query).fetchall()]
        finally:
            conn.close()

    @classmethod
    async def create_banner(cls, data: BannerCreate, current_user: dict) -> BannerRead:
        """Create a banner.  Without an explicit ``display_order`` it is
        placed after the last existing banner."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            display_order = data.display_order
            if display_order is None:
                row = cursor.execute("SELECT MAX(display_order) AS max_order FROM banners").fetchone()
                display_order = (row["max_order"] + 1) if row["max_order"] is not None else 0
            cursor.execute(
                """
                INSERT INTO banners (title, description, image_url, cta_label, cta_url,
                                     animation_type, is_active, display_order, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    data.description,
                    data.image_url,
                    data.cta_label,
                    data.cta_url,
                    data.animation_type.value,
                    int(data.is_active),
                    display_order,
                    current_user["user_id"],
                ),
            )
            banner_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {BANNER_COLUMNS} FROM banners WHERE id = ?", (banner_id,)).fetchone()
        finally:
            conn.close()
        logger.info("User %s created banner %s", current_user["user_id"], banner_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="banner",
            object_id=banner_id,
        )
        return _row_to_banner(row)

    @classmethod
    async def update_banner(cls, banner_id: int, data: BannerUpdate, current_user: dict) -> BannerRead:
        updates = data.model_dump(exclude_unset=True)
        values = {}
        for key, value in updates.items():
            if value is None and key in {"animation_type", "is_active", "display_order"}:
                continue
            if key == "animation_type":
                value = value.value
            elif isinstance(value, bool):
                value = int(value)
            values[key] = value
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT id FROM banners WHERE id = ?", (banner_id,)).fetchone():
                raise NotFoundError(f"Banner {banner_id} not found")
            if values:
                fields = ", ".join(f"{key} = ?" for key in values)
                cursor.execute(f"UPDATE banners SET {fields} WHERE id = ?", (*values.values(), banner_id))
                conn.commit()
            row = cursor.execute(f"SELECT {BANNER_COLUMNS} FROM banners WHERE id = ?", (banner_id,)).fetchone()
        finally:
            conn.close()
        if values:
            logger.info("User %s updated banner %s", current_user["user_id"], banner_id)
            await AuditService.record(
                user_id=current_user["user_id"],
                action="update",
                object_type="banner",
                object_id=banner_id,
                details={"fields": sorted(values)},
            )
        return _row_to_banner(row)

    @classmethod
    async def delete_banner(cls, banner_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM banners WHERE id = ?", (banner_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Banner {banner_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted banner %s", current_user["user_id"], banner_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="banner",
            object_id=banner_id,
        )
