"""
Business logic for embedded third‑party sites (web games, tools and the
like shown inside the member area).
"""

import logging
from typing import List

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError
from community_platform_api.app.schemas.content import (
    EmbeddedSiteCreate,
    EmbeddedSiteRead,
    EmbeddedSiteUpdate,
)
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

SITE_COLUMNS = "id, name, description, category, url, image_url, is_active, display_order, created_by, created_at"
NOT_NULL_FIELDS = {"name", "category", "url", "is_active", "display_order"}


def _row_to_site(row) -> EmbeddedSiteRead:
    return EmbeddedSiteRead(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        category=row["category"],
        url=row["url"],
        image_url=row["image_url"],
        is_active=bool(row["is_active"]),
        display_order=row["display_order"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class EmbeddedSiteService:
    @classmethod
    async def list_sites(cls, active_only: bool = False) -> List[EmbeddedSiteRead]:
        query = f"SELECT {SITE_COLUMNS} FROM embedded_sites"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY display_order ASC, id ASC"
        conn = get_connection()
        try:
            return [_row_to_site(row) for row in conn.execute(query).fetchall()]
        finally:
            conn.close()

    @classmethod
    async def create_site(cls, data: EmbeddedSiteCreate, current_user: dict) -> EmbeddedSiteRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO embedded_sites (name, description, category, url, image_url,
                                            is_active, display_order, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.name,
                    data.description,
                    data.category,
                    data.url,
                    data.image_url,
                    int(data.is_active),
                    data.display_order,
                    current_user["user_id"],
                ),
            )
            site_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {SITE_COLUMNS} FROM embedded_sites WHERE id = ?", (site_id,)).fetchone()
        finally:
            conn.close()
        logger.info("User %s added embedded site %s (%s)", current_user["user_id"], site_id, data.url)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="embedded_site",
            object_id=site_id,
            details={"name": data.name, "url": data.url},
        )
        return _row_to_site(row)

    @classmethod
    async def update_site(cls, site_id: int, data: EmbeddedSiteUpdate, current_user: dict) -> EmbeddedSiteRead:
        values = {}
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in NOT_NULL_FIELDS:
                continue
            values[key] = int(value) if isinstance(value, bool) else value
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT id FROM embedded_sites WHERE id = ?", (site_id,)).fetchone():
                raise NotFoundError(f"Embedded site {site_id} not found")
            if values:
                fields = ", ".join(f"{key} = ?" for key in values)
                cursor.execute(f"UPDATE embedded_sites SET {fields} WHERE id = ?", (*values.values(), site_id))
                conn.commit()
            row = cursor.execute(f"SELECT {SITE_COLUMNS} FROM embedded_sites WHERE id = ?", (site_id,)).fetchone()
        finally:
            conn.close()
        if values:
            logger.info("User %s updated embedded site %s", current_user["user_id"], site_id)
            await AuditService.record(
                user_id=current_user["user_id"],
                action="update",
                object_type="embedded_site",
                object_id=site_id,
                details={"fields": sorted(values)},
            )
        return _row_to_site(row)

    @classmethod
    async def delete_site(cls, site_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM embedded_sites WHERE id = ?", (site_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Embedded site {site_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted embedded site %s", current_user["user_id"], site_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="embedded_site",
            object_id=site_id,
        )
