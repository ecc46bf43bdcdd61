"""
Audit trail of changes made through the management console and chat
moderation.

Every service that creates, updates or deletes something calls
``AuditService.record`` once the change is committed.  The trail is best
effort: if the audit row cannot be written the failure is logged and the
change itself stands.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, List, Optional

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.schemas.content import AuditLogEntry

logger = logging.getLogger(__name__)

# Query parameter -> SQL condition used by ``list_logs``.
_FILTERS = (
    ("user_id", "user_id = ?"),
    ("object_type", "object_type = ?"),
    ("action", "action = ?"),
    ("start_date", "timestamp >= ?"),
    ("end_date", "timestamp <= ?"),
)


def _decode_details(raw: Optional[str]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class AuditService:
    @classmethod
    async def log(
        cls,
        user_id: Optional[int],
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Write one audit row.

        ``user_id`` is ``None`` for system actions such as the startup
        seed.  ``action`` is one of ``create``, ``update``, ``delete`` or
        ``clear``; ``object_type`` names the table-level entity, e.g.
        ``chat_group`` or ``ticket``.  ``details`` is stored as JSON.
        """
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO audit_logs (user_id, action, object_type, object_id, details) "
                "VALUES (?, ?, ?, ?, ?)",
                (user_id, action, object_type, object_id, json.dumps(details) if details else None),
            )
            conn.commit()
        finally:
            conn.close()

    @classmethod
    async def record(cls, *args: Any, **kwargs: Any) -> None:
        """Same arguments as ``log``; database errors become a warning."""
        try:
            await cls.log(*args, **kwargs)
        except sqlite3.Error as e:
            logger.warning("Audit entry %s not written: %s", args[:3] or kwargs, e)

    @classmethod
    async def list_logs(
        cls,
        user_id: Optional[int] = None,
        object_type: Optional[str] = None,
        action: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[AuditLogEntry]:
        """Newest first.  Dates are ISO strings compared against the
        ``timestamp`` column."""
        values = {
            "user_id": user_id,
            "object_type": object_type,
            "action": action,
            "start_date": start_date,
            "end_date": end_date,
        }
        conditions = [sql for name, sql in _FILTERS if values[name] not in (None, "")]
        params: List[Any] = [values[name] for name, _ in _FILTERS if values[name] not in (None, "")]

        query = "SELECT * FROM audit_logs"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        conn = get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
        return [
            AuditLogEntry(
                id=row["id"],
                user_id=row["user_id"],
                action=row["action"],
                object_type=row["object_type"],
                object_id=row["object_id"],
                timestamp=str(row["timestamp"]),
                details=_decode_details(row["details"]),
            )
            for row in rows
        ]
