"""
Business logic for live‑event listings.

Events are plain records managed by administrators and shown to every
signed‑in member in schedule order.  ``participants`` is stored as a
JSON list of names.
"""

import json
import logging
from typing import List

from community_platform_api.app.core.errors import NotFoundError
from community_platform_api.app.schemas.event import EventCreate, EventRead, EventUpdate
from community_platform_api.app.services.audit_service import AuditService

EVENT_COLUMNS = (
    "id, title, description, agency_name, agency_logo, participant1_name, participant1_avatar, "
    "participant2_name, participant2_avatar, participant_count, participants, scheduled_at, "
    "is_live, created_by, created_at"
)

# Columns that cannot be cleared by sending null.
NOT_NULL_FIELDS = {"title", "agency_name", "participant_count", "scheduled_at", "is_live"}


def _row_to_event(row) -> EventRead:
    return EventRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        agency_name=row["agency_name"],
        agency_logo=row["agency_logo"],
        participant1_name=row["participant1_name"],
        participant1_avatar=row["participant1_avatar"],
        participant2_name=row["participant2_name"],
        participant2_avatar=row["participant2_avatar"],
        participant_count=row["participant_count"],
        participants=json.loads(row["participants"]) if row["participants"] else [],
        scheduled_at=row["scheduled_at"],
        is_live=bool(row["is_live"]),
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class EventService:
    """Service for event listings."""

    @classmethod
    async def create_event(cls, data: EventCreate, current_user: dict) -> EventRead:
        """Create a new event and return it."""
        logger = logging.getLogger(__name__)
        from community_platform_api.app.core.db import get_connection
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO events (title, description, agency_name, agency_logo,
                                    participant1_name, participant1_avatar,
                                    participant2_name, participant2_avatar,
                                    participants, scheduled_at, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    data.description,
                    data.agency_name,
                    data.agency_logo,
                    data.participant1_name,
                    data.participant1_avatar,
                    data.participant2_name,
                    data.participant2_avatar,
                    json.dumps([]),
                    data.scheduled_at.isoformat(),
                    current_user["user_id"],
                ),
            )
            event_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create event: %s", e)
            raise
        finally:
            conn.close()
        logger.info("User %s created event %s '%s'", current_user["user_id"], event_id, data.title)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="event",
            object_id=event_id,
            details={"title": data.title},
        )
        return _row_to_event(row)

    @classmethod
    async def list_events(cls) -> List[EventRead]:
        """Return all events ordered by scheduled time, soonest first."""
        from community_platform_api.app.core.db import get_connection
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {EVENT_COLUMNS} FROM events ORDER BY scheduled_at ASC, id ASC"
            ).fetchall()
            return [_row_to_event(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_event(cls, event_id: int) -> EventRead:
        from community_platform_api.app.core.db import get_connection
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Event {event_id} not found")
        return _row_to_event(row)

    @classmethod
    async def update_event(cls, event_id: int, data: EventUpdate, current_user: dict) -> EventRead:
        """Update fields of an existing event.

        Only fields present in the request are set.  Raises
        ``NotFoundError`` if the event does not exist.
        """
        logger = logging.getLogger(__name__)
        updates = data.model_dump(exclude_unset=True)
        values = {}
        for key, value in updates.items():
            if value is None and key in NOT_NULL_FIELDS:
                continue
            if key == "participants":
                value = json.dumps(value or [])
            elif key == "scheduled_at" and value is not None:
                value = value.isoformat()
            elif isinstance(value, bool):
                value = int(value)
            values[key] = value
        from community_platform_api.app.core.db import get_connection
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not row:
                raise NotFoundError(f"Event {event_id} not found")
            if values:
                fields = ", ".join(f"{key} = ?" for key in values)
                cursor.execute(f"UPDATE events SET {fields} WHERE id = ?", (*values.values(), event_id))
                conn.commit()
            row = cursor.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        finally:
            conn.close()
        if values:
            logger.info("User %s updated event %s: %s", current_user["user_id"], event_id, sorted(values))
            await AuditService.record(
                user_id=current_user["user_id"],
                action="update",
                object_type="event",
                object_id=event_id,
                details={"fields": sorted(values)},
            )
        return _row_to_event(row)

    @classmethod
    async def delete_event(cls, event_id: int, current_user: dict) -> None:
        logger = logging.getLogger(__name__)
        from community_platform_api.app.core.db import get_connection
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM events WHERE id = ?", (event_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Event {event_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted event %s", current_user["user_id"], event_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="event",
            object_id=event_id,
        )
