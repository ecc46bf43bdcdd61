"""
Business logic for support tickets.

Members open tickets and see only their own.  Moderators and
administrators see every ticket and move them through the status
workflow.
"""

import logging
from typing import List

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError, ValidationError
from community_platform_api.app.core.roles import is_moderator
from community_platform_api.app.schemas.ticket import TicketCreate, TicketRead, TicketUpdate
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

TICKET_COLUMNS = "id, user_id, subject, message, status, created_at"
RECENT_TICKET_LIMIT = 10


def _row_to_ticket(row) -> TicketRead:
    return TicketRead(
        id=row["id"],
        user_id=row["user_id"],
        subject=row["subject"],
        message=row["message"],
        status=row["status"],
        created_at=row["created_at"],
    )


class TicketService:
    """Service for support tickets."""

    @classmethod
    async def create_ticket(cls, data: TicketCreate, current_user: dict) -> TicketRead:
        """Open a ticket on behalf of ``current_user``.

        Subject and message are trimmed and must not be blank.
        """
        subject = data.subject.strip()
        message = data.message.strip()
        if not subject or not message:
            raise ValidationError("Subject and message are required")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO tickets (user_id, subject, message, status) VALUES (?, ?, ?, 'open')",
                (current_user["user_id"], subject, message),
            )
            ticket_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {TICKET_COLUMNS} FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create ticket: %s", e)
            raise
        finally:
            conn.close()
        logger.info("User %s opened ticket %s", current_user["user_id"], ticket_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="ticket",
            object_id=ticket_id,
            details={"subject": subject},
        )
        return _row_to_ticket(row)

    @classmethod
    async def list_tickets(cls, current_user: dict) -> List[TicketRead]:
        """List tickets newest first.

        Moderators and administrators see all tickets; everyone else
        sees only the tickets they opened.
        """
        conn = get_connection()
        try:
            if is_moderator(current_user["role"]):
                rows = conn.execute(
                    f"SELECT {TICKET_COLUMNS} FROM tickets ORDER BY created_at DESC, id DESC"
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {TICKET_COLUMNS} FROM tickets WHERE user_id = ? ORDER BY created_at DESC, id DESC",
                    (current_user["user_id"],),
                ).fetchall()
            return [_row_to_ticket(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def recent_tickets(cls, limit: int = RECENT_TICKET_LIMIT) -> List[TicketRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {TICKET_COLUMNS} FROM tickets ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return [_row_to_ticket(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def update_ticket(cls, ticket_id: int, data: TicketUpdate, current_user: dict) -> TicketRead:
        """Update a ticket's status and/or text.  Only provided fields change.

        A provided subject or message is trimmed and must not be blank.
        """
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if "status" in updates:
            updates["status"] = updates["status"].value
        for key in ("subject", "message"):
            if key in updates:
                updates[key] = updates[key].strip()
                if not updates[key]:
                    raise ValidationError(f"Ticket {key} must not be blank")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
            if not row:
                raise NotFoundError(f"Ticket {ticket_id} not found")
            if updates:
                fields = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(f"UPDATE tickets SET {fields} WHERE id = ?", (*updates.values(), ticket_id))
                conn.commit()
            row = cursor.execute(f"SELECT {TICKET_COLUMNS} FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
        finally:
            conn.close()
        if updates:
            logger.info("User %s updated ticket %s: %s", current_user["user_id"], ticket_id, updates)
            await AuditService.record(
                user_id=current_user["user_id"],
                action="update",
                object_type="ticket",
                object_id=ticket_id,
                details=updates,
            )
        return _row_to_ticket(row)

    @classmethod
    async def delete_ticket(cls, ticket_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM tickets WHERE id = ?", (ticket_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Ticket {ticket_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted ticket %s", current_user["user_id"], ticket_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="ticket",
            object_id=ticket_id,
        )
