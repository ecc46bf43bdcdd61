"""
Business logic for chat groups and group messages.

Groups are either public, gated by a minimum role, or private, visible
only to the user ids listed in ``participants``.  ``visible_groups``
implements that rule as a pure function so it can be used (and tested)
without a database.

Message permissions:

* anyone who can see a group may read it and post to it;
* only the sender may edit a message, whatever the editor's role;
* the sender or any moderator may delete a message;
* moderators may clear a group, administrators may delete it.
"""

import json
import logging
import sqlite3
from typing import Iterable, List, Optional, Tuple

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from community_platform_api.app.core.roles import Role, has_min_role, is_moderator
from community_platform_api.app.schemas.chat import (
    ChatGroupCreate,
    ChatGroupRead,
    ChatMessageRead,
)
from community_platform_api.app.services.audit_service import AuditService
from community_platform_api.app.services.user_service import fetch_profiles

logger = logging.getLogger(__name__)

GROUP_COLUMNS = "id, name, description, required_role, is_private, participants, created_by, created_at"
MESSAGE_COLUMNS = "id, group_id, user_id, content, created_at"

PRIVATE_GROUP_DESCRIPTION = "Private chat"


def clean_content(content: Optional[str]) -> str:
    """Return ``content`` stripped of surrounding whitespace.

    Raises ``ValidationError`` if nothing is left.
    """
    text = (content or "").strip()
    if not text:
        raise ValidationError("Message content must not be empty")
    return text


def is_group_visible(group: ChatGroupRead, user_id: int, role) -> bool:
    if group.is_private:
        return user_id in (group.participants or [])
    return has_min_role(role, group.required_role)


def visible_groups(groups: Iterable[ChatGroupRead], user_id: int, role) -> List[ChatGroupRead]:
    """Filter ``groups`` down to those the given user may see.

    A private group is visible iff ``user_id`` is one of its
    participants.  A public group is visible iff the user's role ranks
    at least as high as the group's ``required_role``.  Input order is
    preserved.
    """
    return [group for group in groups if is_group_visible(group, user_id, role)]


def row_to_group(row: sqlite3.Row) -> ChatGroupRead:
    participants = json.loads(row["participants"]) if row["participants"] else None
    return ChatGroupRead(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        required_role=row["required_role"],
        is_private=bool(row["is_private"]),
        participants=participants,
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


def _messages_with_senders(cursor: sqlite3.Cursor, rows: List[sqlite3.Row]) -> List[ChatMessageRead]:
    profiles = fetch_profiles(cursor, (row["user_id"] for row in rows))
    return [
        ChatMessageRead(
            id=row["id"],
            group_id=row["group_id"],
            user_id=row["user_id"],
            content=row["content"],
            created_at=row["created_at"],
            user=profiles.get(row["user_id"]),
        )
        for row in rows
    ]


class ChatService:
    """Service for chat groups and their messages."""

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    @classmethod
    async def list_groups(cls, current_user: dict) -> List[ChatGroupRead]:
        """Return the groups visible to ``current_user`` in creation order."""
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {GROUP_COLUMNS} FROM chat_groups ORDER BY id ASC").fetchall()
        finally:
            conn.close()
        groups = [row_to_group(row) for row in rows]
        return visible_groups(groups, current_user["user_id"], current_user["role"])

    @classmethod
    def _fetch_group(cls, cursor: sqlite3.Cursor, group_id: int) -> ChatGroupRead:
        row = cursor.execute(
            f"SELECT {GROUP_COLUMNS} FROM chat_groups WHERE id = ?", (group_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Chat group {group_id} not found")
        return row_to_group(row)

    @classmethod
    def _fetch_visible_group(cls, cursor: sqlite3.Cursor, group_id: int, current_user: dict) -> ChatGroupRead:
        group = cls._fetch_group(cursor, group_id)
        if not is_group_visible(group, current_user["user_id"], current_user["role"]):
            raise PermissionDeniedError("You do not have access to this chat group")
        return group

    @classmethod
    async def create_group(cls, data: ChatGroupCreate, current_user: dict) -> ChatGroupRead:
        """Create a public group gated by ``data.required_role``.

        The name is trimmed and must not be empty.  A blank description
        is stored as ``NULL``.
        """
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("Group name is required")
        description = (data.description or "").strip() or None
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO chat_groups (name, description, required_role, is_private, created_by) "
                "VALUES (?, ?, ?, 0, ?)",
                (name, description, Role(data.required_role).value, current_user["user_id"]),
            )
            group_id = cursor.lastrowid
            conn.commit()
            group = cls._fetch_group(cursor, group_id)
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create chat group: %s", e)
            raise
        finally:
            conn.close()
        logger.info("User %s created chat group %s (%s)", current_user["user_id"], group.id, group.name)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="create",
            object_type="chat_group",
            object_id=group.id,
            details={"name": group.name, "required_role": group.required_role.value},
        )
        return group

    @classmethod
    async def resolve_private_group(
        cls,
        target_user_id: Optional[int],
        current_user: dict,
    ) -> Tuple[ChatGroupRead, bool]:
        """Find or create the moderator's private group with a target user.

        Returns ``(group, created)``.  An existing private group whose
        participant set is exactly {requester, target} is reused.

        Raises
        ------
        PermissionDeniedError
            If the requester is not a moderator or administrator.
        ValidationError
            If no target is given or the target is the requester.
        NotFoundError
            If the target user does not exist.
        """
        if not is_moderator(current_user["role"]):
            raise PermissionDeniedError("Only moderators can open private groups")
        if target_user_id is None:
            raise ValidationError("target_user_id is required")
        requester_id = current_user["user_id"]
        if target_user_id == requester_id:
            raise ValidationError("You cannot open a private group with yourself")

        wanted = {requester_id, target_user_id}
        conn = get_connection()
        try:
            cursor = conn.cursor()
            target = cursor.execute(
                "SELECT id, display_name FROM users WHERE id = ?", (target_user_id,)
            ).fetchone()
            if not target:
                raise NotFoundError(f"User {target_user_id} not found")
            rows = cursor.execute(
                f"SELECT {GROUP_COLUMNS} FROM chat_groups WHERE is_private = 1 ORDER BY id ASC"
            ).fetchall()
            for row in rows:
                group = row_to_group(row)
                if set(group.participants or []) == wanted:
                    return group, False

            name = f"{current_user['display_name']} - {target['display_name']}"
            cursor.execute(
                "INSERT INTO chat_groups (name, description, required_role, is_private, participants, created_by) "
                "VALUES (?, ?, ?, 1, ?, ?)",
                (
                    name,
                    PRIVATE_GROUP_DESCRIPTION,
                    Role.USER.value,
                    json.dumps([requester_id, target_user_id]),
                    requester_id,
                ),
            )
            group_id = cursor.lastrowid
            conn.commit()
            group = cls._fetch_group(cursor, group_id)
        except NotFoundError:
            raise
        except Exception as e:
            conn.rollback()
            logger.error("Failed to open private group with user %s: %s", target_user_id, e)
            raise
        finally:
            conn.close()
        logger.info("User %s opened private group %s with user %s", requester_id, group.id, target_user_id)
        await AuditService.record(
            user_id=requester_id,
            action="create",
            object_type="chat_group",
            object_id=group.id,
            details={"private": True, "participants": [requester_id, target_user_id]},
        )
        return group, True

    @classmethod
    async def delete_group(cls, group_id: int, current_user: dict) -> None:
        """Delete a group and all of its messages in one transaction."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_group(cursor, group_id)
            cursor.execute("DELETE FROM chat_messages WHERE group_id = ?", (group_id,))
            removed = cursor.rowcount
            cursor.execute("DELETE FROM chat_groups WHERE id = ?", (group_id,))
            conn.commit()
        except NotFoundError:
            raise
        except Exception as e:
            conn.rollback()
            logger.error("Failed to delete chat group %s: %s", group_id, e)
            raise
        finally:
            conn.close()
        logger.info("User %s deleted chat group %s and %s messages", current_user["user_id"], group_id, removed)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="chat_group",
            object_id=group_id,
            details={"messages_deleted": removed},
        )

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    @classmethod
    async def list_messages(cls, group_id: int, current_user: dict) -> List[ChatMessageRead]:
        """Return a group's messages oldest first, each with its sender."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_visible_group(cursor, group_id, current_user)
            rows = cursor.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE group_id = ? "
                "ORDER BY created_at ASC, id ASC",
                (group_id,),
            ).fetchall()
            return _messages_with_senders(cursor, rows)
        finally:
            conn.close()

    @classmethod
    async def send_message(cls, group_id: int, content: str, current_user: dict) -> ChatMessageRead:
        text = clean_content(content)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_visible_group(cursor, group_id, current_user)
            cursor.execute(
                "INSERT INTO chat_messages (group_id, user_id, content) VALUES (?, ?, ?)",
                (group_id, current_user["user_id"], text),
            )
            message_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE id = ?", (message_id,)
            ).fetchone()
            message = _messages_with_senders(cursor, [row])[0]
        finally:
            conn.close()
        logger.debug("User %s posted message %s to group %s", current_user["user_id"], message_id, group_id)
        return message

    @classmethod
    def _fetch_message(cls, cursor: sqlite3.Cursor, message_id: int) -> sqlite3.Row:
        row = cursor.execute(
            f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE id = ?", (message_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Message {message_id} not found")
        return row

    @classmethod
    async def edit_message(cls, message_id: int, content: str, current_user: dict) -> ChatMessageRead:
        """Replace a message's content.  Only the sender may edit;
        ``created_at`` is left as it was."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._fetch_message(cursor, message_id)
            if row["user_id"] != current_user["user_id"]:
                raise PermissionDeniedError("You can only edit your own messages")
            text = clean_content(content)
            cursor.execute("UPDATE chat_messages SET content = ? WHERE id = ?", (text, message_id))
            conn.commit()
            updated = cls._fetch_message(cursor, message_id)
            message = _messages_with_senders(cursor, [updated])[0]
        finally:
            conn.close()
        logger.info("User %s edited message %s", current_user["user_id"], message_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="update",
            object_type="chat_message",
            object_id=message_id,
        )
        return message

    @classmethod
    async def delete_message(cls, message_id: int, current_user: dict) -> None:
        """Delete a message as its sender or as a moderator."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._fetch_message(cursor, message_id)
            if row["user_id"] != current_user["user_id"] and not is_moderator(current_user["role"]):
                raise PermissionDeniedError("You can only delete your own messages")
            cursor.execute("DELETE FROM chat_messages WHERE id = ?", (message_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted message %s", current_user["user_id"], message_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="chat_message",
            object_id=message_id,
            details={"group_id": row["group_id"], "sender_id": row["user_id"]},
        )

    @classmethod
    async def clear_messages(cls, group_id: int, current_user: dict) -> int:
        """Delete every message in a group and return how many were removed."""
        if not is_moderator(current_user["role"]):
            raise PermissionDeniedError("Only moderators can clear chat groups")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_group(cursor, group_id)
            cursor.execute("DELETE FROM chat_messages WHERE group_id = ?", (group_id,))
            deleted = cursor.rowcount
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s cleared %s messages from group %s", current_user["user_id"], deleted, group_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="clear",
            object_type="chat_group",
            object_id=group_id,
            details={"deleted": deleted},
        )
        return deleted
