"""
Business logic for one‑to‑one private conversations.

Any user can open a conversation with any other user.  A pair of users
has at most one conversation: each row stores the pair in ascending
order (``user_low_id``, ``user_high_id``) under a UNIQUE constraint, so
resolving (A, B) and (B, A) always lands on the same row, even when two
requests race to create it.
"""

import logging
import sqlite3
from typing import List, Optional

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from community_platform_api.app.core.roles import is_moderator
from community_platform_api.app.schemas.private_chat import (
    ConversationSummary,
    PrivateConversationRead,
    PrivateMessageRead,
)
from community_platform_api.app.services.audit_service import AuditService
from community_platform_api.app.services.chat_service import clean_content
from community_platform_api.app.services.user_service import fetch_profiles

logger = logging.getLogger(__name__)

CONVERSATION_COLUMNS = "id, participant1_id, participant2_id, last_message_at, created_at"
MESSAGE_COLUMNS = "id, conversation_id, user_id, content, created_at"


def pair_key(user_a: int, user_b: int) -> tuple:
    """Order-independent key for a pair of users."""
    return (min(user_a, user_b), max(user_a, user_b))


def row_to_conversation(row: sqlite3.Row) -> PrivateConversationRead:
    return PrivateConversationRead(
        id=row["id"],
        participant1_id=row["participant1_id"],
        participant2_id=row["participant2_id"],
        last_message_at=row["last_message_at"],
        created_at=row["created_at"],
    )


def _messages_with_senders(cursor: sqlite3.Cursor, rows: List[sqlite3.Row]) -> List[PrivateMessageRead]:
    profiles = fetch_profiles(cursor, (row["user_id"] for row in rows))
    return [
        PrivateMessageRead(
            id=row["id"],
            conversation_id=row["conversation_id"],
            user_id=row["user_id"],
            content=row["content"],
            created_at=row["created_at"],
            sender=profiles.get(row["user_id"]),
        )
        for row in rows
    ]


class PrivateChatService:
    """Service for private conversations and their messages."""

    @classmethod
    def _find_by_pair(cls, cursor: sqlite3.Cursor, user_a: int, user_b: int) -> Optional[sqlite3.Row]:
        low, high = pair_key(user_a, user_b)
        return cursor.execute(
            f"SELECT {CONVERSATION_COLUMNS} FROM private_conversations "
            "WHERE user_low_id = ? AND user_high_id = ?",
            (low, high),
        ).fetchone()

    @classmethod
    async def resolve_conversation(cls, participant_id: int, current_user: dict) -> PrivateConversationRead:
        """Return the conversation between the requester and
        ``participant_id``, creating it on first use.

        An existing conversation is returned unchanged.  A new one has
        the requester as ``participant1``.

        Raises
        ------
        ValidationError
            If ``participant_id`` is the requester.
        NotFoundError
            If ``participant_id`` names no user.
        """
        requester_id = current_user["user_id"]
        if participant_id == requester_id:
            raise ValidationError("You cannot start a conversation with yourself")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            target = cursor.execute("SELECT id FROM users WHERE id = ?", (participant_id,)).fetchone()
            if not target:
                raise NotFoundError(f"User {participant_id} not found")
            existing = cls._find_by_pair(cursor, requester_id, participant_id)
            if existing:
                return row_to_conversation(existing)
            low, high = pair_key(requester_id, participant_id)
            try:
                cursor.execute(
                    "INSERT INTO private_conversations "
                    "(participant1_id, participant2_id, user_low_id, user_high_id) VALUES (?, ?, ?, ?)",
                    (requester_id, participant_id, low, high),
                )
                conn.commit()
            except sqlite3.IntegrityError:
                # Created concurrently by the other participant
                conn.rollback()
                existing = cls._find_by_pair(cursor, requester_id, participant_id)
                return row_to_conversation(existing)
            conversation_id = cursor.lastrowid
            row = cursor.execute(
                f"SELECT {CONVERSATION_COLUMNS} FROM private_conversations WHERE id = ?",
                (conversation_id,),
            ).fetchone()
        finally:
            conn.close()
        logger.info(
            "User %s opened private conversation %s with user %s",
            requester_id,
            conversation_id,
            participant_id,
        )
        return row_to_conversation(row)

    @classmethod
    async def list_conversations(cls, current_user: dict) -> List[ConversationSummary]:
        """Inbox: the requester's conversations, most recently active first."""
        user_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            rows = cursor.execute(
                f"SELECT {CONVERSATION_COLUMNS} FROM private_conversations "
                "WHERE participant1_id = ? OR participant2_id = ? "
                "ORDER BY last_message_at DESC, id DESC",
                (user_id, user_id),
            ).fetchall()
            profile_ids = set()
            for row in rows:
                profile_ids.update((row["participant1_id"], row["participant2_id"]))
            profiles = fetch_profiles(cursor, profile_ids)
            summaries = []
            for row in rows:
                last = cursor.execute(
                    f"SELECT {MESSAGE_COLUMNS} FROM private_messages WHERE conversation_id = ? "
                    "ORDER BY created_at DESC, id DESC LIMIT 1",
                    (row["id"],),
                ).fetchone()
                summaries.append(
                    ConversationSummary(
                        **row_to_conversation(row).model_dump(),
                        participant1=profiles.get(row["participant1_id"]),
                        participant2=profiles.get(row["participant2_id"]),
                        last_message=_messages_with_senders(cursor, [last])[0] if last else None,
                    )
                )
            return summaries
        finally:
            conn.close()

    @classmethod
    def _fetch_for_participant(cls, cursor: sqlite3.Cursor, conversation_id: int, user_id: int) -> sqlite3.Row:
        row = cursor.execute(
            f"SELECT {CONVERSATION_COLUMNS} FROM private_conversations WHERE id = ?",
            (conversation_id,),
        ).fetchone()
        if not row:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        if user_id not in (row["participant1_id"], row["participant2_id"]):
            raise PermissionDeniedError("You are not a participant in this conversation")
        return row

    @classmethod
    async def list_messages(cls, conversation_id: int, current_user: dict) -> List[PrivateMessageRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_for_participant(cursor, conversation_id, current_user["user_id"])
            rows = cursor.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM private_messages WHERE conversation_id = ? "
                "ORDER BY created_at ASC, id ASC",
                (conversation_id,),
            ).fetchall()
            return _messages_with_senders(cursor, rows)
        finally:
            conn.close()

    @classmethod
    async def send_message(cls, conversation_id: int, content: str, current_user: dict) -> PrivateMessageRead:
        """Post a message and bump the conversation's ``last_message_at``."""
        text = clean_content(content)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._fetch_for_participant(cursor, conversation_id, current_user["user_id"])
            cursor.execute(
                "INSERT INTO private_messages (conversation_id, user_id, content) VALUES (?, ?, ?)",
                (conversation_id, current_user["user_id"], text),
            )
            message_id = cursor.lastrowid
            row = cursor.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM private_messages WHERE id = ?", (message_id,)
            ).fetchone()
            cursor.execute(
                "UPDATE private_conversations SET last_message_at = ? WHERE id = ?",
                (row["created_at"], conversation_id),
            )
            conn.commit()
            message = _messages_with_senders(cursor, [row])[0]
        except (NotFoundError, PermissionDeniedError):
            raise
        except Exception as e:
            conn.rollback()
            logger.error("Failed to send private message to conversation %s: %s", conversation_id, e)
            raise
        finally:
            conn.close()
        logger.debug("User %s sent private message %s", current_user["user_id"], message_id)
        return message

    @classmethod
    def _fetch_message(cls, cursor: sqlite3.Cursor, message_id: int) -> sqlite3.Row:
        row = cursor.execute(
            f"SELECT {MESSAGE_COLUMNS} FROM private_messages WHERE id = ?", (message_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Message {message_id} not found")
        return row

    @classmethod
    async def edit_message(cls, message_id: int, content: str, current_user: dict) -> PrivateMessageRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._fetch_message(cursor, message_id)
            if row["user_id"] != current_user["user_id"]:
                raise PermissionDeniedError("You can only edit your own messages")
            text = clean_content(content)
            cursor.execute("UPDATE private_messages SET content = ? WHERE id = ?", (text, message_id))
            conn.commit()
            message = _messages_with_senders(cursor, [cls._fetch_message(cursor, message_id)])[0]
        finally:
            conn.close()
        logger.info("User %s edited private message %s", current_user["user_id"], message_id)
        return message

    @classmethod
    async def delete_message(cls, message_id: int, current_user: dict) -> None:
        """Delete a private message as its sender or as a moderator."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._fetch_message(cursor, message_id)
            if row["user_id"] != current_user["user_id"] and not is_moderator(current_user["role"]):
                raise PermissionDeniedError("You can only delete your own messages")
            cursor.execute("DELETE FROM private_messages WHERE id = ?", (message_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted private message %s", current_user["user_id"], message_id)
        await AuditService.record(
            user_id=current_user["user_id"],
            action="delete",
            object_type="private_message",
            object_id=message_id,
            details={"conversation_id": row["conversation_id"], "sender_id": row["user_id"]},
        )
