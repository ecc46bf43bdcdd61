"""
Business logic for users.

Covers self‑registration, password login, profile edits and the admin
console's user management.  Password hashes stay inside this module:
every method returns ``UserPublic``.  The module also provides
``fetch_profiles``, which the chat services use to join messages with
their senders.
"""

import logging
import sqlite3
from typing import Dict, Iterable, List, Optional

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.core.errors import NotFoundError, ValidationError
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import hash_password, verify_password
from community_platform_api.app.schemas.user import UserPublic
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, username, display_name, role, avatar, level, is_online, created_at"

# Fields an update may touch, per caller.
PROFILE_FIELDS = {"display_name", "avatar"}
ADMIN_FIELDS = {"display_name", "role", "level"}


def row_to_user(row: sqlite3.Row) -> UserPublic:
    return UserPublic(
        id=row["id"],
        username=row["username"],
        display_name=row["display_name"],
        role=row["role"],
        avatar=row["avatar"],
        level=row["level"],
        is_online=bool(row["is_online"]),
        created_at=row["created_at"],
    )


def fetch_profiles(cursor: sqlite3.Cursor, user_ids: Iterable[int]) -> Dict[int, UserPublic]:
    """Load public profiles for ``user_ids`` in one query.

    Ids with no matching row (deleted accounts) are absent from the
    result.
    """
    ids = sorted(set(user_ids))
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    rows = cursor.execute(
        f"SELECT {USER_COLUMNS} FROM users WHERE id IN ({placeholders})",
        tuple(ids),
    ).fetchall()
    return {row["id"]: row_to_user(row) for row in rows}


class UserService:
    """Service for user accounts."""

    @classmethod
    async def create_user(
        cls,
        username: str,
        password: str,
        display_name: str,
        role: Role = Role.USER,
        level: int = 1,
        is_online: bool = False,
        actor_id: Optional[int] = None,
    ) -> UserPublic:
        """Create a user and return it.

        Self‑registration uses the defaults (USER, level 1).  The admin
        console passes an explicit role and level.  Raises
        ``ValidationError`` if the username is already taken.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            exists = cursor.execute(
                "SELECT id FROM users WHERE username = ?", (username,)
            ).fetchone()
            if exists:
                raise ValidationError("Username is already taken")
            try:
                cursor.execute(
                    "INSERT INTO users (username, password, display_name, role, level, is_online) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (username, hash_password(password), display_name, Role(role).value, level, int(is_online)),
                )
            except sqlite3.IntegrityError:
                # Lost a race with a concurrent registration of the same name
                raise ValidationError("Username is already taken")
            user_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        logger.info("Created user %s (%s) with role %s", user_id, username, Role(role).value)
        await AuditService.record(
            user_id=actor_id,
            action="create",
            object_type="user",
            object_id=user_id,
            details={"username": username, "role": Role(role).value},
        )
        return row_to_user(row)

    @classmethod
    async def authenticate(cls, username: str, password: str) -> Optional[UserPublic]:
        """Check credentials; on success mark the user online and return it."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, password FROM users WHERE username = ?", (username,)
            ).fetchone()
            if not row or not verify_password(password, row["password"]):
                logger.info("Failed login attempt for %s", username)
                return None
            cursor.execute("UPDATE users SET is_online = 1 WHERE id = ?", (row["id"],))
            conn.commit()
            user_row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (row["id"],)
            ).fetchone()
            logger.info("User %s logged in", row["id"])
            return row_to_user(user_row)
        finally:
            conn.close()

    @classmethod
    async def set_online(cls, user_id: int, is_online: bool) -> None:
        conn = get_connection()
        try:
            conn.execute("UPDATE users SET is_online = ? WHERE id = ?", (int(is_online), user_id))
            conn.commit()
        finally:
            conn.close()

    @classmethod
    async def list_users(cls) -> List[UserPublic]:
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id ASC").fetchall()
            return [row_to_user(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_user(cls, user_id: int) -> UserPublic:
        """Return a user or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"User {user_id} not found")
        return row_to_user(row)

    @classmethod
    async def update_user(
        cls,
        user_id: int,
        updates: dict,
        allowed_fields: Iterable[str],
        actor_id: Optional[int] = None,
    ) -> UserPublic:
        """Apply ``updates`` restricted to ``allowed_fields``.

        Keys outside ``allowed_fields`` and ``None`` values are ignored.
        Raises ``NotFoundError`` if the user does not exist.
        """
        allowed = set(allowed_fields)
        changes = {k: v for k, v in updates.items() if k in allowed and v is not None}
        if "role" in changes:
            changes["role"] = Role(changes["role"]).value
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise NotFoundError(f"User {user_id} not found")
            if changes:
                fields = ", ".join(f"{key} = ?" for key in changes)
                cursor.execute(
                    f"UPDATE users SET {fields} WHERE id = ?",
                    (*changes.values(), user_id),
                )
                conn.commit()
            updated = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        if changes:
            logger.info("User %s updated by %s: %s", user_id, actor_id, sorted(changes))
            await AuditService.record(
                user_id=actor_id,
                action="update",
                object_type="user",
                object_id=user_id,
                details=changes,
            )
        return row_to_user(updated)

    @classmethod
    async def delete_user(cls, user_id: int, actor_id: int) -> None:
        """Delete a user account.

        Administrators cannot delete themselves.  Content the user
        authored (messages, tickets) is kept and shows a ``null``
        author from then on.
        """
        if user_id == actor_id:
            raise ValidationError("You cannot delete your own account")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"User {user_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted by %s", user_id, actor_id)
        await AuditService.record(
            user_id=actor_id,
            action="delete",
            object_type="user",
            object_id=user_id,
        )
