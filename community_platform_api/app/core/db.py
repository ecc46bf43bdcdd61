"""
SQLite storage for the whole platform.

Every service opens its own short-lived connection with
``get_connection``.  ``init_db`` runs at startup and brings the schema
up to date from the numbered ``MIGRATIONS`` list, remembering applied
versions in the ``migrations`` table.

Chat tables use millisecond timestamps so that messages and inbox
entries written within the same second still sort deterministically;
ties are broken by primary key.

Author and sender columns carry no foreign key to ``users``: content
outlives the account that created it, and readers render a missing
author as ``null``.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


def get_database_path() -> str:
    """Absolute path of the database file; a relative ``DATABASE_URL``
    is taken relative to the package directory."""
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # community_platform_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """New connection with ``sqlite3.Row`` rows and foreign keys on."""
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit when the block exits cleanly, always close."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users, events, public chat and support tickets
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            display_name TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'USER',
            avatar TEXT,
            level INTEGER NOT NULL DEFAULT 1,
            is_online INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            description TEXT,
            agency_name TEXT NOT NULL,
            agency_logo TEXT,
            participant1_name TEXT,
            participant1_avatar TEXT,
            participant2_name TEXT,
            participant2_avatar TEXT,
            participant_count INTEGER NOT NULL DEFAULT 0,
            participants TEXT,
            scheduled_at TIMESTAMP NOT NULL,
            is_live INTEGER NOT NULL DEFAULT 0,
            created_by INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- ``participants`` is a JSON list of user ids and is only set for
        -- private groups.
        CREATE TABLE IF NOT EXISTS chat_groups (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            required_role TEXT NOT NULL DEFAULT 'USER',
            is_private INTEGER NOT NULL DEFAULT 0,
            participants TEXT,
            created_by INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
        );

        CREATE TABLE IF NOT EXISTS chat_messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            group_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            content TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            FOREIGN KEY(group_id) REFERENCES chat_groups(id)
        );
        CREATE INDEX IF NOT EXISTS idx_chat_messages_group ON chat_messages(group_id);

        CREATE TABLE IF NOT EXISTS tickets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            subject TEXT NOT NULL,
            message TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'open',
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
        );
        CREATE INDEX IF NOT EXISTS idx_tickets_user_id ON tickets(user_id);

        CREATE TABLE IF NOT EXISTS announcements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            content TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_by INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
        );

        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            type TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER,
            action TEXT NOT NULL,
            object_type TEXT,
            object_id INTEGER,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            details TEXT
        );
        """,
    ),
    # Migration 2: one-to-one private conversations
    (
        2,
        """
        -- ``user_low_id``/``user_high_id`` hold the participant pair in
        -- ascending order so the UNIQUE constraint covers both orderings.
        CREATE TABLE IF NOT EXISTS private_conversations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            participant1_id INTEGER NOT NULL,
            participant2_id INTEGER NOT NULL,
            user_low_id INTEGER NOT NULL,
            user_high_id INTEGER NOT NULL,
            last_message_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            UNIQUE(user_low_id, user_high_id)
        );
        CREATE INDEX IF NOT EXISTS idx_private_conversations_p1 ON private_conversations(participant1_id);
        CREATE INDEX IF NOT EXISTS idx_private_conversations_p2 ON private_conversations(participant2_id);

        CREATE TABLE IF NOT EXISTS private_messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            conversation_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            content TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            FOREIGN KEY(conversation_id) REFERENCES private_conversations(id)
        );
        CREATE INDEX IF NOT EXISTS idx_private_messages_conversation ON private_messages(conversation_id);
        """,
    ),
    # Migration 3: management console content
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS banners (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT,
            description TEXT,
            image_url TEXT,
            cta_label TEXT,
            cta_url TEXT,
            animation_type TEXT NOT NULL DEFAULT 'fade',
            is_active INTEGER NOT NULL DEFAULT 1,
            display_order INTEGER NOT NULL DEFAULT 0,
            created_by INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS embedded_sites (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            category TEXT NOT NULL,
            url TEXT NOT NULL,
            image_url TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            display_order INTEGER NOT NULL DEFAULT 0,
            created_by INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS vip_apps (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            image_url TEXT NOT NULL DEFAULT '',
            download_url TEXT NOT NULL,
            version TEXT NOT NULL DEFAULT '',
            size TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
        );
        """,
    ),
]


def init_db() -> None:
    """Apply every migration newer than the recorded schema version.

    Schema changes go at the end of ``MIGRATIONS`` under the next
    version number; existing entries are never edited.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
