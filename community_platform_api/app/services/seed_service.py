"""
Demo data for a fresh installation.

``seed_demo_data`` runs at startup when ``SEED_DEMO_DATA`` is enabled.
It only acts on an empty ``users`` table, so restarting the service
never duplicates the demo content.
"""

import json
import logging
from datetime import datetime, timedelta, timezone

from community_platform_api.app.core.db import get_cursor
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import hash_password

logger = logging.getLogger(__name__)

DEMO_USERS = [
    # username, password, display name, role, level, online
    ("admin", "admin123", "Platform Admin", Role.ADMIN, 50, True),
    ("moderator", "mod123", "Moderator", Role.MOD, 30, True),
    ("vipuser", "vip123", "VIP Uye", Role.VIP, 20, False),
]

DEMO_GROUPS = [
    ("Genel Sohbet", "Herkese acik genel sohbet grubu", Role.USER),
    ("VIP Lounge", "VIP uyelere ozel sohbet alani", Role.VIP),
    ("Yonetim Sohbeti", "Admin ve moderator ozel sohbet alani", Role.MOD),
]

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={}"

WELCOME_ANNOUNCEMENT = (
    "Platforma hos geldiniz! Bu hafta ozel etkinlikler ve surprizler sizi bekliyor. "
    "VIP uyelik avantajlarindan yararlanin!"
)


def seed_demo_data() -> bool:
    """Populate an empty database with demo users, groups, events and
    an announcement.  Returns ``True`` if anything was inserted."""
    with get_cursor() as cursor:
        if cursor.execute("SELECT COUNT(*) FROM users").fetchone()[0] > 0:
            return False

        user_ids = {}
        for username, password, display_name, role, level, online in DEMO_USERS:
            cursor.execute(
                "INSERT INTO users (username, password, display_name, role, level, is_online) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (username, hash_password(password), display_name, role.value, level, int(online)),
            )
            user_ids[username] = cursor.lastrowid
        admin_id = user_ids["admin"]

        for name, description, required_role in DEMO_GROUPS:
            cursor.execute(
                "INSERT INTO chat_groups (name, description, required_role, is_private, created_by) "
                "VALUES (?, ?, ?, 0, ?)",
                (name, description, required_role.value, admin_id),
            )

        now = datetime.now(timezone.utc)
        events = [
            (
                "Haftalik PK Yarismasi",
                "Her hafta duzenlenen buyuk PK etkinligi. Oduller ve surprizler sizi bekliyor!",
                "Elite Agency",
                "StarQueen",
                "GoldenKing",
                24,
                ["Ali", "Veli", "Ayse", "Fatma", "Mehmet"],
                now + timedelta(days=2),
                False,
                admin_id,
            ),
            (
                "VIP Ozel Yayin",
                "VIP uyelere ozel canli yayin etkinligi",
                "Premium Productions",
                "DiamondStar",
                "RubyQueen",
                12,
                ["Crown", "Star", "Diamond"],
                now + timedelta(hours=1),
                True,
                user_ids["moderator"],
            ),
        ]
        for title, description, agency, p1, p2, count, participants, scheduled_at, is_live, created_by in events:
            cursor.execute(
                """
                INSERT INTO events (title, description, agency_name, participant1_name, participant1_avatar,
                                    participant2_name, participant2_avatar, participant_count, participants,
                                    scheduled_at, is_live, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    agency,
                    p1,
                    AVATAR_URL.format(p1),
                    p2,
                    AVATAR_URL.format(p2),
                    count,
                    json.dumps(participants),
                    scheduled_at.isoformat(),
                    int(is_live),
                    created_by,
                ),
            )

        cursor.execute(
            "INSERT INTO announcements (content, is_active, created_by) VALUES (?, 1, ?)",
            (WELCOME_ANNOUNCEMENT, admin_id),
        )
    logger.info("Seeded demo data: %s users, %s groups", len(DEMO_USERS), len(DEMO_GROUPS))
    logger.warning(
        "Demo accounts %s were created with default passwords; change them before going live",
        ", ".join(user[0] for user in DEMO_USERS),
    )
    return True
