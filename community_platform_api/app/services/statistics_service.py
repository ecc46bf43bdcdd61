"""
Service layer for platform statistics shown on the dashboard.

All queries are read‑only counts.
"""

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.schemas.settings import PlatformStats


class StatisticsService:
    """Aggregated counts across the platform."""

    @classmethod
    async def overview(cls) -> PlatformStats:
        """Return totals of users, events, group chat messages and tickets."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            users_count = cursor.execute("SELECT COUNT(*) FROM users").fetchone()[0]
            events_count = cursor.execute("SELECT COUNT(*) FROM events").fetchone()[0]
            messages_count = cursor.execute("SELECT COUNT(*) FROM chat_messages").fetchone()[0]
            tickets_count = cursor.execute("SELECT COUNT(*) FROM tickets").fetchone()[0]
            return PlatformStats(
                total_users=users_count,
                total_events=events_count,
                total_messages=messages_count,
                total_tickets=tickets_count,
            )
        finally:
            conn.close()
