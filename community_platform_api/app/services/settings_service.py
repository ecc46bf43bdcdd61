"""
Service layer for site settings.

Settings live in the key/value ``settings`` table.  Each row has a
``key``, a ``value`` stored as text and a ``type``: ``json`` for
structured values, ``str`` for plain text.  The public settings of
the platform (film and music URLs, featured members, branding) are thin
typed wrappers over this store.
"""

import json
import logging
from typing import Any, Optional

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.schemas.settings import (
    BrandingSettings,
    BrandingUpdate,
    FeaturedMembers,
    FilmSettings,
    MusicSettings,
)
from community_platform_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

FILM_URL_KEY = "film_url"
MUSIC_URL_KEY = "music_url"
FEATURED_MEMBERS_KEY = "featured_members"
BRANDING_KEY = "branding"


class SettingsService:
    """Service for reading and writing site settings."""

    @classmethod
    async def get_value(cls, key: str, default: Any = None) -> Any:
        """Return the deserialized value of ``key`` or ``default``.

        A stored value that cannot be converted back to its declared
        type is logged and treated as missing.
        """
        conn = get_connection()
        try:
            row = conn.execute("SELECT value, type FROM settings WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if not row:
            return default
        try:
            return cls._deserialize(row["value"], row["type"])
        except ValueError as e:
            logger.warning("Unreadable value for setting %s: %s", key, e)
            return default

    @classmethod
    async def set_value(cls, key: str, value: Any, type_str: str, user_id: Optional[int] = None) -> None:
        """Insert or replace a setting."""
        serialized = cls._serialize(value, type_str)
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO settings (key, value, type) VALUES (?, ?, ?)"
                " ON CONFLICT(key) DO UPDATE SET value = excluded.value, type = excluded.type",
                (key, serialized, type_str),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Setting %s updated by %s", key, user_id)
        await AuditService.record(
            user_id=user_id,
            action="update",
            object_type="setting",
            details={"key": key},
        )

    # ------------------------------------------------------------------
    # Typed settings
    # ------------------------------------------------------------------

    @classmethod
    async def get_film(cls) -> FilmSettings:
        return FilmSettings(film_url=await cls.get_value(FILM_URL_KEY, ""))

    @classmethod
    async def set_film(cls, data: FilmSettings, user_id: int) -> FilmSettings:
        await cls.set_value(FILM_URL_KEY, data.film_url, "str", user_id)
        return data

    @classmethod
    async def get_music(cls) -> MusicSettings:
        return MusicSettings(music_url=await cls.get_value(MUSIC_URL_KEY, ""))

    @classmethod
    async def set_music(cls, data: MusicSettings, user_id: int) -> MusicSettings:
        await cls.set_value(MUSIC_URL_KEY, data.music_url, "str", user_id)
        return data

    @classmethod
    async def get_featured_members(cls) -> FeaturedMembers:
        """Members of the month; all ``None`` if unset or unreadable."""
        stored = await cls.get_value(FEATURED_MEMBERS_KEY)
        if not isinstance(stored, dict):
            return FeaturedMembers()
        return FeaturedMembers(
            member1=stored.get("member1"),
            member2=stored.get("member2"),
            member3=stored.get("member3"),
        )

    @classmethod
    async def set_featured_members(cls, data: FeaturedMembers, user_id: int) -> FeaturedMembers:
        await cls.set_value(FEATURED_MEMBERS_KEY, data.model_dump(), "json", user_id)
        return data

    @classmethod
    async def get_branding(cls) -> BrandingSettings:
        """Site name and flag toggle, with defaults filled in."""
        stored = await cls.get_value(BRANDING_KEY)
        defaults = BrandingSettings()
        if not isinstance(stored, dict):
            return defaults
        return BrandingSettings(
            site_name=stored.get("site_name") or defaults.site_name,
            show_flag=bool(stored.get("show_flag", defaults.show_flag)),
        )

    @classmethod
    async def set_branding(cls, data: BrandingUpdate, user_id: int) -> BrandingSettings:
        """Merge ``data`` into the current branding.  A blank site name
        resets it to the default."""
        current = await cls.get_branding()
        site_name = current.site_name
        if data.site_name is not None:
            site_name = data.site_name.strip() or BrandingSettings().site_name
        show_flag = current.show_flag if data.show_flag is None else data.show_flag
        branding = BrandingSettings(site_name=site_name, show_flag=show_flag)
        await cls.set_value(BRANDING_KEY, branding.model_dump(), "json", user_id)
        return branding

    @staticmethod
    def _serialize(value: Any, type_str: str) -> str:
        """``json`` values are JSON-encoded; everything else is stored as text."""
        if type_str == "json":
            return json.dumps(value)
        return str(value)

    @staticmethod
    def _deserialize(value: str, type_str: str) -> Any:
        """Inverse of ``_serialize``.  Raises ``ValueError`` for unreadable
        JSON."""
        if type_str == "json":
            return json.loads(value)
        return value
