"""
Pydantic schemas for the site settings exposed to clients.

Each schema maps to one row of the key/value ``settings`` table.
Branding and featured members are stored as JSON blobs.
"""

from typing import Optional

from pydantic import BaseModel


class FilmSettings(BaseModel):
    film_url: str = ""


class MusicSettings(BaseModel):
    music_url: str = ""


class FeaturedMembers(BaseModel):
    """Members of the month shown on the dashboard, in podium order."""

    member1: Optional[str] = None
    member2: Optional[str] = None
    member3: Optional[str] = None


class BrandingSettings(BaseModel):
    site_name: str = "JOY"
    show_flag: bool = True


class BrandingUpdate(BaseModel):
    # A blank site name falls back to the default.
    site_name: Optional[str] = None
    show_flag: Optional[bool] = None


class PlatformStats(BaseModel):
    total_users: int
    total_events: int
    total_messages: int
    total_tickets: int
