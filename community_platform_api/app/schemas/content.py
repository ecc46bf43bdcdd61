"""
Pydantic schemas for the management console's plain content types:
announcements, banners, embedded sites and VIP apps, plus the audit log
entries that changes to them produce.
"""

from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


def _check_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("A valid http(s) URL is required")
    return value


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

class AnnouncementCreate(BaseModel):
    content: str = Field(..., min_length=1)


class AnnouncementRead(BaseModel):
    id: int
    content: str
    is_active: bool
    created_by: int
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Banners
# ---------------------------------------------------------------------------

class BannerAnimation(str, Enum):
    NONE = "none"
    FADE = "fade"
    SLIDE = "slide"
    ZOOM = "zoom"


class BannerCreate(BaseModel):
    """Carousel banner.  Every text field is optional so an image‑only
    banner is valid.  When ``display_order`` is omitted the banner is
    placed after the existing ones."""

    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    cta_label: Optional[str] = None
    cta_url: Optional[str] = None
    animation_type: BannerAnimation = BannerAnimation.FADE
    is_active: bool = True
    display_order: Optional[int] = None


class BannerUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    cta_label: Optional[str] = None
    cta_url: Optional[str] = None
    animation_type: Optional[BannerAnimation] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


class BannerRead(BaseModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    cta_label: Optional[str] = None
    cta_url: Optional[str] = None
    animation_type: BannerAnimation
    is_active: bool
    display_order: int
    created_by: int
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Embedded third‑party sites
# ---------------------------------------------------------------------------

class EmbeddedSiteCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)
    url: str
    image_url: Optional[str] = None
    is_active: bool = True
    display_order: int = 0

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_http_url(value)


class EmbeddedSiteUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_http_url(value)


class EmbeddedSiteRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    url: str
    image_url: Optional[str] = None
    is_active: bool
    display_order: int
    created_by: int
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# VIP apps
# ---------------------------------------------------------------------------

class VipAppCreate(BaseModel):
    # Blank name/download_url are rejected by the service with a 400.
    name: Optional[str] = None
    description: str = ""
    image_url: str = ""
    download_url: Optional[str] = None
    version: str = ""
    size: str = ""


class VipAppRead(BaseModel):
    id: int
    name: str
    description: str
    image_url: str
    download_url: str
    version: str
    size: str
    created_at: Optional[str] = None


class AuditLogEntry(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    object_type: Optional[str] = None
    object_id: Optional[int] = None
    timestamp: str
    # Decoded JSON, or the raw text when it is not valid JSON.
    details: Optional[Any] = None
