"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
Routers whose paths span a public and an ``/admin`` section (tickets,
announcements, banners, embedded sites, private conversations) define
their full paths internally and are included without a prefix.
"""

from fastapi import APIRouter

from .endpoints import (
    admin_users,
    announcements,
    audit,
    auth,
    banners,
    chat,
    embedded_sites,
    events,
    private_chat,
    settings,
    stats,
    tickets,
    users,
    vip,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
router.include_router(chat.router, prefix="/chat", tags=["chat"])
router.include_router(private_chat.router, tags=["private chat"])
router.include_router(tickets.router, tags=["tickets"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(announcements.router, tags=["announcements"])
router.include_router(banners.router, tags=["banners"])
router.include_router(embedded_sites.router, tags=["embedded sites"])
router.include_router(vip.router, prefix="/vip", tags=["vip"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])
router.include_router(stats.router, prefix="/stats", tags=["stats"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])
