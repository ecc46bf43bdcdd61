"""Management console: events, announcements, banners, embedded sites,
VIP apps, settings, statistics and the audit log."""

from community_platform_api.app.core.db import get_connection

from conftest import API, create_group

EVENT = {
    "title": "Weekly PK Contest",
    "agency_name": "Elite Agency",
    "participant1_name": "StarQueen",
    "participant2_name": "GoldenKing",
    "scheduled_at": "2030-01-02T20:00:00",
}


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def test_event_lifecycle(client, users):
    admin = users["admin"]["headers"]
    created = client.post(f"{API}/events", json=EVENT, headers=admin)
    assert created.status_code == 201
    event = created.json()
    assert event["participants"] == []
    assert event["is_live"] is False

    updated = client.patch(
        f"{API}/events/{event['id']}",
        json={"is_live": True, "participants": ["Ali", "Veli"], "participant_count": 2, "title": None},
        headers=admin,
    ).json()
    assert updated["is_live"] is True
    assert updated["participants"] == ["Ali", "Veli"]
    assert updated["title"] == EVENT["title"]

    assert client.get(f"{API}/events/{event['id']}", headers=users["user"]["headers"]).status_code == 200
    assert client.delete(f"{API}/events/{event['id']}", headers=admin).status_code == 204
    assert client.get(f"{API}/events/{event['id']}", headers=admin).status_code == 404


def test_events_are_listed_by_schedule(client, users):
    admin = users["admin"]["headers"]
    client.post(f"{API}/events", json={**EVENT, "title": "Later", "scheduled_at": "2030-05-01T10:00:00"}, headers=admin)
    client.post(f"{API}/events", json={**EVENT, "title": "Sooner", "scheduled_at": "2030-01-01T10:00:00"}, headers=admin)
    listed = client.get(f"{API}/events", headers=users["user"]["headers"]).json()
    assert [e["title"] for e in listed] == ["Sooner", "Later"]


def test_event_management_is_admin_only(client, users):
    assert client.post(f"{API}/events", json=EVENT, headers=users["mod"]["headers"]).status_code == 403
    assert client.get(f"{API}/events").status_code == 401


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

def test_new_announcement_deactivates_previous(client, users):
    admin = users["admin"]["headers"]
    assert client.get(f"{API}/announcements/active").json() is None
    first = client.post(f"{API}/admin/announcements", json={"content": "first"}, headers=admin).json()
    second = client.post(f"{API}/admin/announcements", json={"content": "second"}, headers=admin).json()

    active = client.get(f"{API}/announcements/active").json()
    assert active["id"] == second["id"]
    listed = {a["id"]: a["is_active"] for a in client.get(f"{API}/announcements").json()}
    assert listed == {first["id"]: False, second["id"]: True}


def test_announcement_admin_routes(client, users):
    response = client.post(f"{API}/admin/announcements", json={"content": "x"}, headers=users["mod"]["headers"])
    assert response.status_code == 403
    assert client.delete(f"{API}/admin/announcements/9999", headers=users["admin"]["headers"]).status_code == 404


# ---------------------------------------------------------------------------
# Banners
# ---------------------------------------------------------------------------

def test_banner_display_order_defaults_to_end(client, users):
    admin = users["admin"]["headers"]
    first = client.post(f"{API}/admin/banners", json={"title": "a"}, headers=admin).json()
    pinned = client.post(f"{API}/admin/banners", json={"title": "b", "display_order": 7}, headers=admin).json()
    last = client.post(f"{API}/admin/banners", json={"title": "c"}, headers=admin).json()
    assert first["display_order"] == 0
    assert pinned["display_order"] == 7
    assert last["display_order"] == 8
    assert first["animation_type"] == "fade"


def test_public_banners_are_active_only(client, users):
    admin = users["admin"]["headers"]
    shown = client.post(f"{API}/admin/banners", json={"title": "shown"}, headers=admin).json()
    hidden = client.post(f"{API}/admin/banners", json={"title": "hidden"}, headers=admin).json()
    client.patch(f"{API}/admin/banners/{hidden['id']}", json={"is_active": False}, headers=admin)
    assert [b["id"] for b in client.get(f"{API}/banners").json()] == [shown["id"]]
    assert len(client.get(f"{API}/admin/banners", headers=admin).json()) == 2
    assert client.delete(f"{API}/admin/banners/{hidden['id']}", headers=admin).status_code == 204
    assert client.patch(f"{API}/admin/banners/9999", json={"title": "x"}, headers=admin).status_code == 404


# ---------------------------------------------------------------------------
# Embedded sites
# ---------------------------------------------------------------------------

def test_embedded_sites(client, users):
    admin = users["admin"]["headers"]
    site = {"name": "Chess", "category": "games", "url": "https://chess.example.com"}
    created = client.post(f"{API}/admin/embedded-sites", json=site, headers=admin)
    assert created.status_code == 201
    site_id = created.json()["id"]

    bad = client.post(f"{API}/admin/embedded-sites", json={**site, "url": "javascript:alert(1)"}, headers=admin)
    assert bad.status_code == 422

    member = users["user"]["headers"]
    assert [s["name"] for s in client.get(f"{API}/embedded-sites", headers=member).json()] == ["Chess"]
    client.patch(f"{API}/admin/embedded-sites/{site_id}", json={"is_active": False}, headers=admin)
    assert client.get(f"{API}/embedded-sites", headers=member).json() == []
    assert client.delete(f"{API}/admin/embedded-sites/{site_id}", headers=admin).status_code == 204


# ---------------------------------------------------------------------------
# VIP apps
# ---------------------------------------------------------------------------

def test_vip_apps_require_vip_rank(client, users):
    assert client.get(f"{API}/vip/apps", headers=users["user"]["headers"]).status_code == 403
    for role in ("vip", "mod", "admin"):
        assert client.get(f"{API}/vip/apps", headers=users[role]["headers"]).status_code == 200


def test_vip_app_requires_name_and_download_url(client, users):
    admin = users["admin"]["headers"]
    assert client.post(f"{API}/vip/apps", json={"name": "Tool"}, headers=admin).status_code == 400
    assert client.post(f"{API}/vip/apps", json={"name": " ", "download_url": "https://x"}, headers=admin).status_code == 400
    created = client.post(
        f"{API}/vip/apps",
        json={"name": "Tool", "download_url": "https://example.com/tool.apk", "version": "1.2"},
        headers=admin,
    )
    assert created.status_code == 201
    assert client.post(f"{API}/vip/apps", json={"name": "x"}, headers=users["vip"]["headers"]).status_code == 403
    app_id = created.json()["id"]
    assert client.delete(f"{API}/vip/apps/{app_id}", headers=admin).status_code == 204
    assert client.delete(f"{API}/vip/apps/{app_id}", headers=admin).status_code == 404


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_settings_defaults(client, users):
    assert client.get(f"{API}/settings/branding").json() == {"site_name": "JOY", "show_flag": True}
    assert client.get(f"{API}/settings/featured-members").json() == {"member1": None, "member2": None, "member3": None}
    assert client.get(f"{API}/settings/music").json() == {"music_url": ""}
    assert client.get(f"{API}/settings/film").status_code == 401
    assert client.get(f"{API}/settings/film", headers=users["user"]["headers"]).json() == {"film_url": ""}


def test_settings_updates(client, users):
    admin = users["admin"]["headers"]
    client.post(f"{API}/settings/film", json={"film_url": "https://films.example.com/1"}, headers=admin)
    client.post(f"{API}/settings/featured-members", json={"member1": "Ali", "member2": "Veli"}, headers=admin)
    client.post(f"{API}/settings/branding", json={"show_flag": False}, headers=admin)

    assert client.get(f"{API}/settings/film", headers=admin).json()["film_url"] == "https://films.example.com/1"
    assert client.get(f"{API}/settings/featured-members").json() == {"member1": "Ali", "member2": "Veli", "member3": None}
    assert client.get(f"{API}/settings/branding").json() == {"site_name": "JOY", "show_flag": False}

    renamed = client.post(f"{API}/settings/branding", json={"site_name": "Stars"}, headers=admin).json()
    assert renamed == {"site_name": "Stars", "show_flag": False}
    reset = client.post(f"{API}/settings/branding", json={"site_name": "  "}, headers=admin).json()
    assert reset["site_name"] == "JOY"


def test_settings_writes_are_admin_only(client, users):
    response = client.post(f"{API}/settings/music", json={"music_url": "x"}, headers=users["mod"]["headers"])
    assert response.status_code == 403


def test_unreadable_settings_fall_back_to_defaults(client, users):
    conn = get_connection()
    try:
        conn.execute("INSERT INTO settings (key, value, type) VALUES ('branding', '{broken', 'json')")
        conn.execute("INSERT INTO settings (key, value, type) VALUES ('featured_members', 'nope', 'json')")
        conn.commit()
    finally:
        conn.close()
    assert client.get(f"{API}/settings/branding").json() == {"site_name": "JOY", "show_flag": True}
    assert client.get(f"{API}/settings/featured-members").json()["member1"] is None


# ---------------------------------------------------------------------------
# Statistics and audit
# ---------------------------------------------------------------------------

def test_stats(client, users):
    admin = users["admin"]["headers"]
    group = create_group(client, admin)
    client.post(f"{API}/chat/groups/{group['id']}/messages", json={"content": "hi"}, headers=admin)
    client.post(f"{API}/tickets", json={"subject": "s", "message": "m"}, headers=admin)
    stats = client.get(f"{API}/stats", headers=users["user"]["headers"]).json()
    assert stats == {"total_users": 5, "total_events": 0, "total_messages": 1, "total_tickets": 1}


def test_audit_log_records_admin_actions(client, users):
    admin = users["admin"]
    group = create_group(client, admin["headers"], "Audited")
    client.delete(f"{API}/chat/groups/{group['id']}", headers=admin["headers"])

    assert client.get(f"{API}/audit/logs", headers=users["mod"]["headers"]).status_code == 403
    logs = client.get(
        f"{API}/audit/logs",
        params={"object_type": "chat_group"},
        headers=admin["headers"],
    ).json()
    assert {log["action"] for log in logs} == {"create", "delete"}
    assert all(log["user_id"] == admin["id"] for log in logs)
    assert all(log["object_id"] == group["id"] for log in logs)
