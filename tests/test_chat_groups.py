import logging
import sqlite3

import pytest

from community_platform_api.app.core.db import get_connection

from conftest import API, count_rows, create_group


def _group_names(client, headers):
    response = client.get(f"{API}/chat/groups", headers=headers)
    assert response.status_code == 200
    return [group["name"] for group in response.json()]


def test_group_list_follows_role_rank(client, users):
    admin = users["admin"]["headers"]
    create_group(client, admin, "General", "USER")
    create_group(client, admin, "Lounge", "VIP")
    create_group(client, admin, "Staff", "MOD")
    create_group(client, admin, "Admins", "ADMIN")

    assert _group_names(client, users["user"]["headers"]) == ["General"]
    assert _group_names(client, users["vip"]["headers"]) == ["General", "Lounge"]
    assert _group_names(client, users["mod"]["headers"]) == ["General", "Lounge", "Staff"]
    assert _group_names(client, admin) == ["General", "Lounge", "Staff", "Admins"]


def test_group_list_requires_session(client, db_path):
    assert client.get(f"{API}/chat/groups").status_code == 401


@pytest.mark.parametrize("role", ["user", "vip"])
def test_only_moderators_create_groups(client, users, role):
    response = client.post(f"{API}/chat/groups", json={"name": "Mine"}, headers=users[role]["headers"])
    assert response.status_code == 403


def test_group_name_is_trimmed_and_required(client, users):
    headers = users["mod"]["headers"]
    assert client.post(f"{API}/chat/groups", json={"name": "   "}, headers=headers).status_code == 400
    group = client.post(
        f"{API}/chat/groups",
        json={"name": "  Music  ", "description": "  "},
        headers=headers,
    ).json()
    assert group["name"] == "Music"
    assert group["description"] is None
    assert group["required_role"] == "USER"
    assert group["is_private"] is False


def test_private_group_is_created_once(client, users):
    mod, alice = users["mod"], users["user"]
    first = client.post(f"{API}/chat/private", json={"target_user_id": alice["id"]}, headers=mod["headers"])
    assert first.status_code == 201
    group = first.json()
    assert group["is_private"] is True
    assert group["name"] == "Mona - Alice"
    assert group["description"] == "Private chat"
    assert sorted(group["participants"]) == sorted([mod["id"], alice["id"]])

    second = client.post(f"{API}/chat/private", json={"target_user_id": alice["id"]}, headers=mod["headers"])
    assert second.status_code == 200
    assert second.json()["id"] == group["id"]


def test_private_group_is_matched_by_participant_set(client, users):
    mod, admin = users["mod"], users["admin"]
    created = client.post(f"{API}/chat/private", json={"target_user_id": admin["id"]}, headers=mod["headers"])
    reverse = client.post(f"{API}/chat/private", json={"target_user_id": mod["id"]}, headers=admin["headers"])
    assert reverse.status_code == 200
    assert reverse.json()["id"] == created.json()["id"]


def test_private_group_visible_only_to_participants(client, users):
    mod, alice = users["mod"], users["user"]
    client.post(f"{API}/chat/private", json={"target_user_id": alice["id"]}, headers=mod["headers"])
    assert _group_names(client, alice["headers"]) == ["Mona - Alice"]
    assert _group_names(client, mod["headers"]) == ["Mona - Alice"]
    assert _group_names(client, users["admin"]["headers"]) == []
    assert _group_names(client, users["other"]["headers"]) == []


def test_private_group_errors(client, users):
    mod = users["mod"]
    url = f"{API}/chat/private"
    assert client.post(url, json={}, headers=mod["headers"]).status_code == 400
    assert client.post(url, json={"target_user_id": 9999}, headers=mod["headers"]).status_code == 404
    assert client.post(url, json={"target_user_id": mod["id"]}, headers=mod["headers"]).status_code == 400
    response = client.post(url, json={"target_user_id": users["other"]["id"]}, headers=users["user"]["headers"])
    assert response.status_code == 403


def test_failed_private_group_insert_is_logged_and_raised(client, users, caplog):
    conn = get_connection()
    try:
        conn.execute(
            "CREATE TRIGGER block_private_groups BEFORE INSERT ON chat_groups "
            "WHEN NEW.is_private = 1 BEGIN SELECT RAISE(ABORT, 'private groups disabled'); END"
        )
        conn.commit()
    finally:
        conn.close()

    url = f"{API}/chat/private"
    with caplog.at_level(logging.ERROR), pytest.raises(sqlite3.IntegrityError):
        client.post(url, json={"target_user_id": users["user"]["id"]}, headers=users["mod"]["headers"])
    assert any("Failed to open private group" in r.getMessage() for r in caplog.records)
    assert count_rows("chat_groups", "is_private = 1") == 0


def test_delete_group_cascades_to_messages(client, users):
    admin = users["admin"]["headers"]
    group = create_group(client, admin)
    other = create_group(client, admin, "Other")
    for text in ("one", "two", "three"):
        client.post(f"{API}/chat/groups/{group['id']}/messages", json={"content": text}, headers=admin)
    client.post(f"{API}/chat/groups/{other['id']}/messages", json={"content": "keep"}, headers=admin)

    response = client.delete(f"{API}/chat/groups/{group['id']}", headers=admin)
    assert response.status_code == 204
    assert count_rows("chat_messages", "group_id = ?", (group["id"],)) == 0
    assert count_rows("chat_messages", "group_id = ?", (other["id"],)) == 1
    assert _group_names(client, admin) == ["Other"]


def test_delete_group_is_admin_only(client, users):
    group = create_group(client, users["admin"]["headers"])
    response = client.delete(f"{API}/chat/groups/{group['id']}", headers=users["mod"]["headers"])
    assert response.status_code == 403


def test_delete_unknown_group(client, users):
    response = client.delete(f"{API}/chat/groups/9999", headers=users["admin"]["headers"])
    assert response.status_code == 404
