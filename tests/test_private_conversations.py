import pytest

from community_platform_api.app.core.db import get_connection
from community_platform_api.app.services.private_chat_service import PrivateChatService, pair_key

from conftest import API, count_rows


def _resolve(client, requester, target_id):
    return client.post(
        f"{API}/private-conversations",
        json={"participant_id": target_id},
        headers=requester["headers"],
    )


def _send(client, conversation_id, sender, content):
    return client.post(
        f"{API}/private-conversations/{conversation_id}/messages",
        json={"content": content},
        headers=sender["headers"],
    )


def _inbox(client, user):
    return client.get(f"{API}/private-conversations", headers=user["headers"]).json()


@pytest.fixture
def conversation(client, users):
    response = _resolve(client, users["user"], users["other"]["id"])
    assert response.status_code == 200
    return response.json()


def test_resolve_is_idempotent_in_both_directions(client, users):
    alice, bob = users["user"], users["other"]
    first = _resolve(client, alice, bob["id"]).json()
    again = _resolve(client, alice, bob["id"]).json()
    reverse = _resolve(client, bob, alice["id"]).json()
    assert first["id"] == again["id"] == reverse["id"]
    assert first["participant1_id"] == alice["id"]
    assert first["participant2_id"] == bob["id"]
    assert reverse == first
    assert count_rows("private_conversations") == 1


def test_resolve_recovers_when_pair_is_created_concurrently(client, users, monkeypatch):
    alice, bob = users["user"], users["other"]
    find_by_pair = PrivateChatService._find_by_pair
    calls = []

    def find_after_bob_wins(cursor, user_a, user_b):
        calls.append((user_a, user_b))
        if len(calls) > 1:
            return find_by_pair(cursor, user_a, user_b)
        # Bob opens the conversation between our lookup and our insert
        low, high = pair_key(bob["id"], alice["id"])
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO private_conversations "
                "(participant1_id, participant2_id, user_low_id, user_high_id) VALUES (?, ?, ?, ?)",
                (bob["id"], alice["id"], low, high),
            )
            conn.commit()
        finally:
            conn.close()
        return None

    monkeypatch.setattr(PrivateChatService, "_find_by_pair", staticmethod(find_after_bob_wins))
    response = _resolve(client, alice, bob["id"])
    assert response.status_code == 200
    conversation = response.json()
    assert conversation["participant1_id"] == bob["id"]
    assert conversation["participant2_id"] == alice["id"]
    assert len(calls) == 2
    assert count_rows("private_conversations") == 1


def test_resolve_errors(client, users):
    alice = users["user"]
    assert _resolve(client, alice, alice["id"]).status_code == 400
    assert _resolve(client, alice, 9999).status_code == 404


def test_participants_exchange_messages(client, users, conversation):
    alice, bob = users["user"], users["other"]
    assert _send(client, conversation["id"], alice, "hi bob").status_code == 201
    assert _send(client, conversation["id"], bob, "hi alice").status_code == 201
    listed = client.get(
        f"{API}/private-conversations/{conversation['id']}/messages",
        headers=bob["headers"],
    ).json()
    assert [m["content"] for m in listed] == ["hi bob", "hi alice"]
    assert [m["sender"]["username"] for m in listed] == ["alice", "bob"]


@pytest.mark.parametrize("outsider", ["vip", "mod", "admin"])
def test_outsiders_cannot_read_or_send(client, users, conversation, outsider):
    headers = users[outsider]["headers"]
    url = f"{API}/private-conversations/{conversation['id']}/messages"
    assert client.get(url, headers=headers).status_code == 403
    assert client.post(url, json={"content": "hello"}, headers=headers).status_code == 403


def test_unknown_conversation(client, users):
    url = f"{API}/private-conversations/9999/messages"
    assert client.get(url, headers=users["user"]["headers"]).status_code == 404


def test_blank_private_message_is_rejected(client, users, conversation):
    assert _send(client, conversation["id"], users["user"], "   ").status_code == 400


def test_sending_bumps_last_message_at(client, users, conversation):
    message = _send(client, conversation["id"], users["user"], "ping").json()
    inbox = client.get(f"{API}/private-conversations", headers=users["other"]["headers"]).json()
    assert inbox[0]["id"] == conversation["id"]
    assert inbox[0]["last_message_at"] == message["created_at"]
    assert inbox[0]["last_message"]["content"] == "ping"


def test_inbox_lists_own_conversations_with_profiles(client, users, conversation):
    alice = users["user"]
    _resolve(client, alice, users["vip"]["id"])
    # Not involving alice
    _resolve(client, users["mod"], users["admin"]["id"])

    inbox = client.get(f"{API}/private-conversations", headers=alice["headers"]).json()
    assert len(inbox) == 2
    for entry in inbox:
        assert alice["id"] in (entry["participant1_id"], entry["participant2_id"])
        assert entry["participant1"]["id"] == entry["participant1_id"]
        assert entry["participant2"]["id"] == entry["participant2_id"]
        assert entry["last_message"] is None


def test_inbox_orders_by_latest_activity(client, users):
    alice = users["user"]
    older = _resolve(client, alice, users["other"]["id"]).json()
    newer = _resolve(client, alice, users["vip"]["id"]).json()
    conn = get_connection()
    try:
        conn.execute("UPDATE private_conversations SET last_message_at = '2000-01-01 00:00:00.000'")
        conn.commit()
    finally:
        conn.close()
    assert [entry["id"] for entry in _inbox(client, alice)] == [newer["id"], older["id"]]
    # Activity on the older conversation moves it to the top
    _send(client, older["id"], alice, "bump")
    assert [entry["id"] for entry in _inbox(client, alice)] == [older["id"], newer["id"]]


@pytest.mark.parametrize("editor", ["other", "mod", "admin"])
def test_only_sender_edits_private_message(client, users, conversation, editor):
    message = _send(client, conversation["id"], users["user"], "mine").json()
    response = client.patch(
        f"{API}/private-messages/{message['id']}",
        json={"content": "theirs"},
        headers=users[editor]["headers"],
    )
    assert response.status_code == 403


def test_sender_edits_private_message(client, users, conversation):
    message = _send(client, conversation["id"], users["user"], "mine").json()
    response = client.patch(
        f"{API}/private-messages/{message['id']}",
        json={"content": "still mine"},
        headers=users["user"]["headers"],
    )
    assert response.status_code == 200
    assert response.json()["content"] == "still mine"
    assert response.json()["created_at"] == message["created_at"]


@pytest.mark.parametrize("deleter, expected", [("user", 204), ("other", 403), ("mod", 204), ("admin", 204)])
def test_private_message_delete_permissions(client, users, conversation, deleter, expected):
    message = _send(client, conversation["id"], users["user"], "delete?").json()
    response = client.delete(f"{API}/private-messages/{message['id']}", headers=users[deleter]["headers"])
    assert response.status_code == expected
