import pytest

from conftest import API


def _open(client, user, subject="Login issue", message="I cannot sign in"):
    return client.post(f"{API}/tickets", json={"subject": subject, "message": message}, headers=user["headers"])


def test_open_ticket(client, users):
    response = _open(client, users["user"])
    assert response.status_code == 201
    ticket = response.json()
    assert ticket["status"] == "open"
    assert ticket["user_id"] == users["user"]["id"]


def test_blank_ticket_fields_are_rejected(client, users):
    assert _open(client, users["user"], subject="").status_code == 422
    assert _open(client, users["user"], subject="   ").status_code == 400


def test_members_see_only_their_tickets(client, users):
    _open(client, users["user"], subject="mine")
    _open(client, users["other"], subject="theirs")
    mine = client.get(f"{API}/tickets", headers=users["user"]["headers"]).json()
    assert [t["subject"] for t in mine] == ["mine"]


@pytest.mark.parametrize("role", ["mod", "admin"])
def test_staff_see_all_tickets_newest_first(client, users, role):
    _open(client, users["user"], subject="first")
    _open(client, users["other"], subject="second")
    tickets = client.get(f"{API}/tickets", headers=users[role]["headers"]).json()
    assert [t["subject"] for t in tickets] == ["second", "first"]


def test_staff_update_status(client, users):
    ticket = _open(client, users["user"]).json()
    url = f"{API}/tickets/{ticket['id']}"
    assert client.patch(url, json={"status": "resolved"}, headers=users["user"]["headers"]).status_code == 403
    response = client.patch(url, json={"status": "in_progress"}, headers=users["mod"]["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["subject"] == ticket["subject"]
    assert client.patch(url, json={"status": "archived"}, headers=users["mod"]["headers"]).status_code == 422


def test_update_rejects_blank_text(client, users):
    ticket = _open(client, users["user"]).json()
    url = f"{API}/tickets/{ticket['id']}"
    headers = users["mod"]["headers"]
    assert client.patch(url, json={"subject": "   "}, headers=headers).status_code == 400
    assert client.patch(url, json={"message": "\n\t"}, headers=headers).status_code == 400
    tickets = client.get(f"{API}/tickets", headers=headers).json()
    assert tickets[0]["subject"] == ticket["subject"]

    renamed = client.patch(url, json={"subject": "  Password reset  "}, headers=headers).json()
    assert renamed["subject"] == "Password reset"


def test_update_and_delete_unknown_ticket(client, users):
    headers = users["admin"]["headers"]
    assert client.patch(f"{API}/tickets/9999", json={"status": "closed"}, headers=headers).status_code == 404
    assert client.delete(f"{API}/tickets/9999", headers=headers).status_code == 404


def test_delete_ticket(client, users):
    ticket = _open(client, users["user"]).json()
    url = f"{API}/tickets/{ticket['id']}"
    assert client.delete(url, headers=users["user"]["headers"]).status_code == 403
    assert client.delete(url, headers=users["mod"]["headers"]).status_code == 204
    assert client.get(f"{API}/tickets", headers=users["user"]["headers"]).json() == []


def test_recent_tickets_for_admins(client, users):
    for n in range(12):
        _open(client, users["user"], subject=f"ticket {n}")
    assert client.get(f"{API}/admin/tickets/recent", headers=users["mod"]["headers"]).status_code == 403
    recent = client.get(f"{API}/admin/tickets/recent", headers=users["admin"]["headers"]).json()
    assert len(recent) == 10
    assert recent[0]["subject"] == "ticket 11"
