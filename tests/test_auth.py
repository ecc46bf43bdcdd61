from community_platform_api.app.core.config import settings
from community_platform_api.app.core.roles import Role

from conftest import API


def _register(client, username="carol", password="secret123", display_name="Carol"):
    return client.post(
        f"{API}/auth/register",
        json={"username": username, "password": password, "display_name": display_name},
    )


def test_register_creates_user_session(client):
    response = _register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["role"] == "USER"
    assert body["user"]["level"] == 1
    assert "password" not in body["user"]
    assert settings.session_cookie_name in response.cookies

    me = client.get(f"{API}/auth/me")
    assert me.status_code == 200
    assert me.json()["username"] == "carol"


def test_register_duplicate_username(client):
    assert _register(client).status_code == 201
    response = _register(client)
    assert response.status_code == 400
    assert "taken" in response.json()["detail"]


def test_register_validates_lengths(client):
    assert _register(client, username="ab").status_code == 422
    assert _register(client, password="123").status_code == 422


def test_login_with_bad_credentials(client, make_user):
    make_user("dave", password="rightpass")
    response = client.post(f"{API}/auth/login", json={"username": "dave", "password": "wrongpass"})
    assert response.status_code == 401
    response = client.post(f"{API}/auth/login", json={"username": "nobody", "password": "whatever"})
    assert response.status_code == 401


def test_login_marks_user_online_and_returns_token(client, make_user):
    make_user("dave", password="rightpass")
    response = client.post(f"{API}/auth/login", json={"username": "dave", "password": "rightpass"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["is_online"] is True
    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200


def test_remember_me_extends_cookie_lifetime(client, make_user):
    make_user("dave", password="rightpass")
    short = client.post(f"{API}/auth/login", json={"username": "dave", "password": "rightpass"})
    long = client.post(
        f"{API}/auth/login",
        json={"username": "dave", "password": "rightpass", "remember_me": True},
    )
    assert f"Max-Age={settings.session_ttl_minutes * 60}" in short.headers["set-cookie"]
    assert f"Max-Age={settings.remember_me_ttl_minutes * 60}" in long.headers["set-cookie"]


def test_missing_or_invalid_token_is_unauthorized(client):
    assert client.get(f"{API}/auth/me").status_code == 401
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_logout_clears_session(client):
    _register(client)
    response = client.post(f"{API}/auth/logout")
    assert response.status_code == 200
    assert client.get(f"{API}/auth/me").status_code == 401


def test_role_change_applies_to_existing_session(client, users):
    alice = users["user"]
    assert client.get(f"{API}/admin/users", headers=alice["headers"]).status_code == 403
    client.patch(
        f"{API}/admin/users/{alice['id']}",
        json={"role": "ADMIN"},
        headers=users["admin"]["headers"],
    )
    assert client.get(f"{API}/admin/users", headers=alice["headers"]).status_code == 200


def test_deleted_user_token_is_unauthorized(client, users):
    alice = users["user"]
    response = client.delete(f"{API}/admin/users/{alice['id']}", headers=users["admin"]["headers"])
    assert response.status_code == 204
    assert client.get(f"{API}/auth/me", headers=alice["headers"]).status_code == 401


def test_admin_cannot_delete_self(client, users):
    admin = users["admin"]
    response = client.delete(f"{API}/admin/users/{admin['id']}", headers=admin["headers"])
    assert response.status_code == 400


def test_admin_user_management(client, users):
    headers = users["admin"]["headers"]
    response = client.post(
        f"{API}/admin/users",
        json={"username": "newmod", "password": "secret123", "display_name": "New Mod", "role": "MOD", "level": 40},
        headers=headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["role"] == Role.MOD.value
    assert created["level"] == 40

    response = client.patch(f"{API}/admin/users/{created['id']}", json={"level": 41}, headers=headers)
    assert response.json()["level"] == 41
    assert client.patch(f"{API}/admin/users/9999", json={"level": 2}, headers=headers).status_code == 404
    assert client.delete(f"{API}/admin/users/9999", headers=headers).status_code == 404


def test_admin_routes_reject_moderators(client, users):
    assert client.get(f"{API}/admin/users", headers=users["mod"]["headers"]).status_code == 403


def test_update_own_profile(client, users):
    alice = users["user"]
    response = client.patch(
        f"{API}/users/me",
        json={"display_name": "Alice B", "avatar": "https://example.com/a.png"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    assert response.json()["display_name"] == "Alice B"
    assert response.json()["role"] == "USER"


def test_list_users_hides_passwords(client, users):
    response = client.get(f"{API}/users", headers=users["user"]["headers"])
    assert response.status_code == 200
    assert len(response.json()) == 5
    assert all("password" not in user for user in response.json())
