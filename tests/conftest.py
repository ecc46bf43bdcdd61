"""Shared fixtures: a fresh SQLite file per test and a user factory."""

import pytest
from fastapi.testclient import TestClient

from community_platform_api.app.core.config import settings
from community_platform_api.app.core.db import get_connection, init_db
from community_platform_api.app.core.roles import Role
from community_platform_api.app.core.security import create_session_token, hash_password
from community_platform_api.app.main import app

API = "/api/v1"


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "community.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    monkeypatch.setattr(settings, "seed_demo_data", False)
    init_db()
    return path


@pytest.fixture
def client(db_path):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_path):
    """Insert a user directly and return its id and bearer headers."""

    def _make(username, role=Role.USER, display_name=None, password="secret123"):
        conn = get_connection()
        try:
            cursor = conn.execute(
                "INSERT INTO users (username, password, display_name, role) VALUES (?, ?, ?, ?)",
                (username, hash_password(password), display_name or username.title(), Role(role).value),
            )
            conn.commit()
            user_id = cursor.lastrowid
        finally:
            conn.close()
        token = create_session_token(user_id)
        return {
            "id": user_id,
            "username": username,
            "role": Role(role),
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest.fixture
def users(make_user):
    """One user of every role."""
    return {
        "user": make_user("alice", Role.USER, "Alice"),
        "other": make_user("bob", Role.USER, "Bob"),
        "vip": make_user("vera", Role.VIP, "Vera"),
        "mod": make_user("mona", Role.MOD, "Mona"),
        "admin": make_user("adam", Role.ADMIN, "Adam"),
    }


def create_group(client, headers, name="General", required_role="USER"):
    response = client.post(
        f"{API}/chat/groups",
        json={"name": name, "required_role": required_role},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def count_rows(table, where="1=1", params=()):
    conn = get_connection()
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table} WHERE {where}", params).fetchone()[0]
    finally:
        conn.close()
