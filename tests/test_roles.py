import pytest

from community_platform_api.app.core.roles import Role, has_min_role, is_moderator, parse_role, rank


def test_rank_table():
    assert rank(Role.USER) == 1
    assert rank(Role.VIP) == 2
    assert rank(Role.MOD) == 3
    assert rank(Role.ADMIN) == 4


def test_rank_accepts_stored_strings():
    assert rank("ADMIN") == 4
    assert rank("VIP") == 2


@pytest.mark.parametrize("value", [None, "", "SUPERUSER", "admin", 42])
def test_unknown_roles_rank_as_user(value):
    assert rank(value) == 1


def test_rank_is_strictly_monotonic():
    ordered = [Role.USER, Role.VIP, Role.MOD, Role.ADMIN]
    ranks = [rank(role) for role in ordered]
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == len(ranks)


def test_has_min_role():
    assert has_min_role(Role.ADMIN, Role.VIP)
    assert has_min_role(Role.VIP, Role.VIP)
    assert not has_min_role(Role.USER, Role.VIP)
    assert not has_min_role(None, Role.VIP)


def test_is_moderator():
    assert is_moderator(Role.MOD)
    assert is_moderator(Role.ADMIN)
    assert not is_moderator(Role.VIP)
    assert not is_moderator("bogus")


def test_parse_role_falls_back_to_user():
    assert parse_role("MOD") is Role.MOD
    assert parse_role(Role.VIP) is Role.VIP
    assert parse_role("nope") is Role.USER
