"""
Role hierarchy.

Roles form a total order USER < VIP < MOD < ADMIN.  Every privilege
check in the application (chat group visibility, moderation, admin
console access) compares ranks through the helpers below rather than
comparing role strings directly.
"""

from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    USER = "USER"
    VIP = "VIP"
    MOD = "MOD"
    ADMIN = "ADMIN"


ROLE_RANKS = {
    Role.USER: 1,
    Role.VIP: 2,
    Role.MOD: 3,
    Role.ADMIN: 4,
}


def parse_role(value: Union[Role, str, None]) -> Role:
    """Coerce a stored role value to ``Role``; unknown values become USER."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return Role.USER


def rank(role: Union[Role, str, None]) -> int:
    """Return the rank of ``role``.

    Total over any input: missing or unrecognised roles rank as USER (1).
    """
    return ROLE_RANKS[parse_role(role)]


def has_min_role(role: Union[Role, str, None], minimum: Union[Role, str]) -> bool:
    return rank(role) >= rank(minimum)


def is_moderator(role: Optional[Union[Role, str]]) -> bool:
    """MOD and ADMIN may moderate content authored by others."""
    return has_min_role(role, Role.MOD)
