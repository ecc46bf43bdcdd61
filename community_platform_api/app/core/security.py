"""
Security helpers for password hashing and session authentication.

Sessions are signed tokens in the JSON Web Token layout (HMAC‑SHA256
signature, base64url encoding).  The only claim besides ``exp`` is
``sub``, the user id.  The token is delivered in an HTTP‑only cookie and
is also accepted as an ``Authorization: Bearer`` header so scripts and
tests can authenticate without a cookie jar.  Because the token is
self‑contained, sessions survive restarts and need no server memory.

The role is never stored in the token.  ``get_current_user`` reloads
the user row on every request so that role changes made by an
administrator take effect immediately.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a per‑password salt.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .roles import Role, has_min_role, parse_role


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed token with the given claims.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": "42"}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.session_ttl_minutes * 60``.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.session_ttl_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a token and return its claims, or ``None`` if it is
    malformed, wrongly signed or expired."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        # binascii.Error and json.JSONDecodeError are both ValueErrors
        return None
    if not isinstance(data, dict) or data.get("exp") is None:
        return None
    if int(data["exp"]) < int(time.time()):
        return None
    return data


def create_session_token(user_id: int, remember_me: bool = False) -> str:
    minutes = settings.remember_me_ttl_minutes if remember_me else settings.session_ttl_minutes
    return create_access_token({"sub": str(user_id)}, expires_delta=minutes * 60)


def set_session_cookie(response: Response, user_id: int, remember_me: bool = False) -> str:
    """Issue a session token for ``user_id`` and attach it as a cookie."""
    token = create_session_token(user_id, remember_me)
    minutes = settings.remember_me_ttl_minutes if remember_me else settings.session_ttl_minutes
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return token


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name)


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    session_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that resolves the session to the current user.

    The bearer header takes precedence over the cookie.  Raises 401 if no
    token is present, the token is invalid or expired, or the user it
    names no longer exists.  Returns a dictionary with ``user_id``,
    ``username``, ``display_name``, ``role`` (a ``Role``) and ``level``.
    """
    token = credentials.credentials if credentials is not None else session_token
    if not token:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(token)
    if not payload:
        raise _unauthorized("Invalid or expired session")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid or expired session")

    from community_platform_api.app.core.db import get_connection
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id, username, display_name, role, level FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        raise _unauthorized("User no longer exists")
    return {
        "user_id": row["id"],
        "username": row["username"],
        "display_name": row["display_name"],
        "role": parse_role(row["role"]),
        "level": row["level"],
    }


# ---------------------------------------------------------------------------
# Role-based access control (RBAC) helpers
# ---------------------------------------------------------------------------

def require_roles(*roles: Role) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Dependency factory that admits only the listed roles.

    Use in endpoints via ``Depends(require_roles(Role.MOD, Role.ADMIN))``.
    Any other role receives HTTP 403.
    """

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _role_dependency


def require_min_role(minimum: Role) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Dependency factory that admits ``minimum`` and every higher role."""

    def _rank_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if not has_min_role(current_user.get("role"), minimum):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{minimum.value} access required",
            )
        return current_user

    return _rank_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The result is
    ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    iterations = 100_000
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, 100_000)
    return hmac.compare_digest(dk, stored_hash)
