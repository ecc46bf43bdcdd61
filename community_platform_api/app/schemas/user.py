"""
Pydantic models for user data.

Passwords only ever appear in request bodies.  Every response uses
``UserPublic``, which has no password field, so a hash can never leak
through the API.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.roles import Role


class UserPublic(BaseModel):
    """A user as shown to other users and embedded in chat payloads."""

    id: int
    username: str
    display_name: str
    role: Role = Role.USER
    avatar: Optional[str] = None
    level: int = 1
    is_online: bool = False
    created_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, description="Login name, at least 3 characters")
    password: str = Field(..., min_length=6, description="At least 6 characters")
    display_name: str = Field(..., min_length=2, description="Name shown to other members")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool = Field(False, description="Keep the session for 30 days instead of 1")


class LoginResponse(BaseModel):
    """Returned by login and registration.

    The same token is also set as the session cookie; clients that
    cannot keep cookies send it back as a bearer token.
    """

    user: UserPublic
    access_token: str
    token_type: str = "bearer"


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=2)
    avatar: Optional[str] = None


class AdminUserCreate(BaseModel):
    """Schema for accounts created from the admin console.

    Unlike self‑registration, the administrator chooses the role and
    level up front.
    """

    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=2)
    role: Role = Role.USER
    level: int = Field(1, ge=1, le=100)


class AdminUserUpdate(BaseModel):
    role: Optional[Role] = None
    level: Optional[int] = Field(None, ge=1, le=100)
    display_name: Optional[str] = Field(None, min_length=2)
