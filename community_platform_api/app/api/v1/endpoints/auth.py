"""
Authentication endpoints for API v1.

Registration and login issue a session token: it is set as an HTTP‑only
cookie and also returned in the body so that clients without a cookie
jar can send it as a bearer token.  Logout clears the cookie and marks
the user offline.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from community_platform_api.app.core.errors import to_http_exception
from community_platform_api.app.core.security import (
    clear_session_cookie,
    get_current_user,
    set_session_cookie,
)
from community_platform_api.app.schemas.user import LoginRequest, LoginResponse, UserPublic, UserRegister
from community_platform_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, response: Response) -> LoginResponse:
    """Create a USER account and sign it in."""
    try:
        user = await UserService.create_user(
            username=data.username,
            password=data.password,
            display_name=data.display_name,
            is_online=True,
        )
    except ValueError as e:
        raise to_http_exception(e)
    token = set_session_cookie(response, user.id)
    return LoginResponse(user=user, access_token=token)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, response: Response) -> LoginResponse:
    """Check credentials and start a session.

    The session lasts one day, or thirty days with ``remember_me``.
    """
    user = await UserService.authenticate(data.username, data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = set_session_cookie(response, user.id, remember_me=data.remember_me)
    return LoginResponse(user=user, access_token=token)


@router.post("/logout")
async def logout(response: Response, current_user: dict = Depends(get_current_user)) -> dict:
    await UserService.set_online(current_user["user_id"], False)
    clear_session_cookie(response)
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserPublic)
async def me(current_user: dict = Depends(get_current_user)) -> UserPublic:
    try:
        return await UserService.get_user(current_user["user_id"])
    except ValueError as e:
        raise to_http_exception(e)
