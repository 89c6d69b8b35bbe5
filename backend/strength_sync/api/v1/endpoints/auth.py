"""Session authentication.

Import calls act on behalf of the user behind the ``session_id`` cookie.
Accounts are created with ``scripts/seed_user.py``.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.core.config import get_settings
from strength_sync.core.database import get_db
from strength_sync.core.security import verify_password
from strength_sync.core.session import create_session, delete_session, get_session
from strength_sync.models.user import User

settings = get_settings()
router = APIRouter()

SessionCookie = Annotated[str | None, Cookie(alias="session_id")]


class Credentials(BaseModel):
    email: EmailStr
    password: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _user_summary(user: User) -> dict[str, Any]:
    return {"id": user.id, "email": user.email, "display_name": user.display_name}


async def get_current_user(
    session_id: SessionCookie = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the session cookie to a user, or fail with 401."""
    if not session_id:
        raise _unauthorized("Not authenticated")

    session_data = await get_session(session_id) or {}
    user = await db.get(User, session_data["user_id"]) if "user_id" in session_data else None
    if user is None:
        raise _unauthorized("Session expired or invalid")
    return user


@router.post("/login")
async def login(
    credentials: Credentials,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    user = (await db.execute(select(User).where(User.email == credentials.email))).scalar_one_or_none()
    if user is None or not verify_password(credentials.password, user.password_hash):
        raise _unauthorized("Incorrect email or password")

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()

    response.set_cookie(
        "session_id",
        await create_session(user_id=user.id, user_data={"email": user.email}),
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return {"success": True, "message": "Login successful", "user": _user_summary(user)}


@router.post("/logout")
async def logout(response: Response, session_id: SessionCookie = None) -> dict[str, str]:
    if session_id:
        await delete_session(session_id)
    response.delete_cookie("session_id", secure=settings.cookie_secure, samesite=settings.cookie_samesite)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(user: Annotated[User, Depends(get_current_user)]) -> dict[str, Any]:
    return _user_summary(user)
