"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.config import Settings, get_settings
from greenpact.core.errors import Forbidden, InvalidToken, NotFound, Unauthorized
from greenpact.core.security import SessionIdentity, SessionSigner
from greenpact.db.session import get_session
from greenpact.models.user import User
from greenpact.services.notifications import NotificationSender, sender_from_settings
from greenpact.services.profile_pictures import ProfilePictureStore
from greenpact.services.users import get_user

SESSION_HEADER_NAME = "x-auth-token"

session_header = APIKeyHeader(name=SESSION_HEADER_NAME, auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


@lru_cache
def _default_sender() -> NotificationSender:
    return sender_from_settings(get_settings())


def get_notification_sender() -> NotificationSender:
    return _default_sender()


def get_session_signer(settings: Settings = Depends(get_settings)) -> SessionSigner:
    return SessionSigner(settings.secret_key)


def get_picture_store(settings: Settings = Depends(get_settings)) -> ProfilePictureStore:
    return ProfilePictureStore(settings.upload_dir, settings.profile_picture_max_bytes)


async def get_current_identity(
    request: Request,
    token: str | None = Depends(session_header),
    signer: SessionSigner = Depends(get_session_signer),
    settings: Settings = Depends(get_settings),
) -> SessionIdentity:
    """Validate the session token and attach the identity to the request.

    Malformed, tampered and expired tokens are all reported the same way.
    """
    if not token:
        raise Unauthorized()
    try:
        identity = signer.identify(token, max_age=settings.session_max_age_seconds)
    except ValueError as exc:
        raise InvalidToken() from exc
    request.state.identity = identity
    return identity


async def get_current_user(
    identity: SessionIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db),
) -> User:
    user = await get_user(session, identity.user_id)
    if not user:
        raise NotFound("User not found.")
    return user


async def require_admin(
    identity: SessionIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db),
) -> User:
    # The role is re-read from the store; the one in the token may be stale.
    user = await get_user(session, identity.user_id)
    if not user or not user.is_admin:
        raise Forbidden("Access denied: Not an admin.")
    return user
