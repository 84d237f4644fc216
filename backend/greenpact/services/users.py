"""User service functions for CRUD and authentication."""
from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.security import PasswordHasher
from greenpact.models.user import ROLE_USER, User


def normalize_username(username: str) -> str:
    """Lookup key for a username; the stored value keeps its display case."""
    return username.strip().lower()


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    normalized = normalize_username(username)
    result = await session.execute(select(User).where(func.lower(User.username) == normalized))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    normalized = normalize_email(email)
    result = await session.execute(select(User).where(User.email == normalized))
    return result.scalar_one_or_none()


async def find_conflict(session: AsyncSession, username: str, email: str) -> str | None:
    """Return ``"username"`` or ``"email"`` if either is already taken."""

    username = normalize_username(username)
    email = normalize_email(email)
    result = await session.execute(
        select(User).where(or_(func.lower(User.username) == username, User.email == email))
    )
    existing = result.scalars().first()
    if existing is None:
        return None
    return "username" if existing.username.lower() == username else "email"


async def create_user(
    session: AsyncSession,
    *,
    username: str,
    name: str,
    email: str,
    password: str,
    role: str = ROLE_USER,
) -> User:
    user = User(
        username=username.strip(),
        name=name.strip(),
        email=normalize_email(email),
        password_hash=PasswordHasher.hash(password),
        role=role,
    )
    session.add(user)
    await session.flush()
    return user


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User | None:
    user = await get_user_by_username(session, username)
    if not user:
        PasswordHasher.dummy_verify()
        return None
    if not PasswordHasher.verify(password, user.password_hash):
        return None
    return user


async def update_user_role(session: AsyncSession, user: User, role: str) -> User:
    user.role = role
    await session.flush()
    return user


async def set_profile_picture(session: AsyncSession, user: User, path: str | None) -> User:
    user.profile_picture = path
    await session.flush()
    return user
