"""Shared pytest fixtures for the application tests."""
from __future__ import annotations

import re
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from greenpact.core.config import Settings, get_settings
from greenpact.core.dependencies import get_db, get_notification_sender, get_picture_store
from greenpact.db.base import Base
from greenpact.db.session import SessionFactory, build_session_factory, get_session
from greenpact.main import app
from greenpact.models import User
from greenpact.services import users as user_service
from greenpact.services.notifications import NotificationMessage
from greenpact.services.profile_pictures import ProfilePictureStore

STRONG_PASSWORD = "Abcdef1!"
ADMIN_SECRET = "let-me-in"

_CODE_PATTERN = re.compile(r"\b(\d{6})\b")


class RecordingSender:
    """Notification sender that keeps messages in memory."""

    def __init__(self) -> None:
        self.messages: list[NotificationMessage] = []
        self.fail_with: Exception | None = None

    async def send(self, message: NotificationMessage) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append(message)

    def last_code(self, email: str) -> str:
        for message in reversed(self.messages):
            if message.recipient == email:
                return _CODE_PATTERN.search(message.body).group(1)
        raise AssertionError(f"no email sent to {email}")


@pytest.fixture()
def settings() -> Settings:
    return Settings(admin_secret=ADMIN_SECRET, smtp_host="")


@pytest_asyncio.fixture()
async def database(tmp_path) -> AsyncIterator[tuple[AsyncEngine, SessionFactory]]:
    engine, factory = build_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine, factory
    await engine.dispose()


@pytest.fixture()
def session_factory(database) -> SessionFactory:
    return database[1]


@pytest_asyncio.fixture()
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def picture_store(tmp_path) -> ProfilePictureStore:
    return ProfilePictureStore(tmp_path / "uploads", max_bytes=2 * 1024 * 1024)


@pytest_asyncio.fixture()
async def client(session_factory, sender, picture_store, settings) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with test database, mailer and storage."""

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with get_session(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notification_sender] = lambda: sender
    app.dependency_overrides[get_picture_store] = lambda: picture_store
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


async def create_user(
    session_factory,
    username: str,
    email: str,
    password: str = STRONG_PASSWORD,
    role: str = "user",
) -> User:
    """Helper to create and persist a user."""

    async with session_factory() as session:
        user = await user_service.create_user(
            session, username=username, name=username.title(), email=email, password=password, role=role
        )
        await session.commit()
        return user


async def login(client: AsyncClient, username: str, password: str = STRONG_PASSWORD) -> str:
    response = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return response.json()["token"]
