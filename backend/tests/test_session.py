"""Tests for the session token check on protected routes."""
from __future__ import annotations

import time

from httpx import AsyncClient
from itsdangerous import TimestampSigner, URLSafeTimedSerializer

from conftest import create_user, login
from greenpact.core.security import SESSION_SALT, SessionSigner
from greenpact.models import User


class _StaleSigner(TimestampSigner):
    def get_timestamp(self) -> int:
        return int(time.time()) - 2 * 60 * 60


async def test_me_without_token(client: AsyncClient):
    response = await client.get("/api/auth/user/me")

    assert response.status_code == 401
    assert response.json() == {"message": "No token, authorization denied."}


async def test_me_ignores_bearer_scheme(client: AsyncClient, session_factory):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await client.get("/api/auth/user/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test_me_with_garbage_token(client: AsyncClient):
    response = await client.get("/api/auth/user/me", headers={"x-auth-token": "not-a-token"})

    assert response.status_code == 401
    assert response.json() == {"message": "Token is not valid."}


async def test_me_with_tampered_token(client: AsyncClient, session_factory, settings):
    user = await create_user(session_factory, "alice", "a@example.com")
    signer = SessionSigner(settings.secret_key)
    genuine = signer.issue(user.id, "user")
    forged_payload = signer.issue(user.id, "admin").split(".", 1)[0]
    tampered = forged_payload + "." + genuine.split(".", 1)[1]

    response = await client.get("/api/auth/user/me", headers={"x-auth-token": tampered})

    assert response.status_code == 401
    assert response.json() == {"message": "Token is not valid."}


async def test_me_with_expired_token(client: AsyncClient, session_factory, settings):
    user = await create_user(session_factory, "alice", "a@example.com")
    stale = URLSafeTimedSerializer(settings.secret_key, salt=SESSION_SALT, signer=_StaleSigner)
    token = stale.dumps({"sub": user.id, "role": user.role})

    response = await client.get("/api/auth/user/me", headers={"x-auth-token": token})

    assert response.status_code == 401
    assert response.json() == {"message": "Token is not valid."}


async def test_me_returns_public_profile(client: AsyncClient, session_factory):
    user = await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await client.get("/api/auth/user/me", headers={"x-auth-token": token})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user.id
    assert body["username"] == "alice"
    assert body["name"] == "Alice"
    assert body["profilePicture"] is None
    assert "password_hash" not in body


async def test_me_for_deleted_user(client: AsyncClient, session_factory):
    user = await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")
    async with session_factory() as session:
        await session.delete(await session.get(User, user.id))
        await session.commit()

    response = await client.get("/api/auth/user/me", headers={"x-auth-token": token})

    assert response.status_code == 404
