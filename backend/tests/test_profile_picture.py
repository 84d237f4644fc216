"""Tests for profile picture upload and removal."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import create_user, login
from greenpact.core.errors import ValidationError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


async def _upload(client: AsyncClient, token: str, filename: str, content: bytes, content_type: str):
    return await client.put(
        "/api/users/profile-picture",
        files={"profilePicture": (filename, content, content_type)},
        headers={"x-auth-token": token},
    )


async def test_upload_profile_picture(client: AsyncClient, session_factory, picture_store):
    user = await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await _upload(client, token, "me.png", PNG_BYTES, "image/png")

    assert response.status_code == 200
    stored = response.json()["profilePicture"]
    assert stored == f"profile_pictures/{user.id}-profile.png"
    assert (picture_store.root / stored).read_bytes() == PNG_BYTES

    me = await client.get("/api/auth/user/me", headers={"x-auth-token": token})
    assert me.json()["profilePicture"] == stored


async def test_upload_replaces_previous_picture(client: AsyncClient, session_factory, picture_store):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    first = await _upload(client, token, "me.png", PNG_BYTES, "image/png")
    second = await _upload(client, token, "me.gif", b"GIF89a", "image/gif")

    assert second.status_code == 200
    assert not (picture_store.root / first.json()["profilePicture"]).exists()
    assert (picture_store.root / second.json()["profilePicture"]).exists()


async def test_upload_rejects_non_images(client: AsyncClient, session_factory):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await _upload(client, token, "notes.txt", b"hello", "text/plain")

    assert response.status_code == 400
    assert response.json() == {"message": "Only image files (JPEG, JPG, PNG, GIF) are allowed!"}


async def test_upload_rejects_large_files(client: AsyncClient, session_factory, picture_store):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await _upload(client, token, "big.jpg", b"\xff" * (picture_store.max_bytes + 1), "image/jpeg")

    assert response.status_code == 400


async def test_upload_requires_token(client: AsyncClient):
    response = await client.put(
        "/api/users/profile-picture", files={"profilePicture": ("me.png", PNG_BYTES, "image/png")}
    )

    assert response.status_code == 401


async def test_remove_profile_picture(client: AsyncClient, session_factory, picture_store):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")
    stored = (await _upload(client, token, "me.png", PNG_BYTES, "image/png")).json()["profilePicture"]

    response = await client.delete("/api/users/profile-picture", headers={"x-auth-token": token})

    assert response.status_code == 200
    assert not (picture_store.root / stored).exists()
    me = await client.get("/api/auth/user/me", headers={"x-auth-token": token})
    assert me.json()["profilePicture"] is None


async def test_remove_without_picture(client: AsyncClient, session_factory):
    await create_user(session_factory, "alice", "a@example.com")
    token = await login(client, "alice")

    response = await client.delete("/api/users/profile-picture", headers={"x-auth-token": token})

    assert response.status_code == 400
    assert response.json() == {"message": "No profile picture to remove."}


class _ChunkedUpload:
    """Stands in for an UploadFile and records how much was asked for."""

    def __init__(self, content: bytes) -> None:
        self.content = content
        self.requested: list[int] = []

    async def read(self, size: int = -1) -> bytes:
        self.requested.append(size)
        return self.content if size < 0 else self.content[:size]


async def test_upload_read_stops_past_the_size_limit(picture_store):
    upload = _ChunkedUpload(b"\xff" * (picture_store.max_bytes * 3))

    with pytest.raises(ValidationError):
        await picture_store.read_upload(upload)

    assert upload.requested == [picture_store.max_bytes + 1]


async def test_upload_read_returns_small_files_whole(picture_store):
    upload = _ChunkedUpload(PNG_BYTES)

    assert await picture_store.read_upload(upload) == PNG_BYTES
