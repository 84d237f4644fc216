"""Pydantic schemas for user operations.

Field names on the wire follow the website client (``profilePicture``,
``newRole``); Python code uses the snake_case attribute names.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    """Public projection of a user; never carries the password hash."""

    id: int
    username: str
    name: str
    email: str
    role: str
    profile_picture: str | None = Field(default=None, alias="profilePicture")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RoleUpdate(BaseModel):
    new_role: Literal["user", "admin"] = Field(alias="newRole")

    model_config = ConfigDict(populate_by_name=True)


class RoleUpdateResponse(BaseModel):
    message: str
    user: UserRead


class ProfilePictureResponse(BaseModel):
    message: str
    profile_picture: str = Field(alias="profilePicture")

    model_config = ConfigDict(populate_by_name=True)
