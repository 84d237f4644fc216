"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from greenpact.schemas.user import UserRead


class OTPRequest(BaseModel):
    email: EmailStr


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    otp: str = Field(..., min_length=1, max_length=12)


class AdminCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    secret: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class MessageResponse(BaseModel):
    message: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserRead
