"""Authentication endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.config import Settings, get_settings
from greenpact.core.dependencies import get_current_user, get_db, get_notification_sender, get_session_signer
from greenpact.core.security import SessionSigner
from greenpact.models.user import User
from greenpact.schemas.auth import (
    AdminCreateRequest,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    OTPRequest,
    RegisterRequest,
)
from greenpact.schemas.user import UserRead
from greenpact.services import auth as auth_service
from greenpact.services.notifications import NotificationSender

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(message: str, result: auth_service.AuthResult) -> AuthResponse:
    return AuthResponse(message=message, token=result.token, user=UserRead.model_validate(result.user))


@router.post("/request-otp", response_model=MessageResponse)
async def request_otp(
    payload: OTPRequest,
    session: AsyncSession = Depends(get_db),
    sender: NotificationSender = Depends(get_notification_sender),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    await auth_service.request_registration_code(session, payload.email, sender, settings)
    return MessageResponse(message="OTP sent to your email.")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db),
    signer: SessionSigner = Depends(get_session_signer),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    result = await auth_service.complete_registration(session, payload, signer, settings)
    return _auth_response("Registration successful! You are now logged in.", result)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db),
    signer: SessionSigner = Depends(get_session_signer),
) -> AuthResponse:
    result = await auth_service.login(session, payload.username, payload.password, signer)
    return _auth_response("Login successful!", result)


@router.post("/create-admin", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    payload: AdminCreateRequest,
    session: AsyncSession = Depends(get_db),
    signer: SessionSigner = Depends(get_session_signer),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    result = await auth_service.create_admin(session, payload, signer, settings)
    return _auth_response("Admin user created successfully!", result)


@router.get("/user/me", response_model=UserRead)
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
