"""Registration and login flows.

Registration is two requests. ``request_registration_code`` stores a fresh
code for the email and mails it; ``complete_registration`` redeems that code
together with the chosen credentials and creates the account. A redeemed or
expired code is deleted and committed before anything else can fail, so a
rejected attempt always has to start over with a new code.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.config import Settings
from greenpact.core.errors import (
    DuplicateAccount,
    ExpiredCode,
    Forbidden,
    InvalidCredentials,
    InvalidOrExpiredCode,
    PersistenceFailure,
    ValidationError,
)
from greenpact.core.security import SessionSigner, check_password_strength
from greenpact.models.user import ROLE_ADMIN, ROLE_USER, User
from greenpact.schemas.auth import AdminCreateRequest, RegisterRequest
from greenpact.services import codes, users
from greenpact.services.notifications import NotificationSender, build_registration_code_message, notify

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthResult:
    user: User
    token: str


def _require(**fields: str) -> None:
    blank = [name for name, value in fields.items() if not value or not value.strip()]
    if blank:
        raise ValidationError(f"Please enter all required fields: {', '.join(blank)}.")


def issue_token(signer: SessionSigner, user: User) -> str:
    return signer.issue(user.id, user.role)


async def request_registration_code(
    session: AsyncSession,
    email: str,
    sender: NotificationSender,
    settings: Settings,
    now: datetime | None = None,
) -> None:
    email = users.normalize_email(email)
    if await users.get_user_by_email(session, email):
        logger.info("Code requested for already registered email %s", email)
        raise DuplicateAccount.for_field("email")

    try:
        record = await codes.issue_code(session, email, length=settings.otp_length, now=now)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Could not store verification code for %s", email)
        raise PersistenceFailure() from exc
    logger.info("Issued registration code for %s", email)

    message = build_registration_code_message(
        email, record.code, settings.otp_expire_minutes, settings.app_name
    )
    await notify(sender, message)


async def _insert_user(session: AsyncSession, role: str, **fields: str) -> User:
    """Insert after a uniqueness re-check; the unique constraints are the backstop."""

    conflict = await users.find_conflict(session, fields["username"], fields["email"])
    if conflict:
        raise DuplicateAccount.for_field(conflict)
    try:
        user = await users.create_user(session, role=role, **fields)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        conflict = await users.find_conflict(session, fields["username"], fields["email"])
        logger.info("Lost registration race for %s", fields["username"])
        raise DuplicateAccount.for_field(conflict or "username") from exc
    return user


async def complete_registration(
    session: AsyncSession,
    payload: RegisterRequest,
    signer: SessionSigner,
    settings: Settings,
    now: datetime | None = None,
) -> AuthResult:
    _require(username=payload.username, name=payload.name, password=payload.password, otp=payload.otp)
    check_password_strength(payload.password)
    email = users.normalize_email(payload.email)

    record = await codes.find_code(session, email, payload.otp.strip())
    if record is None:
        logger.info("Rejected registration for %s: no matching code", email)
        raise InvalidOrExpiredCode()

    ttl = timedelta(minutes=settings.otp_expire_minutes)
    expired = codes.is_expired(record, ttl, now)
    await codes.consume_code(session, record)
    await session.commit()
    if expired:
        logger.info("Rejected registration for %s: code expired", email)
        raise ExpiredCode()

    user = await _insert_user(
        session,
        ROLE_USER,
        username=payload.username,
        name=payload.name,
        email=email,
        password=payload.password,
    )
    logger.info("Registered user %s (%s)", user.id, user.username)
    return AuthResult(user=user, token=issue_token(signer, user))


async def login(session: AsyncSession, username: str, password: str, signer: SessionSigner) -> AuthResult:
    _require(username=username, password=password)
    user = await users.authenticate_user(session, username, password)
    if not user:
        logger.info("Failed login for %s", users.normalize_username(username))
        raise InvalidCredentials()
    return AuthResult(user=user, token=issue_token(signer, user))


async def create_admin(
    session: AsyncSession,
    payload: AdminCreateRequest,
    signer: SessionSigner,
    settings: Settings,
) -> AuthResult:
    if not settings.admin_secret:
        raise Forbidden("Admin creation is disabled.")
    if not hmac.compare_digest(payload.secret.encode("utf-8"), settings.admin_secret.encode("utf-8")):
        logger.warning("Admin creation attempted with a wrong secret")
        raise Forbidden("Invalid secret key.")
    _require(username=payload.username, name=payload.name, password=payload.password)
    check_password_strength(payload.password)

    user = await _insert_user(
        session,
        ROLE_ADMIN,
        username=payload.username,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    logger.info("Created admin user %s (%s)", user.id, user.username)
    return AuthResult(user=user, token=issue_token(signer, user))
