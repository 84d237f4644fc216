"""Persistence for one-time registration codes.

A code is only meaningful for the email it was issued to, and only the most
recent one counts: ``issue_code`` replaces whatever record already exists for
the address, which also restarts the expiry window. Lookups always match on
email *and* code, so a superseded code can never be redeemed.
"""
from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.db.base import as_utc, utcnow
from greenpact.models.verification_code import VerificationCode

_UPSERT_INSERTS = {"sqlite": sqlite_insert, "postgresql": postgresql_insert}


def generate_code(length: int = 6) -> str:
    """Return a digits-only code drawn from the system CSPRNG."""

    return "".join(secrets.choice(string.digits) for _ in range(length))


async def get_code_for_email(session: AsyncSession, email: str) -> VerificationCode | None:
    result = await session.execute(select(VerificationCode).where(VerificationCode.email == email))
    return result.scalar_one_or_none()


def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect not in _UPSERT_INSERTS:
        raise RuntimeError(f"Verification code upsert is not supported on {dialect}")
    return _UPSERT_INSERTS[dialect]


async def issue_code(
    session: AsyncSession, email: str, length: int = 6, now: datetime | None = None
) -> VerificationCode:
    """Create or replace the outstanding code for ``email``.

    A single ``INSERT ... ON CONFLICT (email) DO UPDATE`` so that concurrent
    requests for one address both land on the same row.
    """

    now = now or utcnow()
    code = generate_code(length)
    insert = _insert_for(session)
    statement = (
        insert(VerificationCode)
        .values(email=email, code=code, created_at=now)
        .on_conflict_do_update(index_elements=["email"], set_={"code": code, "created_at": now})
        .returning(VerificationCode)
    )
    result = await session.scalars(statement, execution_options={"populate_existing": True})
    return result.one()


async def find_code(session: AsyncSession, email: str, code: str) -> VerificationCode | None:
    result = await session.execute(
        select(VerificationCode).where(VerificationCode.email == email, VerificationCode.code == code)
    )
    return result.scalar_one_or_none()


def is_expired(record: VerificationCode, ttl: timedelta, now: datetime | None = None) -> bool:
    now = now or utcnow()
    return now - as_utc(record.created_at) > ttl


async def consume_code(session: AsyncSession, record: VerificationCode) -> None:
    await session.delete(record)
    await session.flush()


async def purge_expired_codes(session: AsyncSession, ttl: timedelta, now: datetime | None = None) -> int:
    """Delete every code older than ``ttl`` and return how many were removed."""

    cutoff = (now or utcnow()) - ttl
    statement = (
        delete(VerificationCode)
        .where(VerificationCode.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(statement)
    await session.flush()
    return result.rowcount or 0
