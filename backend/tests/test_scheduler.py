"""Tests for the background purge of expired registration codes."""
from __future__ import annotations

from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from greenpact.db.base import utcnow
from greenpact.services import codes
from greenpact.services.scheduler import PURGE_JOB_ID, run_code_purge, schedule_code_purge_job


def test_purge_job_runs_on_configured_interval(settings):
    settings.otp_purge_interval_seconds = 30
    scheduler = AsyncIOScheduler()

    job = schedule_code_purge_job(scheduler, settings)

    assert job.id == PURGE_JOB_ID
    assert scheduler.get_job(PURGE_JOB_ID) is not None
    assert job.trigger.interval == timedelta(seconds=30)


async def test_purge_run_deletes_stale_codes(session_factory, settings):
    async with session_factory() as session:
        await codes.issue_code(session, "old@example.com", now=utcnow() - timedelta(minutes=10))
        await codes.issue_code(session, "new@example.com")
        await session.commit()

    removed = await run_code_purge(session_factory, settings)

    assert removed == 1
    async with session_factory() as session:
        assert await codes.get_code_for_email(session, "old@example.com") is None
        assert await codes.get_code_for_email(session, "new@example.com") is not None
