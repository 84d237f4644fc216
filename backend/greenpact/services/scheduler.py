"""Background scheduler for expiring registration codes."""
from __future__ import annotations

import logging
from datetime import timedelta

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from greenpact.core.config import Settings, get_settings
from greenpact.db.session import SessionFactory, get_session
from greenpact.services.codes import purge_expired_codes

logger = logging.getLogger(__name__)

PURGE_JOB_ID = "purge-expired-codes"

_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler()
    return _scheduler


def start_scheduler() -> None:
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def schedule_code_purge_job(
    scheduler: AsyncIOScheduler | None = None, settings: Settings | None = None
) -> Job:
    settings = settings or get_settings()
    scheduler = scheduler or get_scheduler()
    trigger = IntervalTrigger(seconds=settings.otp_purge_interval_seconds)
    job = scheduler.add_job(run_code_purge, trigger=trigger, id=PURGE_JOB_ID, replace_existing=True)
    logger.info("Scheduled code purge every %s seconds", settings.otp_purge_interval_seconds)
    return job


async def run_code_purge(factory: SessionFactory | None = None, settings: Settings | None = None) -> int:
    """Delete expired registration codes; returns how many were removed."""

    ttl = timedelta(minutes=(settings or get_settings()).otp_expire_minutes)
    async with get_session(factory) as session:
        removed = await purge_expired_codes(session, ttl)
        await session.commit()
    if removed:
        logger.info("Purged %d expired registration code(s)", removed)
    return removed
