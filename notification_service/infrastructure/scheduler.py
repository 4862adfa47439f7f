"""Background scheduler running the retention sweeps on independent timers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session, sessionmaker

from notification_service.config import Settings, get_settings
from notification_service.domain.entities import CleanupResult
from notification_service.domain.errors import RetentionSweepFailure

logger = logging.getLogger(__name__)


def run_sweep(
    session_factory: sessionmaker,
    sweep: Callable[[Session], CleanupResult],
    job_id: str,
) -> CleanupResult | None:
    """Run ``sweep`` in its own session; failures are logged and retried next tick."""

    session = session_factory()
    try:
        return sweep(session)
    except RetentionSweepFailure:
        logger.exception("Retention job %s failed; it will run again on its next trigger", job_id)
        return None
    finally:
        session.close()


def register_retention_jobs(
    scheduler: BackgroundScheduler,
    session_factory: sessionmaker,
    settings: Settings,
) -> list[str]:
    """Add one interval job per retention class and return their ids."""

    from notification_service.application.use_cases.notifications import (
        cleanup_dismissed,
        cleanup_expired,
        cleanup_read,
        cleanup_unread,
    )

    jobs: list[tuple[str, str, Callable[[Session], CleanupResult], IntervalTrigger]] = [
        (
            "cleanup_expired",
            "Purge expired notifications",
            cleanup_expired,
            IntervalTrigger(minutes=settings.cleanup_expired_interval_minutes),
        ),
        (
            "cleanup_dismissed",
            "Purge dismissed receipts",
            lambda session: cleanup_dismissed(session, settings.retention_dismissed_days),
            IntervalTrigger(days=settings.cleanup_dismissed_interval_days),
        ),
        (
            "cleanup_read",
            "Purge read receipts",
            lambda session: cleanup_read(session, settings.retention_read_days),
            IntervalTrigger(days=settings.cleanup_read_interval_days),
        ),
        (
            "cleanup_unread",
            "Purge unread receipts",
            lambda session: cleanup_unread(session, settings.retention_unread_days),
            IntervalTrigger(days=settings.cleanup_unread_interval_days),
        ),
    ]
    for job_id, name, sweep, trigger in jobs:
        scheduler.add_job(
            run_sweep,
            trigger=trigger,
            args=(session_factory, sweep, job_id),
            id=job_id,
            name=name,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
    return [job_id for job_id, *_ in jobs]


scheduler = BackgroundScheduler()


def start_scheduler(session_factory: sessionmaker | None = None) -> None:
    """Register the retention jobs and start the scheduler."""

    if session_factory is None:
        from notification_service.infrastructure.database import SessionLocal

        session_factory = SessionLocal
    register_retention_jobs(scheduler, session_factory, get_settings())
    scheduler.start()
    logger.info("Retention scheduler started")


def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Retention scheduler stopped")


__all__ = [
    "register_retention_jobs",
    "run_sweep",
    "scheduler",
    "shutdown_scheduler",
    "start_scheduler",
]
