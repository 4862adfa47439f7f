"""Retention sweeps purging notifications and receipts past their age limit.

Every sweep is a predicate delete executed in a single transaction, so running
it twice, or from two scheduler replicas at once, deletes each row at most
once and a repeated run finds nothing left to delete.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_service.config import get_settings
from notification_service.domain.entities import CleanupResult, RetentionClass
from notification_service.domain.errors import RetentionSweepFailure
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.repositories import (
    NotificationRepository,
    ReceiptRepository,
)
from notification_service.utils import days_before_now_naive

from .validators import ensure_days

logger = logging.getLogger(__name__)


def _sweep(
    session: Session, retention_class: RetentionClass, purge: Callable[[], int]
) -> CleanupResult:
    try:
        deleted = purge()
        orphans = ReceiptRepository(session).delete_orphan_notifications()
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise RetentionSweepFailure(
            f"{retention_class.value.lower()} sweep failed and was rolled back"
        ) from exc

    if deleted or orphans:
        counts_cache.clear()
    logger.info(
        "Retention sweep %s deleted %d rows (%d orphaned notifications)",
        retention_class.value,
        deleted,
        orphans,
    )
    return CleanupResult(retention_class=retention_class, deleted_count=deleted)


def cleanup_expired(session: Session) -> CleanupResult:
    """Delete every notification whose expiry has passed, whatever its state."""

    return _sweep(
        session,
        RetentionClass.EXPIRED,
        NotificationRepository(session).delete_expired,
    )


def cleanup_dismissed(session: Session, older_than_days: int | None = None) -> CleanupResult:
    """Delete receipts dismissed more than ``older_than_days`` days ago."""

    days = ensure_days(
        get_settings().retention_dismissed_days if older_than_days is None else older_than_days
    )
    cutoff = days_before_now_naive(days)
    return _sweep(
        session,
        RetentionClass.DISMISSED,
        lambda: ReceiptRepository(session).delete_dismissed_before(cutoff),
    )


def cleanup_read(session: Session, older_than_days: int | None = None) -> CleanupResult:
    """Delete read, not dismissed, receipts read more than ``older_than_days`` ago."""

    days = ensure_days(
        get_settings().retention_read_days if older_than_days is None else older_than_days
    )
    cutoff = days_before_now_naive(days)
    return _sweep(
        session,
        RetentionClass.READ,
        lambda: ReceiptRepository(session).delete_read_before(cutoff),
    )


def cleanup_unread(session: Session, older_than_days: int | None = None) -> CleanupResult:
    """Delete unread receipts created more than ``older_than_days`` days ago."""

    days = ensure_days(
        get_settings().retention_unread_days if older_than_days is None else older_than_days
    )
    cutoff = days_before_now_naive(days)
    return _sweep(
        session,
        RetentionClass.UNREAD,
        lambda: ReceiptRepository(session).delete_unread_created_before(cutoff),
    )


__all__ = [
    "cleanup_dismissed",
    "cleanup_expired",
    "cleanup_read",
    "cleanup_unread",
]
