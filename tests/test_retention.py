"""Tests for the retention sweeps and their scheduler registration."""

from __future__ import annotations

from datetime import timedelta

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import OperationalError

from notification_service.application.use_cases.notifications import (
    cleanup_dismissed,
    cleanup_expired,
    cleanup_read,
    cleanup_unread,
    create_notification,
    dismiss,
    get_counts,
    get_notification,
    list_receipts,
    mark_read,
)
from notification_service.config import get_settings
from notification_service.domain.entities import (
    Notification,
    NotificationCategory,
    Receipt,
    RetentionClass,
    retention_class_for,
)
from notification_service.domain.errors import NotFound, RetentionSweepFailure, ValidationError
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.repositories import ReceiptRepository
from notification_service.infrastructure.scheduler import register_retention_jobs, run_sweep
from notification_service.utils import now_in_app_naive_datetime


def _send(session, user_id: int = 1, **overrides):
    payload = {"category": "support", "title": "Ticket update", "message": "We replied"}
    payload.update(overrides)
    notification = create_notification(session, user_id=user_id, **payload)
    return notification, list_receipts(session, notification.id)[0]


def test_expired_notification_is_purged_with_receipts(session):
    notification, _ = _send(
        session, expires_at=now_in_app_naive_datetime() - timedelta(seconds=1)
    )
    live, _ = _send(session)

    result = cleanup_expired(session)

    assert result.retention_class is RetentionClass.EXPIRED
    assert result.deleted_count == 1
    with pytest.raises(NotFound):
        get_notification(session, notification.id)
    assert get_notification(session, live.id).id == live.id


def test_expired_sweep_keeps_unexpired_notifications(session):
    notification, receipt = _send(
        session, expires_at=now_in_app_naive_datetime() + timedelta(hours=1)
    )
    mark_read(session, receipt.id)

    assert cleanup_expired(session).deleted_count == 0
    assert get_notification(session, notification.id).id == notification.id


def test_expired_sweep_ignores_receipt_state(session, directory):
    past = now_in_app_naive_datetime() - timedelta(seconds=1)
    read_notification, read_receipt = _send(session, expires_at=past)
    dismissed_notification, dismissed_receipt = _send(session, expires_at=past)
    broadcast = create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
        expires_at=past,
    )
    broadcast_receipts = list_receipts(session, broadcast.id)
    mark_read(session, read_receipt.id)
    dismiss(session, dismissed_receipt.id)
    mark_read(session, broadcast_receipts[0].id)
    dismiss(session, broadcast_receipts[1].id)

    result = cleanup_expired(session)

    assert result.deleted_count == 3
    for notification in (read_notification, dismissed_notification, broadcast):
        with pytest.raises(NotFound):
            get_notification(session, notification.id)
    repository = ReceiptRepository(session)
    for receipt in [read_receipt, dismissed_receipt, *broadcast_receipts]:
        assert repository.get(receipt.id) is None


def test_dismissed_sweep_uses_dismissal_age(session, backdate):
    _, old = _send(session)
    _, recent = _send(session)
    dismiss(session, old.id)
    dismiss(session, recent.id)
    now = now_in_app_naive_datetime()
    backdate.receipt(old.id, dismissed_at=now - timedelta(days=8))
    backdate.receipt(recent.id, dismissed_at=now - timedelta(days=6))

    first = cleanup_dismissed(session, 7)
    second = cleanup_dismissed(session, 7)

    assert first.deleted_count == 1
    assert second.deleted_count == 0
    repository = ReceiptRepository(session)
    assert repository.get(old.id) is None
    assert repository.get(recent.id) is not None


def test_read_sweep_skips_dismissed_and_unread(session, backdate):
    _, read = _send(session)
    _, read_then_dismissed = _send(session)
    _, unread = _send(session)
    mark_read(session, read.id)
    mark_read(session, read_then_dismissed.id)
    dismiss(session, read_then_dismissed.id)
    long_ago = now_in_app_naive_datetime() - timedelta(days=120)
    backdate.receipt(read.id, read_at=long_ago)
    backdate.receipt(read_then_dismissed.id, read_at=long_ago)
    backdate.receipt(unread.id, created_at=long_ago)

    result = cleanup_read(session, 90)

    assert result.deleted_count == 1
    repository = ReceiptRepository(session)
    assert repository.get(read.id) is None
    assert repository.get(read_then_dismissed.id) is not None
    assert repository.get(unread.id) is not None


def test_unread_sweep_uses_creation_age(session, backdate):
    stale_notification, stale = _send(session)
    _, fresh = _send(session)
    backdate.receipt(stale.id, created_at=now_in_app_naive_datetime() - timedelta(days=200))

    result = cleanup_unread(session, 180)

    assert result.deleted_count == 1
    with pytest.raises(NotFound):
        get_notification(session, stale_notification.id)
    assert ReceiptRepository(session).get(fresh.id) is not None


def test_broadcast_survives_while_any_receipt_remains(session, directory, backdate):
    broadcast = create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
    )
    receipts = list_receipts(session, broadcast.id)
    dismiss(session, receipts[0].id)
    backdate.receipt(
        receipts[0].id, dismissed_at=now_in_app_naive_datetime() - timedelta(days=30)
    )

    assert cleanup_dismissed(session, 7).deleted_count == 1
    assert len(list_receipts(session, broadcast.id)) == 2
    assert get_notification(session, broadcast.id).id == broadcast.id


def test_sweep_defaults_to_configured_threshold(session, backdate):
    _, receipt = _send(session)
    dismiss(session, receipt.id)
    days = get_settings().retention_dismissed_days
    backdate.receipt(
        receipt.id, dismissed_at=now_in_app_naive_datetime() - timedelta(days=days + 1)
    )

    assert cleanup_dismissed(session).deleted_count == 1


def test_negative_threshold_is_rejected(session):
    with pytest.raises(ValidationError):
        cleanup_read(session, -1)


def test_sweep_clears_cached_counts(session, backdate):
    _, receipt = _send(session, user_id=4)
    mark_read(session, receipt.id)
    get_counts(session, 4)
    assert 4 in counts_cache
    backdate.receipt(receipt.id, read_at=now_in_app_naive_datetime() - timedelta(days=100))

    cleanup_read(session, 90)

    assert 4 not in counts_cache
    assert get_counts(session, 4).total == 0


def test_failed_sweep_rolls_back(session, monkeypatch):
    _, receipt = _send(session)
    dismiss(session, receipt.id)

    def broken(self):
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(ReceiptRepository, "delete_orphan_notifications", broken)

    with pytest.raises(RetentionSweepFailure):
        cleanup_dismissed(session, 0)

    assert ReceiptRepository(session).get(receipt.id) is not None


def test_run_sweep_logs_failures_and_returns_none(session_factory):
    def failing(session):
        raise RetentionSweepFailure("boom")

    assert run_sweep(session_factory, failing, "cleanup_test") is None


def test_run_sweep_returns_result(session_factory):
    result = run_sweep(session_factory, cleanup_expired, "cleanup_expired")

    assert result.retention_class is RetentionClass.EXPIRED
    assert result.deleted_count == 0


def test_retention_jobs_are_registered_independently(session_factory):
    scheduler = BackgroundScheduler()

    job_ids = register_retention_jobs(scheduler, session_factory, get_settings())

    assert job_ids == [
        "cleanup_expired",
        "cleanup_dismissed",
        "cleanup_read",
        "cleanup_unread",
    ]
    assert sorted(job.id for job in scheduler.get_jobs()) == sorted(job_ids)


def test_retention_class_precedence():
    now = now_in_app_naive_datetime()
    notification = Notification(
        id=1, category=NotificationCategory.SYSTEM, title="t", message="m", user_id=1
    )
    expired = Notification(
        id=2,
        category=NotificationCategory.SYSTEM,
        title="t",
        message="m",
        user_id=1,
        expires_at=now - timedelta(seconds=1),
    )
    dismissed = Receipt(id=1, notification_id=1, recipient_id=1, is_read=True, is_dismissed=True)
    read = Receipt(id=2, notification_id=1, recipient_id=1, is_read=True)
    unread = Receipt(id=3, notification_id=1, recipient_id=1)

    assert retention_class_for(expired, dismissed, now) is RetentionClass.EXPIRED
    assert retention_class_for(notification, dismissed, now) is RetentionClass.DISMISSED
    assert retention_class_for(notification, read, now) is RetentionClass.READ
    assert retention_class_for(notification, unread, now) is RetentionClass.UNREAD
