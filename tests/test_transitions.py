"""Tests for receipt state transitions, single and bulk."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy.orm import sessionmaker

from notification_service.application.use_cases.notifications import (
    bulk_action,
    create_notification,
    delete_all_for_user,
    delete_receipt,
    dismiss,
    get_counts,
    get_notification,
    list_receipts,
    mark_all_read,
    mark_read,
)
from notification_service.domain.entities import BulkAction, ReceiptState
from notification_service.domain.errors import NotFound, ValidationError
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.database import build_engine, initialize_database
from notification_service.infrastructure.repositories import ReceiptRepository


def _targeted_receipt_id(session, user_id: int = 1, **overrides) -> int:
    payload = {"category": "order", "title": "Order update", "message": "On its way"}
    payload.update(overrides)
    notification = create_notification(session, user_id=user_id, **payload)
    return list_receipts(session, notification.id)[0].id


def test_mark_read_is_idempotent(session):
    receipt_id = _targeted_receipt_id(session)

    first = mark_read(session, receipt_id)
    second = mark_read(session, receipt_id)

    assert first.state is ReceiptState.READ
    assert second.state is ReceiptState.READ
    assert second.read_at == first.read_at
    assert second.version == first.version == 2


def test_dismiss_directly_from_unread(session):
    receipt_id = _targeted_receipt_id(session)

    receipt = dismiss(session, receipt_id)

    assert receipt.state is ReceiptState.DISMISSED
    assert receipt.is_read is False
    assert receipt.dismissed_at is not None


def test_dismiss_after_read_keeps_read_timestamp(session):
    receipt_id = _targeted_receipt_id(session)
    read = mark_read(session, receipt_id)

    dismissed = dismiss(session, receipt_id)

    assert dismissed.state is ReceiptState.DISMISSED
    assert dismissed.read_at == read.read_at


def test_dismissed_receipt_cannot_go_back_to_read(session):
    receipt_id = _targeted_receipt_id(session)
    dismissed = dismiss(session, receipt_id)

    after = mark_read(session, receipt_id)

    assert after.state is ReceiptState.DISMISSED
    assert after.is_read is False
    assert after.version == dismissed.version


def test_transitions_on_missing_receipt_raise_not_found(session):
    with pytest.raises(NotFound):
        mark_read(session, 12345)
    with pytest.raises(NotFound):
        dismiss(session, 12345)
    with pytest.raises(NotFound):
        delete_receipt(session, 12345)


def test_deleting_last_receipt_removes_notification(session):
    notification = create_notification(
        session, category="finance", title="Payout", message="Sent", user_id=3
    )
    receipt_id = list_receipts(session, notification.id)[0].id

    delete_receipt(session, receipt_id)

    with pytest.raises(NotFound):
        get_notification(session, notification.id)


def test_deleting_one_broadcast_receipt_keeps_the_others(session, directory):
    notification = create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
    )
    receipts = list_receipts(session, notification.id)

    delete_receipt(session, receipts[0].id)

    remaining = list_receipts(session, notification.id)
    assert [receipt.id for receipt in remaining] == [receipt.id for receipt in receipts[1:]]


def test_bulk_delete_reports_missing_ids_as_failed(session):
    first = _targeted_receipt_id(session, user_id=1)
    third = _targeted_receipt_id(session, user_id=2)
    missing = third + 1000

    result = bulk_action(session, [first, missing, third], BulkAction.DELETE)

    assert result.requested_count == 3
    assert result.affected_count == 2
    assert result.skipped_count == 0
    assert [(failure.id, failure.reason) for failure in result.failed] == [
        (missing, "NOT_FOUND")
    ]


def test_bulk_mark_read_skips_receipts_already_read(session):
    already_read = _targeted_receipt_id(session, user_id=1)
    unread = _targeted_receipt_id(session, user_id=2)
    mark_read(session, already_read)

    result = bulk_action(session, [already_read, unread, unread], "MARK_READ")

    assert result.requested_count == 2
    assert result.affected_count == 1
    assert result.skipped_count == 1
    assert result.failed == []


def test_bulk_dismiss_applies_to_read_and_unread(session):
    read = _targeted_receipt_id(session, user_id=1)
    unread = _targeted_receipt_id(session, user_id=1)
    mark_read(session, read)

    result = bulk_action(session, [read, unread], "dismiss")

    assert result.affected_count == 2
    assert ReceiptRepository(session).get(read).state is ReceiptState.DISMISSED


def test_bulk_reports_concurrently_deleted_receipts_as_skipped(session, monkeypatch):
    receipt_id = _targeted_receipt_id(session)
    monkeypatch.setattr(ReceiptRepository, "delete", lambda self, rid, nid: False)

    result = bulk_action(session, [receipt_id], BulkAction.DELETE)

    assert result.affected_count == 0
    assert result.skipped_count == 1
    assert result.failed == []


def test_bulk_rejects_unknown_action(session):
    with pytest.raises(ValidationError):
        bulk_action(session, [1], "ARCHIVE")


def test_transitions_invalidate_cached_counts(session):
    receipt_id = _targeted_receipt_id(session, user_id=8)
    assert get_counts(session, 8).unread == 1
    assert 8 in counts_cache

    mark_read(session, receipt_id)

    assert 8 not in counts_cache
    assert get_counts(session, 8).unread == 0


def test_mark_all_read_for_user(session, directory):
    _targeted_receipt_id(session, user_id=10)
    create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
    )

    assert mark_all_read(session, 10, role="COURIER") == 1
    assert get_counts(session, 10).unread == 1
    assert mark_all_read(session, 10) == 1
    assert get_counts(session, 10).unread == 0


def test_delete_all_for_user_removes_orphaned_notifications(session, directory):
    targeted = create_notification(
        session, category="account", title="Welcome", message="Hi", user_id=10
    )
    broadcast = create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
    )

    assert delete_all_for_user(session, 10) == 2

    with pytest.raises(NotFound):
        get_notification(session, targeted.id)
    assert len(list_receipts(session, broadcast.id)) == 2


def test_concurrent_dismiss_applies_once(tmp_path):
    file_engine = build_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    initialize_database(file_engine)
    factory = sessionmaker(bind=file_engine, autocommit=False, autoflush=False)

    setup_session = factory()
    receipt_id = _targeted_receipt_id(setup_session)
    setup_session.close()

    barrier = threading.Barrier(2)
    results = []
    errors = []

    def worker():
        db = factory()
        try:
            barrier.wait()
            results.append(dismiss(db, receipt_id))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    file_engine.dispose()

    assert errors == []
    assert [receipt.state for receipt in results] == [ReceiptState.DISMISSED] * 2
    assert results[0].dismissed_at == results[1].dismissed_at
    assert {receipt.version for receipt in results} == {2}
