"""Receipt state transitions: mark read, dismiss and delete, single and bulk.

Each receipt moves forward only (``UNREAD -> READ -> DISMISSED`` or directly
``UNREAD -> DISMISSED``). The allowed source states are enforced by the
conditional update in :class:`ReceiptRepository`, so a repeated or racing
call finds nothing to change and returns the current state unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    BulkAction,
    BulkActionFailure,
    BulkActionResult,
    NotificationRole,
    Receipt,
)
from notification_service.domain.errors import AlreadyDeleted, NotFound
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.repositories import ReceiptRepository

from .validators import coerce_enum, coerce_optional_enum

logger = logging.getLogger(__name__)


def _transition(
    session: Session,
    receipt_id: int,
    apply: Callable[[ReceiptRepository, int], bool],
) -> tuple[Receipt, bool]:
    repository = ReceiptRepository(session)
    if repository.get(receipt_id) is None:
        raise NotFound("Receipt", receipt_id)

    applied = apply(repository, receipt_id)
    resulting = repository.get(receipt_id)
    if resulting is None:
        raise AlreadyDeleted("Receipt", receipt_id)
    if applied:
        counts_cache.invalidate(resulting.recipient_id)
    return resulting, applied


def mark_read(session: Session, receipt_id: int) -> Receipt:
    """Mark a receipt as read; already read or dismissed receipts are left as is."""

    receipt, applied = _transition(session, receipt_id, ReceiptRepository.mark_read)
    if applied:
        logger.debug("Receipt %s marked as read", receipt_id)
    return receipt


def dismiss(session: Session, receipt_id: int) -> Receipt:
    """Dismiss a receipt from either the unread or the read state."""

    receipt, applied = _transition(session, receipt_id, ReceiptRepository.dismiss)
    if applied:
        logger.debug("Receipt %s dismissed", receipt_id)
    return receipt


def delete_receipt(session: Session, receipt_id: int) -> None:
    """Delete a receipt, and its notification if it was the last receipt."""

    repository = ReceiptRepository(session)
    receipt = repository.get(receipt_id)
    if receipt is None:
        raise NotFound("Receipt", receipt_id)
    if not repository.delete(receipt_id, receipt.notification_id):
        raise AlreadyDeleted("Receipt", receipt_id)
    counts_cache.invalidate(receipt.recipient_id)


def bulk_action(
    session: Session, ids: Iterable[int], action: BulkAction | str
) -> BulkActionResult:
    """Apply ``action`` to every receipt id independently.

    Per-id problems are collected in the result: unknown ids are reported as
    failed, ids already in the target state or deleted concurrently as skipped.
    Only store-wide failures propagate.
    """

    bulk = coerce_enum(BulkAction, action, field_name="action")
    unique_ids = list(dict.fromkeys(ids))
    result = BulkActionResult(action=bulk, requested_count=len(unique_ids))

    for receipt_id in unique_ids:
        try:
            if bulk == BulkAction.DELETE:
                delete_receipt(session, receipt_id)
                applied = True
            elif bulk == BulkAction.MARK_READ:
                _, applied = _transition(session, receipt_id, ReceiptRepository.mark_read)
            else:
                _, applied = _transition(session, receipt_id, ReceiptRepository.dismiss)
        except NotFound as exc:
            result.failed.append(BulkActionFailure(id=receipt_id, reason=exc.code))
            continue
        except AlreadyDeleted:
            logger.warning("Receipt %s vanished during bulk %s", receipt_id, bulk.value)
            result.skipped_count += 1
            continue

        if applied:
            result.affected_count += 1
        else:
            result.skipped_count += 1

    logger.info(
        "Bulk %s: %d of %d affected, %d skipped, %d failed",
        bulk.value,
        result.affected_count,
        result.requested_count,
        result.skipped_count,
        len(result.failed),
    )
    return result


def mark_all_read(
    session: Session, user_id: int, *, role: NotificationRole | str | None = None
) -> int:
    """Mark every visible unread receipt of ``user_id`` as read."""

    resolved_role = coerce_optional_enum(NotificationRole, role, field_name="role")
    marked = ReceiptRepository(session).mark_all_read(user_id, role=resolved_role)
    counts_cache.invalidate(user_id)
    logger.info("Marked %d receipts as read for user %s", marked, user_id)
    return marked


def delete_all_for_user(session: Session, user_id: int) -> int:
    """Delete every receipt of ``user_id`` and notifications left without receipts."""

    deleted = ReceiptRepository(session).delete_all_for_recipient(user_id)
    counts_cache.invalidate(user_id)
    logger.info("Deleted %d receipts of user %s", deleted, user_id)
    return deleted


__all__ = [
    "bulk_action",
    "delete_all_for_user",
    "delete_receipt",
    "dismiss",
    "mark_all_read",
    "mark_read",
]
