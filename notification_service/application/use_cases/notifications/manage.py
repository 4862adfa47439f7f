"""Use cases for reading, editing and deleting notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy.orm import Session

from notification_service.domain.entities import Notification, Receipt, TEMPLATE_FIELDS
from notification_service.domain.errors import AlreadyDeleted, NotFound, ValidationError
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.repositories import (
    NotificationRepository,
    ReceiptRepository,
)

from .validators import ensure_text

logger = logging.getLogger(__name__)


def get_notification(session: Session, notification_id: int) -> Notification:
    """Return the notification identified by ``notification_id`` or raise an error."""

    notification = NotificationRepository(session).get(notification_id)
    if notification is None:
        raise NotFound("Notification", notification_id)
    return notification


def list_receipts(session: Session, notification_id: int) -> list[Receipt]:
    get_notification(session, notification_id)
    return ReceiptRepository(session).list_for_notification(notification_id)


def update_notification_template(
    session: Session, notification_id: int, fields: Mapping[str, str | None]
) -> Notification:
    """Rewrite title, message or icon of an existing notification."""

    unknown = set(fields) - TEMPLATE_FIELDS
    if unknown:
        raise ValidationError(f"Fields {sorted(unknown)} cannot be edited after creation")
    if not fields:
        raise ValidationError("At least one of title, message or icon must be provided")

    cleaned: dict[str, str | None] = {}
    for name, value in fields.items():
        if name == "icon":
            cleaned[name] = value
        else:
            cleaned[name] = ensure_text(
                value, field_name=name, max_length=200 if name == "title" else 10_000
            )
    updated = NotificationRepository(session).update_template(notification_id, cleaned)
    logger.info("Notification %s template updated (%s)", notification_id, ", ".join(cleaned))
    return updated


def delete_notification(session: Session, notification_id: int) -> None:
    """Delete a notification and every receipt attached to it."""

    receipts = list_receipts(session, notification_id)
    if not NotificationRepository(session).delete(notification_id):
        raise AlreadyDeleted("Notification", notification_id)
    for receipt in receipts:
        counts_cache.invalidate(receipt.recipient_id)
    logger.info("Notification %s deleted with %d receipts", notification_id, len(receipts))


__all__ = [
    "delete_notification",
    "get_notification",
    "list_receipts",
    "update_notification_template",
]
