"""Use case for creating targeted and broadcast notifications."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationPriority,
    NotificationRole,
    RelatedEntityType,
)
from notification_service.domain.errors import ValidationError
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.directory import UserDirectory
from notification_service.infrastructure.repositories import NotificationRepository
from notification_service.utils import now_in_app_timezone

from .fanout import fanout
from .validators import (
    coerce_enum,
    coerce_optional_enum,
    ensure_single_target,
    ensure_text,
)

logger = logging.getLogger(__name__)


def create_notification(
    session: Session,
    *,
    category: NotificationCategory | str,
    title: str,
    message: str,
    user_id: int | None = None,
    role: NotificationRole | str | None = None,
    priority: NotificationPriority | str | None = None,
    expires_at: datetime | None = None,
    icon: str | None = None,
    action_url: str | None = None,
    related_entity_type: RelatedEntityType | str | None = None,
    related_entity_id: int | None = None,
    order_id: int | None = None,
    directory: UserDirectory | None = None,
) -> Notification:
    """Create a notification together with all of its receipts.

    A targeted notification gets exactly one receipt; a broadcast gets one per
    member of the role cohort resolved through ``directory``.
    """

    resolved_role = coerce_optional_enum(NotificationRole, role, field_name="role")
    ensure_single_target(user_id, resolved_role)
    notification = Notification(
        id=None,
        category=coerce_enum(NotificationCategory, category, field_name="category"),
        title=ensure_text(title, field_name="title", max_length=200),
        message=ensure_text(message, field_name="message", max_length=10_000),
        user_id=user_id,
        role=resolved_role,
        icon=icon,
        action_url=action_url,
        related_entity_type=coerce_optional_enum(
            RelatedEntityType, related_entity_type, field_name="related_entity_type"
        ),
        related_entity_id=related_entity_id,
        order_id=order_id,
        priority=coerce_optional_enum(NotificationPriority, priority, field_name="priority")
        or NotificationPriority.NORMAL,
        expires_at=expires_at,
        created_at=now_in_app_timezone(),
    )
    if (notification.related_entity_type is None) != (related_entity_id is None):
        raise ValidationError(
            "related_entity_type and related_entity_id must be provided together"
        )

    if notification.role is not None:
        if directory is None:
            raise ValidationError("A user directory is required to broadcast to a role")
        saved, receipts = fanout(session, notification, notification.role, directory=directory)
    else:
        saved, receipts = NotificationRepository(session).create(
            notification, [notification.user_id]
        )
        logger.info("Notification %s created for user %s", saved.id, saved.user_id)

    for receipt in receipts:
        counts_cache.invalidate(receipt.recipient_id)
    return saved


__all__ = ["create_notification"]
