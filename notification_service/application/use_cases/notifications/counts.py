"""Use cases computing badge counts from the current receipt state."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_service.domain.entities import NotificationCounts, NotificationRole
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.repositories import NotificationQueryRepository
from notification_service.utils import now_in_app_timezone

from .validators import coerce_optional_enum


def get_counts(session: Session, user_id: int) -> NotificationCounts:
    """Return total, unread and per-category unread counts for ``user_id``.

    A cached value is dropped once one of the notifications it counted has
    expired, so expiry is reflected without waiting for the cache TTL.
    """

    repository = NotificationQueryRepository(session)
    counts = counts_cache.get_or_compute(
        user_id, lambda: repository.counts_for_recipient(user_id)
    )
    if counts.next_expiry_at is not None and now_in_app_timezone() > counts.next_expiry_at:
        counts_cache.invalidate(user_id)
        counts = counts_cache.get_or_compute(
            user_id, lambda: repository.counts_for_recipient(user_id)
        )
    return counts


def get_unread_count(
    session: Session, user_id: int, *, role: NotificationRole | str | None = None
) -> int:
    resolved_role = coerce_optional_enum(NotificationRole, role, field_name="role")
    if resolved_role is None:
        return get_counts(session, user_id).unread
    return NotificationQueryRepository(session).unread_count(user_id, role=resolved_role)


__all__ = ["get_counts", "get_unread_count"]
