"""Broadcast addressing: expand a role cohort into per-recipient receipts."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from notification_service.domain.entities import Notification, NotificationRole, Receipt
from notification_service.domain.errors import CohortResolutionFailure
from notification_service.infrastructure.directory import UserDirectory
from notification_service.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


def resolve_cohort(directory: UserDirectory, role: NotificationRole) -> list[int]:
    """Return the point-in-time member ids of ``role``.

    Any directory failure, and an empty cohort, abort the broadcast.
    """

    try:
        members = directory.resolve_cohort(role)
    except CohortResolutionFailure:
        raise
    except Exception as exc:
        logger.error("User directory lookup for role %s failed: %s", role.value, exc)
        raise CohortResolutionFailure(
            f"Could not resolve the members of role {role.value}"
        ) from exc

    recipients: list[int] = []
    seen: set[int] = set()
    for member in members:
        try:
            recipient_id = int(member)
        except (TypeError, ValueError) as exc:
            raise CohortResolutionFailure(
                f"User directory returned an invalid id {member!r} for role {role.value}"
            ) from exc
        if recipient_id not in seen:
            seen.add(recipient_id)
            recipients.append(recipient_id)

    if not recipients:
        raise CohortResolutionFailure(f"Role {role.value} has no members to notify")
    return recipients


def fanout(
    session: Session,
    notification: Notification,
    role: NotificationRole,
    *,
    directory: UserDirectory,
) -> tuple[Notification, list[Receipt]]:
    """Persist ``notification`` with one receipt per current member of ``role``.

    The cohort is frozen at this moment; later membership changes do not
    affect the broadcast.
    """

    recipients = resolve_cohort(directory, role)
    saved, receipts = NotificationRepository(session).create(notification, recipients)
    logger.info(
        "Broadcast notification %s fanned out to %d members of %s",
        saved.id,
        len(receipts),
        role.value,
    )
    return saved, receipts


__all__ = ["fanout", "resolve_cohort"]
