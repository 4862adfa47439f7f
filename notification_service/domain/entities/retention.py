"""Derived retention classes governing how long records survive."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from .notification import Notification
from .receipt import Receipt


class RetentionClass(str, Enum):
    EXPIRED = "EXPIRED"
    DISMISSED = "DISMISSED"
    READ = "READ"
    UNREAD = "UNREAD"


def retention_class_for(
    notification: Notification, receipt: Receipt, now: datetime
) -> RetentionClass:
    """Return the retention class of ``receipt`` at instant ``now``.

    Expiry takes precedence over receipt state, and dismissal over reading.
    """

    if notification.is_expired(now):
        return RetentionClass.EXPIRED
    if receipt.is_dismissed:
        return RetentionClass.DISMISSED
    if receipt.is_read:
        return RetentionClass.READ
    return RetentionClass.UNREAD


__all__ = ["RetentionClass", "retention_class_for"]
