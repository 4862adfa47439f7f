"""Aggregate application use cases."""

from .notifications import (
    bulk_action,
    cleanup_dismissed,
    cleanup_expired,
    cleanup_read,
    cleanup_unread,
    create_notification,
    get_counts,
    search_notifications,
)

__all__ = [
    "bulk_action",
    "cleanup_dismissed",
    "cleanup_expired",
    "cleanup_read",
    "cleanup_unread",
    "create_notification",
    "get_counts",
    "search_notifications",
]
