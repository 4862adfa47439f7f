"""Use cases managing the lifecycle of notifications and their receipts."""

from .counts import get_counts, get_unread_count
from .create import create_notification
from .fanout import fanout, resolve_cohort
from .manage import (
    delete_notification,
    get_notification,
    list_receipts,
    update_notification_template,
)
from .retention import (
    cleanup_dismissed,
    cleanup_expired,
    cleanup_read,
    cleanup_unread,
)
from .search import search_notifications
from .transitions import (
    bulk_action,
    delete_all_for_user,
    delete_receipt,
    dismiss,
    mark_all_read,
    mark_read,
)

__all__ = [
    "bulk_action",
    "cleanup_dismissed",
    "cleanup_expired",
    "cleanup_read",
    "cleanup_unread",
    "create_notification",
    "delete_all_for_user",
    "delete_notification",
    "delete_receipt",
    "dismiss",
    "fanout",
    "get_counts",
    "get_notification",
    "get_unread_count",
    "list_receipts",
    "mark_all_read",
    "mark_read",
    "resolve_cohort",
    "search_notifications",
    "update_notification_template",
]
