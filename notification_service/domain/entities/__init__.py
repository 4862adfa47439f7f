"""Domain entities exposed by the application."""

from .notification import (
    TEMPLATE_FIELDS,
    Notification,
    NotificationCategory,
    NotificationPriority,
    NotificationRole,
    RelatedEntityType,
)
from .receipt import Receipt, ReceiptState
from .retention import RetentionClass, retention_class_for
from .results import (
    BulkAction,
    BulkActionFailure,
    BulkActionResult,
    CleanupResult,
    NotificationCounts,
    NotificationFilter,
    NotificationView,
    Page,
    SortDirection,
)

__all__ = [
    "BulkAction",
    "BulkActionFailure",
    "BulkActionResult",
    "CleanupResult",
    "Notification",
    "NotificationCategory",
    "NotificationCounts",
    "NotificationFilter",
    "NotificationPriority",
    "NotificationRole",
    "NotificationView",
    "Page",
    "Receipt",
    "ReceiptState",
    "RelatedEntityType",
    "RetentionClass",
    "SortDirection",
    "TEMPLATE_FIELDS",
    "retention_class_for",
]
