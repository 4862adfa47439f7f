"""Repository implementations for infrastructure layer."""

from .notification_query import SORTABLE_COLUMNS, NotificationQueryRepository
from .notification_repository import NotificationRepository
from .receipt_repository import ReceiptRepository

__all__ = [
    "NotificationQueryRepository",
    "NotificationRepository",
    "ReceiptRepository",
    "SORTABLE_COLUMNS",
]
