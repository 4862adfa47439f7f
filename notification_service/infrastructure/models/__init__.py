"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .receipt import ReceiptModel
from .user_directory import UserDirectoryEntryModel

__all__ = [
    "NotificationModel",
    "ReceiptModel",
    "UserDirectoryEntryModel",
]
