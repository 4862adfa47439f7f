"""Domain entity representing a notification and its enumerated attributes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationCategory(str, Enum):
    """Functional area a notification belongs to."""

    ORDER = "ORDER"
    FINANCE = "FINANCE"
    SUPPORT = "SUPPORT"
    SYSTEM = "SYSTEM"
    PROMOTION = "PROMOTION"
    ACCOUNT = "ACCOUNT"
    DELIVERY = "DELIVERY"
    RESTAURANT_OPS = "RESTAURANT_OPS"
    ALERT = "ALERT"


class NotificationRole(str, Enum):
    """Role cohorts a broadcast notification can be addressed to."""

    CUSTOMER = "CUSTOMER"
    COURIER = "COURIER"
    RESTAURANT = "RESTAURANT"
    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"
    FINANCE = "FINANCE"
    OPERATIONS = "OPERATIONS"
    ALL = "ALL"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class RelatedEntityType(str, Enum):
    ORDER = "ORDER"
    RESTAURANT = "RESTAURANT"
    COURIER = "COURIER"
    CUSTOMER = "CUSTOMER"
    SUPPORT_TICKET = "SUPPORT_TICKET"
    PAYMENT = "PAYMENT"
    PAYOUT = "PAYOUT"


# Fields an administrator may rewrite after creation.
TEMPLATE_FIELDS: frozenset[str] = frozenset({"title", "message", "icon"})


@dataclass
class Notification:
    """Content shared by every recipient of a notification.

    Exactly one of ``user_id`` (targeted) or ``role`` (broadcast) is set. Read
    and dismiss state never lives here; see :class:`Receipt`.
    """

    id: int | None
    category: NotificationCategory
    title: str
    message: str
    user_id: int | None = None
    role: NotificationRole | None = None
    icon: str | None = None
    action_url: str | None = None
    related_entity_type: RelatedEntityType | None = None
    related_entity_id: int | None = None
    order_id: int | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    def is_broadcast(self) -> bool:
        """Return ``True`` when the notification targets a role cohort."""

        return self.role is not None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


__all__ = [
    "Notification",
    "NotificationCategory",
    "NotificationPriority",
    "NotificationRole",
    "RelatedEntityType",
    "TEMPLATE_FIELDS",
]
