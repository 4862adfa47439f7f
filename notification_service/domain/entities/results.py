"""Value objects returned by queries and commands over notifications."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from .notification import (
    NotificationCategory,
    NotificationPriority,
    NotificationRole,
    RelatedEntityType,
)
from .receipt import ReceiptState
from .retention import RetentionClass

T = TypeVar("T")


class BulkAction(str, Enum):
    MARK_READ = "MARK_READ"
    DISMISS = "DISMISS"
    DELETE = "DELETE"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass
class NotificationFilter:
    """Conjunctive search criteria; ``None`` leaves a dimension unconstrained."""

    user_id: int | None = None
    role: NotificationRole | None = None
    category: NotificationCategory | None = None
    priority: NotificationPriority | None = None
    is_read: bool | None = None
    order_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search_term: str | None = None
    include_dismissed: bool = False
    include_expired: bool = False


@dataclass
class NotificationView:
    """A notification joined with one recipient's receipt."""

    id: int
    notification_id: int
    recipient_id: int
    category: NotificationCategory
    title: str
    message: str
    user_id: int | None
    role: NotificationRole | None
    icon: str | None
    action_url: str | None
    related_entity_type: RelatedEntityType | None
    related_entity_id: int | None
    order_id: int | None
    priority: NotificationPriority
    is_read: bool
    read_at: datetime | None
    is_dismissed: bool
    dismissed_at: datetime | None
    created_at: datetime | None
    expires_at: datetime | None

    @property
    def state(self) -> ReceiptState:
        if self.is_dismissed:
            return ReceiptState.DISMISSED
        if self.is_read:
            return ReceiptState.READ
        return ReceiptState.UNREAD


@dataclass
class Page(Generic[T]):
    content: list[T]
    page: int
    page_size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.total_elements == 0:
            return 0
        return math.ceil(self.total_elements / self.page_size)


@dataclass
class BulkActionFailure:
    id: int
    reason: str


@dataclass
class BulkActionResult:
    """Outcome of a bulk command; never assumed fully successful."""

    action: BulkAction
    requested_count: int = 0
    affected_count: int = 0
    skipped_count: int = 0
    failed: list[BulkActionFailure] = field(default_factory=list)


@dataclass
class CleanupResult:
    retention_class: RetentionClass
    deleted_count: int


@dataclass
class NotificationCounts:
    """Badge counts of one recipient.

    ``next_expiry_at`` is the earliest expiry among the counted notifications;
    past that instant the counts are stale.
    """

    total: int
    unread: int
    by_category: dict[NotificationCategory, int] = field(default_factory=dict)
    next_expiry_at: datetime | None = None


__all__ = [
    "BulkAction",
    "BulkActionFailure",
    "BulkActionResult",
    "CleanupResult",
    "NotificationCounts",
    "NotificationFilter",
    "NotificationView",
    "Page",
    "SortDirection",
]
