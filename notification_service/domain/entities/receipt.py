"""Domain entity tracking one recipient's lifecycle for a notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReceiptState(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    DISMISSED = "DISMISSED"


@dataclass
class Receipt:
    """Per-recipient read/dismiss state attached to a notification."""

    id: int | None
    notification_id: int
    recipient_id: int
    is_read: bool = False
    read_at: datetime | None = None
    is_dismissed: bool = False
    dismissed_at: datetime | None = None
    created_at: datetime | None = None
    version: int = 1

    @property
    def state(self) -> ReceiptState:
        if self.is_dismissed:
            return ReceiptState.DISMISSED
        if self.is_read:
            return ReceiptState.READ
        return ReceiptState.UNREAD


__all__ = ["Receipt", "ReceiptState"]
