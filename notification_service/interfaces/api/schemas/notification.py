"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notification_service.domain.entities import (
    BulkAction,
    NotificationCategory,
    NotificationPriority,
    NotificationRole,
    RelatedEntityType,
    RetentionClass,
)


class NotificationCreate(BaseModel):
    """Payload used to create a targeted or broadcast notification.

    Enumerated values are accepted as plain strings and validated by the use
    case so unknown values are reported as domain validation errors.
    """

    user_id: int | None = Field(default=None, description="Recipient of a targeted notification")
    role: str | None = Field(default=None, description="Role cohort of a broadcast")
    category: str
    title: str = Field(..., max_length=200)
    message: str
    icon: str | None = Field(default=None, max_length=60)
    action_url: str | None = Field(default=None, max_length=500)
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    order_id: int | None = None
    priority: str | None = None
    expires_at: datetime | None = None


class NotificationTemplateUpdate(BaseModel):
    """Editable template fields; omitted fields are left untouched."""

    title: str | None = Field(default=None, max_length=200)
    message: str | None = None
    icon: str | None = Field(default=None, max_length=60)


class NotificationRead(BaseModel):
    """Representation of notification content returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
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
    priority: NotificationPriority
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReceiptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_id: int
    recipient_id: int
    is_read: bool
    read_at: datetime | None = None
    is_dismissed: bool
    dismissed_at: datetime | None = None
    created_at: datetime | None = None


class NotificationViewRead(BaseModel):
    """A notification as seen by one recipient; ``id`` is the receipt id."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_id: int
    recipient_id: int
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
    priority: NotificationPriority
    is_read: bool
    read_at: datetime | None = None
    is_dismissed: bool
    dismissed_at: datetime | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None


class NotificationPage(BaseModel):
    content: list[NotificationViewRead]
    page: int
    page_size: int
    total_elements: int
    total_pages: int


class NotificationSearchRequest(BaseModel):
    """Body of the search endpoint; every filter is optional and combined with AND."""

    user_id: int | None = None
    role: str | None = None
    category: str | None = None
    priority: str | None = None
    is_read: bool | None = None
    order_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search_term: str | None = None
    include_dismissed: bool = False
    include_expired: bool = False
    page: int = 0
    page_size: int | None = None
    sort_by: str = "created_at"
    sort_dir: str = "DESC"


class BulkActionRequest(BaseModel):
    """Payload used to apply one action to a batch of receipts."""

    ids: list[int] = Field(..., min_length=1, description="Receipt identifiers")
    action: str


class BulkActionFailureRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reason: str


class BulkActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action: BulkAction
    requested_count: int
    affected_count: int
    skipped_count: int
    failed: list[BulkActionFailureRead]
    summary: str


class CleanupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    retention_class: RetentionClass
    deleted_count: int


class NotificationCountsRead(BaseModel):
    total: int
    unread: int
    by_category: dict[NotificationCategory, int]


class UnreadCountRead(BaseModel):
    user_id: int
    unread: int


class MarkAllReadResponse(BaseModel):
    marked_count: int


class DeleteAllResponse(BaseModel):
    deleted_count: int


class NotificationEnumsRead(BaseModel):
    categories: list[str]
    roles: list[str]
    priorities: list[str]
    related_entity_types: list[str]
    bulk_actions: list[str]


__all__ = [
    "BulkActionFailureRead",
    "BulkActionRequest",
    "BulkActionResponse",
    "CleanupResponse",
    "DeleteAllResponse",
    "MarkAllReadResponse",
    "NotificationCountsRead",
    "NotificationCreate",
    "NotificationEnumsRead",
    "NotificationPage",
    "NotificationRead",
    "NotificationSearchRequest",
    "NotificationTemplateUpdate",
    "NotificationViewRead",
    "ReceiptRead",
    "UnreadCountRead",
]
