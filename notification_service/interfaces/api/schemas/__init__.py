from .notification import (
    BulkActionFailureRead,
    BulkActionRequest,
    BulkActionResponse,
    CleanupResponse,
    DeleteAllResponse,
    MarkAllReadResponse,
    NotificationCountsRead,
    NotificationCreate,
    NotificationEnumsRead,
    NotificationPage,
    NotificationRead,
    NotificationSearchRequest,
    NotificationTemplateUpdate,
    NotificationViewRead,
    ReceiptRead,
    UnreadCountRead,
)

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
