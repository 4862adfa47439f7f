"""Routes for creating, querying and maintaining notifications."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from notification_service.application.use_cases.notifications import (
    bulk_action as bulk_action_uc,
    cleanup_dismissed as cleanup_dismissed_uc,
    cleanup_expired as cleanup_expired_uc,
    cleanup_read as cleanup_read_uc,
    cleanup_unread as cleanup_unread_uc,
    create_notification as create_notification_uc,
    delete_all_for_user as delete_all_for_user_uc,
    delete_notification as delete_notification_uc,
    dismiss as dismiss_uc,
    get_counts as get_counts_uc,
    get_notification as get_notification_uc,
    get_unread_count as get_unread_count_uc,
    list_receipts as list_receipts_uc,
    mark_all_read as mark_all_read_uc,
    mark_read as mark_read_uc,
    search_notifications as search_notifications_uc,
    update_notification_template as update_notification_template_uc,
)
from notification_service.application.use_cases.notifications.validators import (
    coerce_optional_enum,
)
from notification_service.domain.entities import (
    BulkAction,
    BulkActionResult,
    CleanupResult,
    NotificationCategory,
    NotificationFilter,
    NotificationPriority,
    NotificationRole,
    NotificationView,
    Page,
    RelatedEntityType,
)
from notification_service.domain.errors import (
    AlreadyDeleted,
    CohortResolutionFailure,
    InvalidTarget,
    NotFound,
    NotificationError,
    RetentionSweepFailure,
    ValidationError,
)
from notification_service.infrastructure.database import get_db
from notification_service.infrastructure.directory import UserDirectory
from notification_service.interfaces.api.dependencies import get_user_directory
from notification_service.interfaces.api.schemas import (
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

router = APIRouter(prefix="/notifications", tags=["notifications"])

_ERROR_STATUS: dict[type[NotificationError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    AlreadyDeleted: status.HTTP_404_NOT_FOUND,
    InvalidTarget: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    CohortResolutionFailure: status.HTTP_502_BAD_GATEWAY,
    RetentionSweepFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _to_http_exception(exc: NotificationError) -> HTTPException:
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(
        status_code=status_code, detail={"code": exc.code, "message": str(exc)}
    )


def _build_filter(
    *,
    user_id: int | None,
    role: str | None,
    category: str | None,
    priority: str | None,
    is_read: bool | None,
    order_id: int | None,
    date_from: datetime | None,
    date_to: datetime | None,
    search_term: str | None,
    include_dismissed: bool,
    include_expired: bool,
) -> NotificationFilter:
    return NotificationFilter(
        user_id=user_id,
        role=coerce_optional_enum(NotificationRole, role, field_name="role"),
        category=coerce_optional_enum(NotificationCategory, category, field_name="category"),
        priority=coerce_optional_enum(NotificationPriority, priority, field_name="priority"),
        is_read=is_read,
        order_id=order_id,
        date_from=date_from,
        date_to=date_to,
        search_term=search_term,
        include_dismissed=include_dismissed,
        include_expired=include_expired,
    )


def _page_to_schema(page: Page[NotificationView]) -> NotificationPage:
    return NotificationPage(
        content=[NotificationViewRead.model_validate(view) for view in page.content],
        page=page.page,
        page_size=page.page_size,
        total_elements=page.total_elements,
        total_pages=page.total_pages,
    )


def _bulk_result_to_schema(result: BulkActionResult) -> BulkActionResponse:
    summary = f"{result.affected_count} of {result.requested_count} succeeded"
    if result.skipped_count:
        summary += f", {result.skipped_count} skipped"
    if result.failed:
        summary += f", {len(result.failed)} failed"
    return BulkActionResponse(
        action=result.action,
        requested_count=result.requested_count,
        affected_count=result.affected_count,
        skipped_count=result.skipped_count,
        failed=[BulkActionFailureRead.model_validate(failure) for failure in result.failed],
        summary=summary,
    )


def _cleanup_to_schema(result: CleanupResult) -> CleanupResponse:
    return CleanupResponse.model_validate(result)


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    directory: UserDirectory = Depends(get_user_directory),
) -> NotificationRead:
    """Create a notification for one user or broadcast it to a role."""

    try:
        notification = create_notification_uc(
            db, directory=directory, **payload.model_dump()
        )
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=NotificationPage)
def list_notifications(
    user_id: int | None = None,
    role: str | None = None,
    category: str | None = None,
    priority: str | None = None,
    is_read: bool | None = None,
    order_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    search_term: str | None = None,
    include_dismissed: bool = False,
    include_expired: bool = False,
    page: int = Query(0),
    page_size: int | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_dir: str = Query("DESC"),
    db: Session = Depends(get_db),
) -> NotificationPage:
    """Return a page of notifications matching the query string filters."""

    try:
        criteria = _build_filter(
            user_id=user_id,
            role=role,
            category=category,
            priority=priority,
            is_read=is_read,
            order_id=order_id,
            date_from=date_from,
            date_to=date_to,
            search_term=search_term,
            include_dismissed=include_dismissed,
            include_expired=include_expired,
        )
        result = search_notifications_uc(
            db,
            criteria,
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return _page_to_schema(result)


@router.post("/search", response_model=NotificationPage)
def search_notifications(
    request: NotificationSearchRequest,
    db: Session = Depends(get_db),
) -> NotificationPage:
    """Return a page of notifications matching the filters in the request body."""

    filters = request.model_dump(exclude={"page", "page_size", "sort_by", "sort_dir"})
    try:
        criteria = _build_filter(**filters)
        result = search_notifications_uc(
            db,
            criteria,
            page=request.page,
            page_size=request.page_size,
            sort_by=request.sort_by,
            sort_dir=request.sort_dir,
        )
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return _page_to_schema(result)


@router.get("/enums", response_model=NotificationEnumsRead)
def read_enums() -> NotificationEnumsRead:
    """Return the enumerated values accepted by the notification endpoints."""

    return NotificationEnumsRead(
        categories=[member.value for member in NotificationCategory],
        roles=[member.value for member in NotificationRole],
        priorities=[member.value for member in NotificationPriority],
        related_entity_types=[member.value for member in RelatedEntityType],
        bulk_actions=[member.value for member in BulkAction],
    )


@router.get("/counts/{user_id}", response_model=NotificationCountsRead)
def read_counts(user_id: int, db: Session = Depends(get_db)) -> NotificationCountsRead:
    """Return total, unread and per-category unread counts for a user."""

    counts = get_counts_uc(db, user_id)
    return NotificationCountsRead(
        total=counts.total, unread=counts.unread, by_category=counts.by_category
    )


@router.get("/unread-count/{user_id}", response_model=UnreadCountRead)
def read_unread_count(
    user_id: int,
    role: str | None = None,
    db: Session = Depends(get_db),
) -> UnreadCountRead:
    try:
        unread = get_unread_count_uc(db, user_id, role=role)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return UnreadCountRead(user_id=user_id, unread=unread)


@router.post("/bulk", response_model=BulkActionResponse)
def bulk_action(
    request: BulkActionRequest,
    db: Session = Depends(get_db),
) -> BulkActionResponse:
    """Apply one action to many receipts, reporting the outcome per id."""

    try:
        result = bulk_action_uc(db, request.ids, request.action)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return _bulk_result_to_schema(result)


@router.delete("/cleanup/expired", response_model=CleanupResponse)
def cleanup_expired(db: Session = Depends(get_db)) -> CleanupResponse:
    """Purge notifications whose expiry has passed."""

    try:
        return _cleanup_to_schema(cleanup_expired_uc(db))
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc


@router.delete("/cleanup/dismissed", response_model=CleanupResponse)
def cleanup_dismissed(
    days: int | None = Query(None, description="Minimum age in days since dismissal"),
    db: Session = Depends(get_db),
) -> CleanupResponse:
    try:
        return _cleanup_to_schema(cleanup_dismissed_uc(db, days))
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc


@router.delete("/cleanup/read", response_model=CleanupResponse)
def cleanup_read(
    days: int | None = Query(None, description="Minimum age in days since reading"),
    db: Session = Depends(get_db),
) -> CleanupResponse:
    try:
        return _cleanup_to_schema(cleanup_read_uc(db, days))
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc


@router.delete("/cleanup/unread", response_model=CleanupResponse)
def cleanup_unread(
    days: int | None = Query(None, description="Minimum age in days since creation"),
    db: Session = Depends(get_db),
) -> CleanupResponse:
    try:
        return _cleanup_to_schema(cleanup_unread_uc(db, days))
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc


@router.post("/receipts/{receipt_id}/read", response_model=ReceiptRead)
def mark_read(receipt_id: int, db: Session = Depends(get_db)) -> ReceiptRead:
    """Mark one receipt as read."""

    try:
        receipt = mark_read_uc(db, receipt_id)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return ReceiptRead.model_validate(receipt)


@router.post("/receipts/{receipt_id}/dismiss", response_model=ReceiptRead)
def dismiss(receipt_id: int, db: Session = Depends(get_db)) -> ReceiptRead:
    """Dismiss one receipt."""

    try:
        receipt = dismiss_uc(db, receipt_id)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return ReceiptRead.model_validate(receipt)


@router.post("/users/{user_id}/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    user_id: int,
    role: str | None = None,
    db: Session = Depends(get_db),
) -> MarkAllReadResponse:
    try:
        marked = mark_all_read_uc(db, user_id, role=role)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return MarkAllReadResponse(marked_count=marked)


@router.delete("/users/{user_id}", response_model=DeleteAllResponse)
def delete_all_for_user(user_id: int, db: Session = Depends(get_db)) -> DeleteAllResponse:
    return DeleteAllResponse(deleted_count=delete_all_for_user_uc(db, user_id))


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(notification_id: int, db: Session = Depends(get_db)) -> NotificationRead:
    """Return the notification identified by ``notification_id``."""

    try:
        notification = get_notification_uc(db, notification_id)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return NotificationRead.model_validate(notification)


@router.get("/{notification_id}/receipts", response_model=list[ReceiptRead])
def read_receipts(notification_id: int, db: Session = Depends(get_db)) -> list[ReceiptRead]:
    try:
        receipts = list_receipts_uc(db, notification_id)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return [ReceiptRead.model_validate(receipt) for receipt in receipts]


@router.patch("/{notification_id}", response_model=NotificationRead)
def update_notification_template(
    notification_id: int,
    payload: NotificationTemplateUpdate,
    db: Session = Depends(get_db),
) -> NotificationRead:
    """Rewrite the title, message or icon of a notification."""

    try:
        notification = update_notification_template_uc(
            db, notification_id, payload.model_dump(exclude_unset=True)
        )
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: int, db: Session = Depends(get_db)) -> Response:
    """Delete a notification together with all of its receipts."""

    try:
        delete_notification_uc(db, notification_id)
    except NotificationError as exc:
        raise _to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
