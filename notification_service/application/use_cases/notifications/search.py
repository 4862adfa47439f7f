"""Use case for searching notification views."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_service.config import get_settings
from notification_service.domain.entities import (
    NotificationFilter,
    NotificationView,
    Page,
    SortDirection,
)
from notification_service.domain.errors import ValidationError
from notification_service.infrastructure.repositories import NotificationQueryRepository
from notification_service.utils import ensure_app_naive_datetime

from .validators import ensure_page_request


def search_notifications(
    session: Session,
    criteria: NotificationFilter | None = None,
    *,
    page: int = 0,
    page_size: int | None = None,
    sort_by: str = "created_at",
    sort_dir: SortDirection | str = SortDirection.DESC,
) -> Page[NotificationView]:
    """Return one page of notification views matching every given criterion.

    Dismissed receipts and expired notifications stay hidden unless the
    criteria explicitly include them.
    """

    settings = get_settings()
    criteria = criteria or NotificationFilter()
    size = page_size if page_size is not None else settings.default_page_size
    direction = ensure_page_request(
        page, size, sort_by, sort_dir, max_page_size=settings.max_page_size
    )
    date_from = ensure_app_naive_datetime(criteria.date_from)
    date_to = ensure_app_naive_datetime(criteria.date_to)
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationError("date_from must not be later than date_to")

    return NotificationQueryRepository(session).search(
        criteria, page=page, page_size=size, sort_by=sort_by, sort_dir=direction
    )


__all__ = ["search_notifications"]
