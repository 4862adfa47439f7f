"""Read-only queries joining notifications with their receipts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    NotificationCategory,
    NotificationCounts,
    NotificationFilter,
    NotificationPriority,
    NotificationRole,
    NotificationView,
    Page,
    RelatedEntityType,
    SortDirection,
)
from notification_service.infrastructure.models import NotificationModel, ReceiptModel
from notification_service.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)

_PRIORITY_RANK = case(
    {
        NotificationPriority.LOW.value: 0,
        NotificationPriority.NORMAL.value: 1,
        NotificationPriority.HIGH.value: 2,
        NotificationPriority.URGENT.value: 3,
    },
    value=NotificationModel.priority,
    else_=1,
)

SORTABLE_COLUMNS = {
    "created_at": NotificationModel.created_at,
    "id": ReceiptModel.id,
    "priority": _PRIORITY_RANK,
}


class NotificationQueryRepository:
    """Serve filtered, sorted and paginated views of notification receipts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def search(
        self,
        criteria: NotificationFilter,
        *,
        page: int,
        page_size: int,
        sort_by: str = "created_at",
        sort_dir: SortDirection = SortDirection.DESC,
    ) -> Page[NotificationView]:
        """Return one page of views plus totals computed from the same predicate."""

        conditions = self._conditions(criteria, now_in_app_naive_datetime())

        count_query = (
            select(func.count(ReceiptModel.id))
            .select_from(ReceiptModel)
            .join(NotificationModel, ReceiptModel.notification_id == NotificationModel.id)
            .where(*conditions)
        )
        total = self.session.execute(count_query).scalar_one()

        sort_column = SORTABLE_COLUMNS[sort_by]
        if sort_dir == SortDirection.ASC:
            ordering = (sort_column.asc(), ReceiptModel.id.asc())
        else:
            ordering = (sort_column.desc(), ReceiptModel.id.desc())

        query: Select = (
            self._joined()
            .where(*conditions)
            .order_by(*ordering)
            .offset(page * page_size)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )
        content = [
            self._to_view(notification, receipt)
            for notification, receipt in self.session.execute(query).all()
        ]
        return Page(content=content, page=page, page_size=page_size, total_elements=total)

    def counts_for_recipient(self, recipient_id: int) -> NotificationCounts:
        """Return total/unread counts over the recipient's visible receipts."""

        conditions = self._conditions(
            NotificationFilter(user_id=recipient_id), now_in_app_naive_datetime()
        )
        next_expiry_at = self.session.execute(
            select(func.min(NotificationModel.expires_at))
            .select_from(ReceiptModel)
            .join(NotificationModel, ReceiptModel.notification_id == NotificationModel.id)
            .where(*conditions)
        ).scalar_one()
        unread_flag = case((ReceiptModel.is_read.is_(False), 1), else_=0)
        query = (
            select(
                NotificationModel.category,
                func.count(ReceiptModel.id),
                func.coalesce(func.sum(unread_flag), 0),
            )
            .select_from(ReceiptModel)
            .join(NotificationModel, ReceiptModel.notification_id == NotificationModel.id)
            .where(*conditions)
            .group_by(NotificationModel.category)
        )
        total = 0
        unread = 0
        by_category = {category: 0 for category in NotificationCategory}
        for category, category_total, category_unread in self.session.execute(query).all():
            total += category_total
            unread += int(category_unread)
            by_category[NotificationCategory(category)] = int(category_unread)
        return NotificationCounts(
            total=total,
            unread=unread,
            by_category=by_category,
            next_expiry_at=ensure_app_timezone(next_expiry_at),
        )

    def unread_count(self, recipient_id: int, *, role: NotificationRole | None = None) -> int:
        criteria = NotificationFilter(user_id=recipient_id, role=role, is_read=False)
        query = (
            select(func.count(ReceiptModel.id))
            .select_from(ReceiptModel)
            .join(NotificationModel, ReceiptModel.notification_id == NotificationModel.id)
            .where(*self._conditions(criteria, now_in_app_naive_datetime()))
        )
        return self.session.execute(query).scalar_one()

    @staticmethod
    def _joined() -> Select:
        return select(NotificationModel, ReceiptModel).join(
            ReceiptModel, ReceiptModel.notification_id == NotificationModel.id
        )

    @staticmethod
    def _conditions(criteria: NotificationFilter, now: datetime) -> list:
        conditions: list = []
        if criteria.user_id is not None:
            conditions.append(ReceiptModel.recipient_id == criteria.user_id)
        if criteria.role is not None:
            conditions.append(NotificationModel.role == NotificationRole(criteria.role).value)
        if criteria.category is not None:
            conditions.append(
                NotificationModel.category == NotificationCategory(criteria.category).value
            )
        if criteria.priority is not None:
            conditions.append(
                NotificationModel.priority == NotificationPriority(criteria.priority).value
            )
        if criteria.order_id is not None:
            conditions.append(NotificationModel.order_id == criteria.order_id)
        if criteria.is_read is not None:
            conditions.append(ReceiptModel.is_read.is_(criteria.is_read))
        if criteria.date_from is not None:
            conditions.append(
                NotificationModel.created_at >= ensure_app_naive_datetime(criteria.date_from)
            )
        if criteria.date_to is not None:
            conditions.append(
                NotificationModel.created_at <= ensure_app_naive_datetime(criteria.date_to)
            )
        term = (criteria.search_term or "").strip()
        if term:
            conditions.append(
                or_(
                    NotificationModel.title.icontains(term, autoescape=True),
                    NotificationModel.message.icontains(term, autoescape=True),
                )
            )
        if not criteria.include_dismissed:
            conditions.append(ReceiptModel.is_dismissed.is_(False))
        if not criteria.include_expired:
            conditions.append(
                or_(NotificationModel.expires_at.is_(None), NotificationModel.expires_at >= now)
            )
        return conditions

    @staticmethod
    def _to_view(notification: NotificationModel, receipt: ReceiptModel) -> NotificationView:
        return NotificationView(
            id=receipt.id,
            notification_id=notification.id,
            recipient_id=receipt.recipient_id,
            category=NotificationCategory(notification.category),
            title=notification.title,
            message=notification.message,
            user_id=notification.user_id,
            role=NotificationRole(notification.role) if notification.role else None,
            icon=notification.icon,
            action_url=notification.action_url,
            related_entity_type=(
                RelatedEntityType(notification.related_entity_type)
                if notification.related_entity_type
                else None
            ),
            related_entity_id=notification.related_entity_id,
            order_id=notification.order_id,
            priority=NotificationPriority(notification.priority),
            is_read=bool(receipt.is_read),
            read_at=ensure_app_timezone(receipt.read_at),
            is_dismissed=bool(receipt.is_dismissed),
            dismissed_at=ensure_app_timezone(receipt.dismissed_at),
            created_at=ensure_app_timezone(notification.created_at),
            expires_at=ensure_app_timezone(notification.expires_at),
        )


__all__ = ["NotificationQueryRepository", "SORTABLE_COLUMNS"]
