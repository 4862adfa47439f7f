"""Persistence helpers for per-recipient notification receipts.

State changes are single conditional ``UPDATE`` statements whose ``WHERE``
clause encodes the allowed source states, so two actors racing on the same
receipt can never both apply a transition. Retention purges are predicate
deletes; they do not commit so the caller can pair them with orphan cleanup
in one transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from notification_service.domain.entities import NotificationRole, Receipt
from notification_service.infrastructure.models import NotificationModel, ReceiptModel
from notification_service.utils import ensure_app_timezone, now_in_app_naive_datetime


class ReceiptRepository:
    """Provide lookups, guarded transitions and purges for :class:`Receipt`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, receipt_id: int) -> Receipt | None:
        model = self.session.execute(
            select(ReceiptModel)
            .where(ReceiptModel.id == receipt_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            return None
        return self._to_entity(model)

    def list_for_notification(self, notification_id: int) -> list[Receipt]:
        query = (
            select(ReceiptModel)
            .where(ReceiptModel.notification_id == notification_id)
            .order_by(ReceiptModel.recipient_id)
        )
        return [self._to_entity(model) for model in self.session.scalars(query)]

    def mark_read(self, receipt_id: int) -> bool:
        """Move an unread receipt to read. Returns ``True`` when a row changed."""

        result = self.session.execute(
            update(ReceiptModel)
            .where(ReceiptModel.id == receipt_id)
            .where(ReceiptModel.is_read.is_(False))
            .where(ReceiptModel.is_dismissed.is_(False))
            .values(
                is_read=True,
                read_at=now_in_app_naive_datetime(),
                version=ReceiptModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    def dismiss(self, receipt_id: int) -> bool:
        """Move an unread or read receipt to dismissed."""

        result = self.session.execute(
            update(ReceiptModel)
            .where(ReceiptModel.id == receipt_id)
            .where(ReceiptModel.is_dismissed.is_(False))
            .values(
                is_dismissed=True,
                dismissed_at=now_in_app_naive_datetime(),
                version=ReceiptModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    def delete(self, receipt_id: int, notification_id: int) -> bool:
        """Delete a receipt and its notification when no other receipt remains."""

        result = self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.id == receipt_id)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .where(~self._has_receipts())
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    def mark_all_read(self, recipient_id: int, *, role: NotificationRole | None = None) -> int:
        """Mark every visible unread receipt of ``recipient_id`` as read."""

        query = (
            update(ReceiptModel)
            .where(ReceiptModel.recipient_id == recipient_id)
            .where(ReceiptModel.is_read.is_(False))
            .where(ReceiptModel.is_dismissed.is_(False))
        )
        if role is not None:
            query = query.where(
                ReceiptModel.notification_id.in_(
                    select(NotificationModel.id).where(NotificationModel.role == role.value)
                )
            )
        result = self.session.execute(
            query.values(
                is_read=True,
                read_at=now_in_app_naive_datetime(),
                version=ReceiptModel.version + 1,
            ).execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount

    def delete_all_for_recipient(self, recipient_id: int) -> int:
        result = self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.recipient_id == recipient_id)
            .execution_options(synchronize_session=False)
        )
        self.delete_orphan_notifications()
        self.session.commit()
        return result.rowcount

    def delete_dismissed_before(self, cutoff: datetime) -> int:
        result = self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.is_dismissed.is_(True))
            .where(ReceiptModel.dismissed_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_read_before(self, cutoff: datetime) -> int:
        result = self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.is_read.is_(True))
            .where(ReceiptModel.is_dismissed.is_(False))
            .where(ReceiptModel.read_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_unread_created_before(self, cutoff: datetime) -> int:
        result = self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.is_read.is_(False))
            .where(ReceiptModel.is_dismissed.is_(False))
            .where(ReceiptModel.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_orphan_notifications(self) -> int:
        """Delete notifications that no longer have any receipt."""

        result = self.session.execute(
            delete(NotificationModel)
            .where(~self._has_receipts())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def _has_receipts():
        return (
            select(ReceiptModel.id)
            .where(ReceiptModel.notification_id == NotificationModel.id)
            .correlate(NotificationModel)
            .exists()
        )

    @staticmethod
    def _to_entity(model: ReceiptModel) -> Receipt:
        return Receipt(
            id=model.id,
            notification_id=model.notification_id,
            recipient_id=model.recipient_id,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            is_dismissed=bool(model.is_dismissed),
            dismissed_at=ensure_app_timezone(model.dismissed_at),
            created_at=ensure_app_timezone(model.created_at),
            version=model.version,
        )


__all__ = ["ReceiptRepository"]
