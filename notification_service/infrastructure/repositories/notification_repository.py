"""Persistence helpers for notification entities and their receipts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationPriority,
    NotificationRole,
    Receipt,
    RelatedEntityType,
    TEMPLATE_FIELDS,
)
from notification_service.domain.errors import AlreadyDeleted, NotFound, ValidationError
from notification_service.infrastructure.models import NotificationModel, ReceiptModel
from notification_service.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)

from .receipt_repository import ReceiptRepository

logger = logging.getLogger(__name__)

_MAX_TEMPLATE_ATTEMPTS = 3


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id, populate_existing=True)
        return self._to_entity(model) if model else None

    def create(
        self, notification: Notification, recipients: Iterable[int]
    ) -> tuple[Notification, list[Receipt]]:
        """Persist ``notification`` and one receipt per recipient in one transaction.

        Either the notification and every receipt become visible, or nothing does.
        """

        recipient_ids = list(dict.fromkeys(int(recipient) for recipient in recipients))
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        created_at = model.created_at
        model.receipts = [
            ReceiptModel(
                recipient_id=recipient_id,
                is_read=False,
                is_dismissed=False,
                created_at=created_at,
                version=1,
            )
            for recipient_id in recipient_ids
        ]
        try:
            self.session.add(model)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.refresh(model)
        receipts = [ReceiptRepository._to_entity(receipt) for receipt in model.receipts]
        return self._to_entity(model), receipts

    def update_template(
        self, notification_id: int, fields: Mapping[str, str | None]
    ) -> Notification:
        """Rewrite the editable template fields guarded by the row version."""

        unknown = set(fields) - TEMPLATE_FIELDS
        if unknown:
            msg = f"Fields {sorted(unknown)} cannot be edited after creation"
            raise ValidationError(msg)

        for attempt in range(_MAX_TEMPLATE_ATTEMPTS):
            current = self.get(notification_id)
            if current is None:
                if attempt == 0:
                    raise NotFound("Notification", notification_id)
                raise AlreadyDeleted("Notification", notification_id)

            values = {getattr(NotificationModel, name): value for name, value in fields.items()}
            values[NotificationModel.updated_at] = now_in_app_naive_datetime()
            values[NotificationModel.version] = NotificationModel.version + 1
            result = self.session.execute(
                update(NotificationModel)
                .where(NotificationModel.id == notification_id)
                .where(NotificationModel.version == current.version)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
            if result.rowcount == 1:
                self.session.expire_all()
                updated = self.get(notification_id)
                if updated is None:
                    raise AlreadyDeleted("Notification", notification_id)
                return updated
            logger.warning(
                "Template update of notification %s lost a version race; retrying",
                notification_id,
            )
            self.session.expire_all()

        if self.get(notification_id) is None:
            raise AlreadyDeleted("Notification", notification_id)
        msg = f"Notification {notification_id} kept changing; template update abandoned"
        raise ValidationError(msg)

    def delete(self, notification_id: int) -> bool:
        """Delete the notification and its receipts.

        Returns ``False`` when no row matched, e.g. after a concurrent purge.
        """

        self.session.execute(
            delete(ReceiptModel).where(ReceiptModel.notification_id == notification_id)
        )
        result = self.session.execute(
            delete(NotificationModel).where(NotificationModel.id == notification_id)
        )
        self.session.commit()
        return result.rowcount > 0

    def delete_expired(self) -> int:
        """Delete every notification past its expiry together with its receipts.

        The caller owns the transaction.
        """

        now = now_in_app_naive_datetime()
        expired_ids = (
            select(NotificationModel.id)
            .where(NotificationModel.expires_at.is_not(None))
            .where(NotificationModel.expires_at < now)
        )
        self.session.execute(
            delete(ReceiptModel)
            .where(ReceiptModel.notification_id.in_(expired_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(
            delete(NotificationModel)
            .where(NotificationModel.expires_at.is_not(None))
            .where(NotificationModel.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(
            notification.created_at
        ) or now_in_app_naive_datetime()
        model.category = NotificationCategory(notification.category).value
        model.title = notification.title
        model.message = notification.message
        model.icon = notification.icon
        model.action_url = notification.action_url
        model.related_entity_type = (
            RelatedEntityType(notification.related_entity_type).value
            if notification.related_entity_type
            else None
        )
        model.related_entity_id = notification.related_entity_id
        model.order_id = notification.order_id
        model.priority = NotificationPriority(
            notification.priority or NotificationPriority.NORMAL
        ).value
        model.user_id = notification.user_id
        model.role = NotificationRole(notification.role).value if notification.role else None
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        model.version = 1

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            category=NotificationCategory(model.category),
            title=model.title,
            message=model.message,
            user_id=model.user_id,
            role=NotificationRole(model.role) if model.role else None,
            icon=model.icon,
            action_url=model.action_url,
            related_entity_type=(
                RelatedEntityType(model.related_entity_type)
                if model.related_entity_type
                else None
            ),
            related_entity_id=model.related_entity_id,
            order_id=model.order_id,
            priority=NotificationPriority(model.priority or NotificationPriority.NORMAL.value),
            expires_at=ensure_app_timezone(model.expires_at),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            version=model.version,
        )


__all__ = ["NotificationRepository"]
