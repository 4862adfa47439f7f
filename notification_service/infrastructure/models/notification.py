"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from notification_service.infrastructure.database import Base
from notification_service.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of notification content shared by its receipts."""

    __tablename__ = "notification"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (role IS NULL)",
            name="ck_notification_single_target",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(30), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    icon = Column(String(60), nullable=True)
    action_url = Column(String(500), nullable=True)
    related_entity_type = Column(String(30), nullable=True)
    related_entity_id = Column(Integer, nullable=True)
    order_id = Column(Integer, nullable=True, index=True)
    priority = Column(String(10), nullable=False, default="NORMAL")
    user_id = Column(Integer, nullable=True, index=True)
    role = Column(String(30), nullable=True, index=True)
    expires_at = Column(DateTime(), nullable=True, index=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    updated_at = Column(DateTime(), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    receipts = relationship(
        "ReceiptModel",
        back_populates="notification",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["NotificationModel"]
