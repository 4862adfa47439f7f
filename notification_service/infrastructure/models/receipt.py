"""SQLAlchemy model for per-recipient notification receipts."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from notification_service.infrastructure.database import Base
from notification_service.utils import now_in_app_naive_datetime


class ReceiptModel(Base):
    """Read/dismiss state of one recipient for one notification."""

    __tablename__ = "notification_receipt"
    __table_args__ = (
        UniqueConstraint(
            "notification_id", "recipient_id", name="uq_receipt_notification_recipient"
        ),
        Index("ix_receipt_recipient_state", "recipient_id", "is_dismissed", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_id = Column(Integer, nullable=False, index=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    read_at = Column(DateTime(), nullable=True)
    is_dismissed = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    dismissed_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    version = Column(Integer, nullable=False, default=1)

    notification = relationship("NotificationModel", back_populates="receipts")


__all__ = ["ReceiptModel"]
