"""SQLAlchemy model for the read-only user directory mirror."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.sql import expression

from notification_service.infrastructure.database import Base


class UserDirectoryEntryModel(Base):
    """Role membership of a platform user, synchronised by the user service."""

    __tablename__ = "user_directory"

    user_id = Column(Integer, primary_key=True)
    role = Column(String(30), nullable=False, index=True)
    is_active = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )


__all__ = ["UserDirectoryEntryModel"]
