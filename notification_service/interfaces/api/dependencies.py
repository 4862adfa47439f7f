"""FastAPI dependency utilities."""

from fastapi import Depends
from sqlalchemy.orm import Session

from notification_service.infrastructure.database import get_db
from notification_service.infrastructure.directory import SqlUserDirectory, UserDirectory


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    """Return the directory used to resolve broadcast cohorts."""

    return SqlUserDirectory(db)


__all__ = ["get_db", "get_user_directory"]
