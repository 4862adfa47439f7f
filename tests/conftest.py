"""Shared fixtures: an isolated SQLite database per test and an API client."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notification_service.domain.entities import NotificationRole
from notification_service.infrastructure.counts_cache import counts_cache
from notification_service.infrastructure.database import build_engine, initialize_database
from notification_service.infrastructure.directory import StaticUserDirectory
from notification_service.infrastructure.models import NotificationModel, ReceiptModel


@pytest.fixture()
def engine():
    """Return an in-memory database shared by every session of the test."""

    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    initialize_database(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clear_counts_cache():
    counts_cache.clear()
    yield
    counts_cache.clear()


@pytest.fixture()
def directory() -> StaticUserDirectory:
    return StaticUserDirectory(
        {
            NotificationRole.COURIER: [10, 11, 12],
            NotificationRole.CUSTOMER: [20, 21],
        }
    )


@pytest.fixture()
def client(session_factory, directory):
    """Return a test client whose requests use the test database and directory."""

    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    from main import create_app
    from notification_service.infrastructure.database import get_db
    from notification_service.interfaces.api.dependencies import get_user_directory

    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_directory] = lambda: directory
    with TestClient(app) as test_client:
        yield test_client


class _Backdater:
    """Overwrite timestamp columns to simulate the passage of time."""

    def __init__(self, session) -> None:
        self.session = session

    def receipt(self, receipt_id: int, **values) -> None:
        self.session.execute(
            update(ReceiptModel).where(ReceiptModel.id == receipt_id).values(**values)
        )
        self.session.commit()

    def notification(self, notification_id: int, **values) -> None:
        self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .values(**values)
        )
        self.session.commit()


@pytest.fixture()
def backdate(session) -> _Backdater:
    return _Backdater(session)
