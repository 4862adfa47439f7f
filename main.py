from contextlib import asynccontextmanager

from fastapi import FastAPI

from notification_service.config import get_settings
from notification_service.infrastructure.database import engine, initialize_database
from notification_service.infrastructure.scheduler import shutdown_scheduler, start_scheduler
from notification_service.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database and retention jobs on startup and release them on shutdown."""

    initialize_database()
    scheduler_enabled = get_settings().scheduler_enabled
    if scheduler_enabled:
        start_scheduler()
    yield
    if scheduler_enabled:
        shutdown_scheduler()
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Notification Service", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
