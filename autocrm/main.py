"""AutoCRM — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from autocrm.adapters.persistence.database import engine
from autocrm.config import settings
from autocrm.infrastructure.api.errors import register_exception_handlers
from autocrm.infrastructure.api.routes_actions import router as actions_router
from autocrm.infrastructure.api.routes_health import router as health_router
from autocrm.infrastructure.api.routes_preferences import router as preferences_router
from autocrm.infrastructure.api.routes_tickets import router as tickets_router
from autocrm.infrastructure.api.routes_transcription import router as transcription_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="AutoCRM — AI ticket actions",
        description="Natural-language ticket actions with approval and audit trail",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(tickets_router, prefix="/api")
    app.include_router(actions_router, prefix="/api")
    app.include_router(preferences_router, prefix="/api")
    app.include_router(transcription_router, prefix="/api")

    return app


app = create_app()
