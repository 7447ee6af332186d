"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.persistence.database import get_session
from autocrm.infrastructure.api.dependencies import get_interpreter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    interpreter=Depends(get_interpreter),
):
    """Check API and database connectivity."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.warning("Health check: database unreachable: %s", e)
        db_status = f"error: {e.__class__.__name__}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "interpreter": type(interpreter).__name__,
        "service": "AutoCRM AI action service",
    }
