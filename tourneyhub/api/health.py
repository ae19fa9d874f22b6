"""
Health check endpoints
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.config import settings
from tourneyhub.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_db)):
    """
    Health check endpoint
    Returns HTTP 200 with the application and database status
    """
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database = "unavailable"

    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.app_env,
        "database": database,
    }
