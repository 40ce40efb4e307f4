from __future__ import annotations

import asyncio

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.base import create_request_supabase_client
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "notes-app-api",
            "version": "0.1.0"
        }
    )


@router.get("/ready")
async def readiness_check():
    """Readiness check endpoint; 503 while the database is unreachable."""
    try:
        client = create_request_supabase_client()
        await asyncio.to_thread(lambda: client.table("notes").select("id").limit(1).execute())
    except Exception as e:
        logger.warning("Readiness check failed", extra={"error_type": type(e).__name__, "error": str(e)[:100]})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not ready",
                "database": "unavailable",
                "api_prefix": settings.api_prefix
            }
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "database": "connected",
            "api_prefix": settings.api_prefix
        }
    )
