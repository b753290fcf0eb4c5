"""
Health check router.
"""

from typing import Dict, Any
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import check_database_connection


router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, Any]:
    database_ok = check_database_connection()
    body = {
        "status": "healthy" if database_ok else "degraded",
        "version": settings.VERSION,
        "database": "connected" if database_ok else "unavailable"
    }
    if not database_ok:
        return JSONResponse(status_code=503, content=body)
    return body
