import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from pharmacy.core.config import settings
from pharmacy.db.mongo import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db = Depends(get_db)):
    """Report API and database reachability"""
    try:
        await db.command("ping")
    except PyMongoError as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "unreachable"}
        )
    return {
        "status": "healthy",
        "database": "connected",
        "environment": settings.ENVIRONMENT,
        "version": settings.PROJECT_VERSION,
    }
