"""
Health check and monitoring endpoints.
"""
import time
import logging
from fastapi import APIRouter, Depends

from selfiq.core.assessment_catalog import AssessmentCatalog
from selfiq.core.settings import settings
from selfiq.db import check_database_health
from selfiq.dependencies import get_catalog

logger = logging.getLogger("selfiq.health")
router = APIRouter()

@router.get("")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "version": "1.0.0"
    }

@router.get("/detailed")
async def detailed_health_check(catalog: AssessmentCatalog = Depends(get_catalog)):
    """Detailed health check with service status."""
    start_time = time.time()

    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "services": {}
    }

    try:
        db_health = await check_database_health()
        health_status["services"]["database"] = db_health
        if db_health.get("status") != "healthy":
            health_status["status"] = "degraded"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["services"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "degraded"

    health_status["services"]["content"] = {
        "status": "loaded" if len(catalog) else "empty",
        "assessments": len(catalog),
    }
    if not len(catalog):
        health_status["status"] = "degraded"

    health_status["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
    return health_status
