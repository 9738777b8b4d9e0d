"""Health check endpoints."""
from fastapi import APIRouter
import logging

from ..core.cache import cache_manager
from ..core.config import settings
from ..core.database import health_check_db
from ..core.performance_monitor import performance_metrics

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

@router.get("/")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }

@router.get("/db-health")
async def database_health():
    """Database health check"""
    healthy = await health_check_db()
    if not healthy:
        logger.warning("Database health check reported unhealthy")
    return {
        "status": "healthy" if healthy else "unhealthy",
        "database": "reachable" if healthy else "unreachable",
        "cache": "enabled" if cache_manager.enabled else "disabled"
    }

@router.get("/metrics")
async def operation_metrics():
    """Timings of scheduling operations since startup"""
    return performance_metrics.get_metrics()
