"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from mortgage_funnel.config import settings
from mortgage_funnel.database import engine
from mortgage_funnel.utils.cache import ping_redis

router = APIRouter(tags=["health"])

SERVICE_NAME = "mortgage-funnel"


async def check_database() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return "ok"
    except Exception as e:
        return f"error: {str(e)[:100]}"


async def check_redis() -> str:
    try:
        await ping_redis()
        return "ok"
    except Exception as e:
        return f"error: {str(e)[:100]}"


@router.get("/health")
async def health_check():
    """Lightweight health check for load balancer (no DB/Redis check)."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check. Redis is only required when it backs the submission counter."""
    checks = {
        "service": "ok",
        "database": await check_database(),
    }
    if settings.submission_counter_backend == "redis":
        checks["redis"] = await check_redis()

    overall_healthy = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": SERVICE_NAME,
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
