"""System information endpoints used by the landing and admin frontends."""

import platform
import time
from datetime import datetime

from fastapi import APIRouter

from mortgage_funnel import __version__
from mortgage_funnel.config import settings
from mortgage_funnel.routers.health import check_database

router = APIRouter()

_START_TIME = datetime.utcnow()
_START_MONOTONIC = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _START_MONOTONIC, 3)


@router.get("/info")
async def system_info():
    return {
        "success": True,
        "data": {
            "backend": {
                "url": settings.api_base_url,
                "apiBase": f"{settings.api_base_url.rstrip('/')}/api",
            },
            "system": {
                "environment": settings.environment,
                "version": __version__,
                "startTime": _START_TIME.isoformat(),
                "uptime": _uptime(),
                "pythonVersion": platform.python_version(),
            },
        },
    }


@router.get("/health")
async def system_health():
    database = await check_database()
    return {
        "success": True,
        "data": {
            "status": "healthy" if database == "ok" else "degraded",
            "timestamp": datetime.utcnow().isoformat(),
            "uptime": _uptime(),
            "environment": settings.environment,
            "checks": {"database": database},
        },
    }


@router.get("/status")
async def service_status():
    return {
        "success": True,
        "data": {
            "services": {
                "backend": {
                    "name": "Mortgage Funnel API",
                    "url": settings.api_base_url,
                    "status": "running",
                },
            },
            "submissionCounter": settings.submission_counter_backend,
            "emailNotifications": settings.enable_email_notifications,
            "timestamp": datetime.utcnow().isoformat(),
        },
    }
