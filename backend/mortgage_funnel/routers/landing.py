"""Public landing endpoint: accept a completed wizard submission.

Endpoints:
    POST   /api/landing/application/create   Create an application (201)

Order of work: daily per-IP limit, validation and sanitisation, request
enrichment, persist with a `created` audit entry, respond. Notifications
run afterwards as a background task.
"""

import logging
import uuid

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from mortgage_funnel.database import get_db
from mortgage_funnel.models.application import LandingApplication
from mortgage_funnel.schemas.application import validate_submission
from mortgage_funnel.services.notifications import (
    log_application_metrics,
    notifications_enabled,
    notify_new_application,
)
from mortgage_funnel.services.rate_limit import SubmissionLimiter, client_ip, get_submission_limiter
from mortgage_funnel.services.tracking import generate_tracking_number
from mortgage_funnel.utils.audit import add_audit_entry

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_HEADER = "x-landing-session"


@router.post("/application/create", status_code=status.HTTP_201_CREATED)
async def create_landing_application(
    request: Request,
    background_tasks: BackgroundTasks,
    body: dict = Body(...),
    db: AsyncSession = Depends(get_db),
    limiter: SubmissionLimiter = Depends(get_submission_limiter),
):
    ip = client_ip(request)
    await limiter.check(ip)

    values = validate_submission(body)

    application = LandingApplication(
        **values,
        ip_address=ip,
        user_agent=request.headers.get("user-agent", "unknown"),
        session_id=request.headers.get(SESSION_HEADER) or str(uuid.uuid4()),
        referrer=request.headers.get("referer"),
        data_processing_consent=True,
        marketing_consent=body.get("marketingConsent") is True,
        notes=[],
    )
    application.derive_currency()
    db.add(application)
    await db.flush()

    add_audit_entry(
        db, application, action="created",
        details={"source": application.source},
    )
    await db.commit()

    logger.info(f"Landing application created: {application.id} ({application.loan_type})")
    log_application_metrics(application)
    if notifications_enabled():
        background_tasks.add_task(notify_new_application, application.id)

    return {
        "success": True,
        "message": "Application submitted successfully",
        "data": {
            "id": application.id,
            "status": application.status,
            "submittedAt": application.created_at.isoformat(),
            "trackingNumber": generate_tracking_number(application.id),
        },
    }
