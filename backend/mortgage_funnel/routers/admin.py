"""Mortgage admin router.

Endpoints:
    POST   /api/mortgage-admin/login                          Issue an admin token
    GET    /api/mortgage-admin/dashboard/stats                Dashboard statistics
    GET    /api/mortgage-admin/applications                   List / filter / paginate
    GET    /api/mortgage-admin/applications/export            CSV (default) or JSON export
    POST   /api/mortgage-admin/applications/bulk              Bulk status update / delete
    GET    /api/mortgage-admin/applications/{id}              Application detail
    PUT    /api/mortgage-admin/applications/{id}/status       Change status (any → any)
    POST   /api/mortgage-admin/applications/{id}/notes        Append a note
    GET    /api/mortgage-admin/applications/{id}/audit        Audit log

Every route except login requires an admin token.
"""

import hmac
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mortgage_funnel.auth.deps import get_current_admin
from mortgage_funnel.auth.jwt import ADMIN_ROLE, create_admin_token
from mortgage_funnel.config import settings
from mortgage_funnel.database import get_db
from mortgage_funnel.fields import ApplicationStatus
from mortgage_funnel.middleware.exceptions import (
    AuthenticationError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from mortgage_funnel.models.application import ApplicationAuditEntry, LandingApplication
from mortgage_funnel.schemas.application import (
    ApplicationOut,
    ApplicationSummary,
    AuditEntryOut,
    BulkActionRequest,
    LoginRequest,
    NoteCreateRequest,
    StatusUpdateRequest,
)
from mortgage_funnel.schemas.common import MessageResponse
from mortgage_funnel.services.applications import (
    application_filters,
    dashboard_stats,
    pagination,
    sort_clause,
)
from mortgage_funnel.services.export import EXPORT_FILENAME, applications_to_csv
from mortgage_funnel.services.rate_limit import client_ip
from mortgage_funnel.utils.audit import add_audit_entry

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_STATUSES = {s.value for s in ApplicationStatus}
BULK_ACTIONS = {"update_status", "delete"}


def _csv_response(csv_text: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([csv_text]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


async def _get_application(db: AsyncSession, application_id: str) -> LandingApplication:
    result = await db.execute(
        select(LandingApplication).where(LandingApplication.id == application_id)
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise ResourceNotFoundError("Application")
    return application


def _actor(admin: dict) -> str:
    return admin.get("userId") or "admin"


# ══════════════════════════════════════════════════════════════
# AUTH
# ══════════════════════════════════════════════════════════════

@router.post("/login")
async def login(body: LoginRequest):
    # Bytes, since compare_digest rejects non-ASCII str
    valid = hmac.compare_digest(
        body.username.encode(), settings.admin_username.encode()
    ) and hmac.compare_digest(body.password.encode(), settings.admin_password.encode())
    if not valid:
        logger.warning(f"Failed admin login for '{body.username}'")
        raise AuthenticationError("Invalid credentials")

    token = create_admin_token(settings.admin_username, ADMIN_ROLE)
    return {
        "success": True,
        "data": {
            "token": token,
            "user": {
                "id": settings.admin_username,
                "username": settings.admin_username,
                "role": ADMIN_ROLE,
                "email": settings.admin_email,
            },
        },
    }


# ══════════════════════════════════════════════════════════════
# DASHBOARD
# ══════════════════════════════════════════════════════════════

@router.get("/dashboard/stats")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(get_current_admin),
):
    return {"success": True, "data": await dashboard_stats(db)}


# ══════════════════════════════════════════════════════════════
# APPLICATIONS
# ══════════════════════════════════════════════════════════════

@router.get("/applications")
async def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    status: str | None = None,
    loan_type: str | None = Query(None, alias="loanType"),
    search: str | None = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(get_current_admin),
):
    clauses = application_filters(status, loan_type, search)

    total = (await db.execute(
        select(func.count()).select_from(LandingApplication).where(*clauses)
    )).scalar() or 0

    result = await db.execute(
        select(LandingApplication)
        .where(*clauses)
        .order_by(sort_clause(sort_by, sort_order))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    applications = result.scalars().all()

    return {
        "success": True,
        "data": {
            "applications": [
                ApplicationSummary.model_validate(a).to_wire() for a in applications
            ],
            "pagination": pagination(page, limit, total),
        },
    }


@router.get("/applications/export")
async def export_applications(
    format: str = "csv",
    status: str | None = None,
    loan_type: str | None = Query(None, alias="loanType"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    result = await db.execute(
        select(LandingApplication)
        .where(*application_filters(status, loan_type))
        .order_by(LandingApplication.created_at.desc())
    )
    applications = result.scalars().all()
    logger.info(f"{_actor(admin)} exported {len(applications)} applications as {format}")

    if format == "csv":
        return _csv_response(applications_to_csv(applications), EXPORT_FILENAME)

    return {
        "success": True,
        "data": [ApplicationOut.model_validate(a).to_wire() for a in applications],
        "count": len(applications),
    }


@router.post("/applications/bulk", response_model=MessageResponse)
async def bulk_update_applications(
    body: BulkActionRequest,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    ids = body.application_ids
    if not ids:
        raise InvalidRequestError("Application IDs are required")
    if body.action not in BULK_ACTIONS:
        raise InvalidRequestError("Invalid bulk action")

    if body.action == "delete":
        await db.execute(
            sa_delete(ApplicationAuditEntry).where(ApplicationAuditEntry.application_id.in_(ids))
        )
        result = await db.execute(
            sa_delete(LandingApplication).where(LandingApplication.id.in_(ids))
        )
        logger.warning(f"{_actor(admin)} bulk-deleted {result.rowcount} applications")
        return {
            "success": True,
            "message": f"{result.rowcount} applications deleted successfully",
        }

    if not body.status:
        raise InvalidRequestError("Status is required for bulk status update")
    if body.status not in VALID_STATUSES:
        raise InvalidRequestError("Invalid status value")

    result = await db.execute(
        select(LandingApplication).where(LandingApplication.id.in_(ids))
    )
    applications = result.scalars().all()
    now = datetime.utcnow()
    for application in applications:
        old_status = application.status
        application.status = body.status
        application.last_updated = now
        add_audit_entry(
            db, application, action="updated", actor=_actor(admin),
            details={"bulk": True, "oldStatus": old_status, "newStatus": body.status},
        )

    return {
        "success": True,
        "message": f"{len(applications)} applications updated successfully",
    }


@router.get("/applications/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(get_current_admin),
):
    application = await _get_application(db, application_id)
    return {"success": True, "data": ApplicationOut.model_validate(application).to_wire()}


@router.put("/applications/{application_id}/status")
async def update_application_status(
    application_id: str,
    body: StatusUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    if body.status not in VALID_STATUSES:
        raise InvalidRequestError("Invalid status value")

    application = await _get_application(db, application_id)
    old_status = application.status
    application.status = body.status
    application.last_updated = datetime.utcnow()
    if body.status == ApplicationStatus.CONTACTED.value:
        application.last_contact_date = application.last_updated

    add_audit_entry(
        db, application, action="updated", actor=_actor(admin),
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        details={"oldStatus": old_status, "newStatus": body.status, "notes": body.notes or ""},
    )
    await db.flush()
    await db.refresh(application)
    logger.info(f"Application {application_id} status {old_status} -> {body.status}")

    return {
        "success": True,
        "data": ApplicationOut.model_validate(application).to_wire(),
        "message": "Application status updated successfully",
    }


@router.post("/applications/{application_id}/notes")
async def add_application_note(
    application_id: str,
    body: NoteCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    content = (body.content or body.note or "").strip()
    if not content:
        raise InvalidRequestError("Note content is required")

    application = await _get_application(db, application_id)
    note = {
        "content": content,
        "addedBy": _actor(admin),
        "timestamp": datetime.utcnow().isoformat(),
    }
    # Reassign so the JSON column is flagged dirty
    application.notes = [*(application.notes or []), note]
    application.last_updated = datetime.utcnow()

    add_audit_entry(
        db, application, action="note_added", actor=_actor(admin),
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        details={"length": len(content)},
    )
    await db.flush()
    await db.refresh(application)

    return {
        "success": True,
        "data": ApplicationOut.model_validate(application).to_wire(),
        "message": "Note added successfully",
    }


@router.get("/applications/{application_id}/audit")
async def get_application_audit_log(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(get_current_admin),
):
    await _get_application(db, application_id)
    result = await db.execute(
        select(ApplicationAuditEntry)
        .where(ApplicationAuditEntry.application_id == application_id)
        .order_by(ApplicationAuditEntry.timestamp)
    )
    return {
        "success": True,
        "data": [AuditEntryOut.model_validate(e).to_wire() for e in result.scalars().all()],
    }
