"""Lightweight helper for recording application audit entries.

Usage:
    add_audit_entry(
        db, application, action="updated", actor=admin["userId"],
        details={"oldStatus": "New Lead", "newStatus": "Contacted"},
    )

The row is added to the current session and committed with the
enclosing transaction. No extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from mortgage_funnel.models.application import ApplicationAuditEntry, LandingApplication


def add_audit_entry(
    db: AsyncSession,
    application: LandingApplication,
    *,
    action: str,
    actor: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    details: dict | None = None,
) -> ApplicationAuditEntry:
    """Append an audit entry for `application` to the current DB session."""
    entry = ApplicationAuditEntry(
        application_id=application.id,
        action=action,
        actor=actor,
        ip_address=ip_address or application.ip_address,
        user_agent=user_agent or application.user_agent,
        details=details,
    )
    db.add(entry)
    return entry
