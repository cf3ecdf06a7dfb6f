"""Aggregate model imports for Alembic auto-detection."""

from mortgage_funnel.models.application import ApplicationAuditEntry, LandingApplication  # noqa: F401
