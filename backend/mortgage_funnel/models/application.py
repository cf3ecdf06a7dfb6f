"""LandingApplication: one submitted mortgage lead.

Branch fields are all nullable; loan_type decides which of them carry
meaning. The table does not enforce exclusivity between branches.

Every change made by an admin (status, notes, notifications) appends an
ApplicationAuditEntry row. Audit rows are never updated and are only
removed together with their application.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mortgage_funnel.database import Base
from mortgage_funnel.fields import ApplicationStatus, Currency, Priority


class LandingApplication(Base):
    __tablename__ = "landing_applications"
    __table_args__ = (
        Index("ix_landing_applications_email_created", "email", "created_at"),
        Index("ix_landing_applications_status_created", "status", "created_at"),
        Index("ix_landing_applications_loan_residency", "loan_type", "is_uae_resident"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── Shared prefix ──────────────────────────────────────────
    loan_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    is_uae_resident: Mapped[bool] = mapped_column(Boolean, nullable=False, index=True)
    residency_status: Mapped[str] = mapped_column(String(20), nullable=False)

    # ── Purchase ───────────────────────────────────────────────
    property_status: Mapped[str | None] = mapped_column(String(20))
    property_type: Mapped[str | None] = mapped_column(String(20))
    budget_range: Mapped[str | None] = mapped_column(String(20), index=True)
    down_payment: Mapped[str | None] = mapped_column(String(30))
    monthly_income: Mapped[str | None] = mapped_column(String(20), index=True)
    employment_status: Mapped[str | None] = mapped_column(String(30))

    # ── Refinance ──────────────────────────────────────────────
    refinance_reason: Mapped[str | None] = mapped_column(String(30))
    current_rate: Mapped[str | None] = mapped_column(String(20))
    remaining_balance: Mapped[str | None] = mapped_column(String(20))
    property_value: Mapped[str | None] = mapped_column(String(20))

    # ── Investment ─────────────────────────────────────────────
    investment_goal: Mapped[str | None] = mapped_column(String(30))
    investor_experience: Mapped[str | None] = mapped_column(String(30))
    investment_budget: Mapped[str | None] = mapped_column(String(20))
    investment_horizon: Mapped[str | None] = mapped_column(String(20))
    investment_income_source: Mapped[str | None] = mapped_column(String(30))
    investment_financing_structure: Mapped[str | None] = mapped_column(String(30))
    investment_down_payment: Mapped[str | None] = mapped_column(String(30))

    # ── Contact ────────────────────────────────────────────────
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    contact_method: Mapped[str] = mapped_column(String(20), default="email")
    best_time_to_call: Mapped[str] = mapped_column(String(20), default="anytime")

    # ── Pipeline ───────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20), default=ApplicationStatus.NEW_LEAD.value, nullable=False, index=True
    )
    priority: Mapped[str] = mapped_column(String(10), default=Priority.MEDIUM.value)
    assigned_to: Mapped[str | None] = mapped_column(String(100))
    last_contact_date: Mapped[datetime | None] = mapped_column(DateTime)
    next_followup_date: Mapped[datetime | None] = mapped_column(DateTime)
    # [{"content", "addedBy", "timestamp"}]
    notes: Mapped[list] = mapped_column(JSON, default=list)

    # ── Request context ────────────────────────────────────────
    source: Mapped[str] = mapped_column(String(50), default="Landing Page - Secure", index=True)
    ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(Text)
    session_id: Mapped[str | None] = mapped_column(String(100))
    referrer: Mapped[str | None] = mapped_column(Text)
    data_processing_consent: Mapped[bool] = mapped_column(Boolean, default=True)
    marketing_consent: Mapped[bool] = mapped_column(Boolean, default=False)
    currency_displayed: Mapped[str] = mapped_column(String(3), default=Currency.AED.value)
    completion_time_seconds: Mapped[int | None] = mapped_column(Integer)
    steps_completed: Mapped[int | None] = mapped_column(Integer)

    # ── Timestamps ─────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    audit_entries: Mapped[list["ApplicationAuditEntry"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationAuditEntry.timestamp",
    )

    def derive_currency(self) -> None:
        self.currency_displayed = (
            Currency.AED.value if self.is_uae_resident else Currency.USD.value
        )


class ApplicationAuditEntry(Base):
    __tablename__ = "application_audit_entries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("landing_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # created | viewed | updated | exported | deleted | note_added |
    # followup_set | notification_sent | notification_failed
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    actor: Mapped[str | None] = mapped_column(String(100))
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(Text)
    details: Mapped[dict | None] = mapped_column(JSON)

    application: Mapped[LandingApplication] = relationship(back_populates="audit_entries")
