"""Initial schema: landing applications and their audit trail.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "landing_applications",
        sa.Column("id", sa.String(36), primary_key=True),
        # Shared prefix
        sa.Column("loan_type", sa.String(20), nullable=False),
        sa.Column("is_uae_resident", sa.Boolean(), nullable=False),
        sa.Column("residency_status", sa.String(20), nullable=False),
        # Purchase
        sa.Column("property_status", sa.String(20)),
        sa.Column("property_type", sa.String(20)),
        sa.Column("budget_range", sa.String(20)),
        sa.Column("down_payment", sa.String(30)),
        sa.Column("monthly_income", sa.String(20)),
        sa.Column("employment_status", sa.String(30)),
        # Refinance
        sa.Column("refinance_reason", sa.String(30)),
        sa.Column("current_rate", sa.String(20)),
        sa.Column("remaining_balance", sa.String(20)),
        sa.Column("property_value", sa.String(20)),
        # Investment
        sa.Column("investment_goal", sa.String(30)),
        sa.Column("investor_experience", sa.String(30)),
        sa.Column("investment_budget", sa.String(20)),
        sa.Column("investment_horizon", sa.String(20)),
        sa.Column("investment_income_source", sa.String(30)),
        sa.Column("investment_financing_structure", sa.String(30)),
        sa.Column("investment_down_payment", sa.String(30)),
        # Contact
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("phone_number", sa.String(30), nullable=False),
        sa.Column("contact_method", sa.String(20), server_default="email"),
        sa.Column("best_time_to_call", sa.String(20), server_default="anytime"),
        # Pipeline
        sa.Column("status", sa.String(20), nullable=False, server_default="New Lead"),
        sa.Column("priority", sa.String(10), server_default="medium"),
        sa.Column("assigned_to", sa.String(100)),
        sa.Column("last_contact_date", sa.DateTime()),
        sa.Column("next_followup_date", sa.DateTime()),
        sa.Column("notes", sa.JSON()),
        # Request context
        sa.Column("source", sa.String(50), server_default="Landing Page - Secure"),
        sa.Column("ip_address", sa.String(45), nullable=False),
        sa.Column("user_agent", sa.Text()),
        sa.Column("session_id", sa.String(100)),
        sa.Column("referrer", sa.Text()),
        sa.Column("data_processing_consent", sa.Boolean(), server_default=sa.true()),
        sa.Column("marketing_consent", sa.Boolean(), server_default=sa.false()),
        sa.Column("currency_displayed", sa.String(3), server_default="AED"),
        sa.Column("completion_time_seconds", sa.Integer()),
        sa.Column("steps_completed", sa.Integer()),
        # Timestamps
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_updated", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_landing_applications_loan_type", "landing_applications", ["loan_type"])
    op.create_index("ix_landing_applications_is_uae_resident", "landing_applications", ["is_uae_resident"])
    op.create_index("ix_landing_applications_budget_range", "landing_applications", ["budget_range"])
    op.create_index("ix_landing_applications_monthly_income", "landing_applications", ["monthly_income"])
    op.create_index("ix_landing_applications_email", "landing_applications", ["email"])
    op.create_index("ix_landing_applications_status", "landing_applications", ["status"])
    op.create_index("ix_landing_applications_source", "landing_applications", ["source"])
    op.create_index("ix_landing_applications_created_at", "landing_applications", ["created_at"])
    op.create_index("ix_landing_applications_email_created", "landing_applications", ["email", "created_at"])
    op.create_index("ix_landing_applications_status_created", "landing_applications", ["status", "created_at"])
    op.create_index(
        "ix_landing_applications_loan_residency", "landing_applications",
        ["loan_type", "is_uae_resident"],
    )

    op.create_table(
        "application_audit_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "application_id", sa.String(36),
            sa.ForeignKey("landing_applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("actor", sa.String(100)),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("details", sa.JSON()),
    )
    op.create_index(
        "ix_application_audit_entries_application_id", "application_audit_entries", ["application_id"]
    )
    op.create_index(
        "ix_application_audit_entries_timestamp", "application_audit_entries", ["timestamp"]
    )


def downgrade() -> None:
    op.drop_table("application_audit_entries")
    op.drop_table("landing_applications")
