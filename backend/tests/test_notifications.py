"""Tests for new-lead notifications."""

import pytest
import pytest_asyncio
from sqlalchemy import select

from mortgage_funnel.config import settings
from mortgage_funnel.models.application import ApplicationAuditEntry, LandingApplication
from mortgage_funnel.services import notifications


def make_application(**overrides) -> LandingApplication:
    values = {
        "id": "0b5c7c1e-1111-4222-8333-94445555abcd",
        "loan_type": "new-purchase",
        "is_uae_resident": False,
        "residency_status": "non-resident",
        "budget_range": "above-5m",
        "property_type": "villa",
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "phone_number": "+971501234567",
        "ip_address": "127.0.0.1",
        "source": "Landing Page - Secure",
        "currency_displayed": "USD",
        "marketing_consent": False,
        "notes": [],
    }
    values.update(overrides)
    return LandingApplication(**values)


async def audit_actions(session_factory, application_id):
    async with session_factory() as db:
        result = await db.execute(
            select(ApplicationAuditEntry)
            .where(ApplicationAuditEntry.application_id == application_id)
            .order_by(ApplicationAuditEntry.timestamp)
        )
        return [(e.action, e.details) for e in result.scalars().all()]


@pytest.fixture
def email_on(monkeypatch):
    monkeypatch.setattr(settings, "enable_email_notifications", True)
    monkeypatch.setattr(settings, "landing_notification_email", "leads@example.com")


@pytest.fixture
def sms_on(monkeypatch):
    monkeypatch.setattr(settings, "twilio_account_sid", "AC123")
    monkeypatch.setattr(settings, "landing_notification_phone", "+971500000000")


@pytest.mark.unit
class TestMessages:

    def test_email_subject_and_priority(self, email_on):
        message = notifications.build_email(make_application())

        assert message["Subject"] == "New Landing Application - NEW-PURCHASE - Jane Doe [USD]"
        assert message["To"] == "leads@example.com"
        assert message["X-Priority"] == "1"

    def test_email_body_lists_branch_answers(self):
        body = notifications.build_email(make_application()).get_content()

        assert "Loan Type: New Purchase" in body
        assert "UAE Resident: No" in body
        assert "Property Type: Villa" in body
        assert "Employment Status: Not provided" in body
        assert "Refinance Reason" not in body

    def test_normal_priority_below_top_budget(self):
        message = notifications.build_email(make_application(budget_range="1m-2m"))

        assert message["X-Priority"] is None

    def test_sms_text(self):
        text = notifications.build_sms(make_application())

        assert text.startswith("New landing lead (New Purchase): Jane Doe (+971501234567)")

    def test_channels_disabled_by_default(self):
        assert notifications.notifications_enabled() is False


@pytest.mark.unit
class TestNotifyNewApplication:

    @pytest_asyncio.fixture
    async def saved(self, session_factory):
        application = make_application()
        async with session_factory() as db:
            db.add(application)
            await db.commit()
        return application

    @pytest.mark.asyncio
    async def test_email_sent_and_audited(self, session_factory, saved, email_on, monkeypatch):
        sent = []
        monkeypatch.setattr(notifications, "send_email", sent.append)

        await notifications.notify_new_application(saved.id, session_factory=session_factory)

        assert len(sent) == 1
        assert await audit_actions(session_factory, saved.id) == [
            ("notification_sent", {"type": "email", "recipient": "leads@example.com"}),
        ]

    @pytest.mark.asyncio
    async def test_failure_is_audited_not_raised(self, session_factory, saved, email_on, sms_on, monkeypatch):
        def refuse(message):
            raise ConnectionRefusedError("SMTP down")

        texts = []
        monkeypatch.setattr(notifications, "send_email", refuse)
        monkeypatch.setattr(notifications, "send_sms", texts.append)

        await notifications.notify_new_application(saved.id, session_factory=session_factory)

        actions = await audit_actions(session_factory, saved.id)
        assert sorted(actions, key=lambda a: a[1]["type"]) == [
            ("notification_failed", {"type": "email", "error": "SMTP down"}),
            ("notification_sent", {"type": "sms", "recipient": "+971500000000"}),
        ]
        assert len(texts) == 1

    @pytest.mark.asyncio
    async def test_missing_application_is_skipped(self, session_factory, email_on, monkeypatch):
        sent = []
        monkeypatch.setattr(notifications, "send_email", sent.append)

        await notifications.notify_new_application("missing", session_factory=session_factory)

        assert sent == []
