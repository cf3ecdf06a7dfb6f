"""New-lead notifications and metrics.

Runs after the create response has been sent (FastAPI BackgroundTasks),
so a slow or failing mail server never delays or fails a submission.
Each channel's outcome is written to the application's audit log.

Channels:
  email  plain-text summary to settings.landing_notification_email
         (enable_email_notifications must be true)
  sms    one-line alert via Twilio to settings.landing_notification_phone
         (skipped unless a Twilio account SID is configured)
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mortgage_funnel.config import settings
from mortgage_funnel.database import async_session
from mortgage_funnel.fields import BudgetRange, display_value, fields_for_branch
from mortgage_funnel.models.application import LandingApplication
from mortgage_funnel.utils.audit import add_audit_entry

logger = logging.getLogger("mortgage_funnel.notifications")
metrics_logger = logging.getLogger("mortgage_funnel.metrics")


def email_enabled() -> bool:
    return settings.enable_email_notifications


def sms_enabled() -> bool:
    return bool(settings.twilio_account_sid and settings.landing_notification_phone)


def notifications_enabled() -> bool:
    return email_enabled() or sms_enabled()


def log_application_metrics(application: LandingApplication) -> None:
    metrics_logger.info(
        f"Application metrics: {application.id}",
        extra={
            "application_id": application.id,
            "loan_type": application.loan_type,
            "currency": application.currency_displayed,
            "residency": application.residency_status,
            "budget_range": application.budget_range,
            "source": application.source,
            "created_at": application.created_at.isoformat() if application.created_at else None,
        },
    )


# ── Email ────────────────────────────────────────────────────

def build_email(application: LandingApplication) -> EmailMessage:
    loan_type = application.loan_type or ""
    message = EmailMessage()
    message["Subject"] = (
        f"New Landing Application - {loan_type.upper()} - "
        f"{application.full_name} [{application.currency_displayed}]"
    )
    message["From"] = settings.email_from
    message["To"] = settings.landing_notification_email
    if application.budget_range == BudgetRange.ABOVE_5M.value:
        message["X-Priority"] = "1"

    lines = [f"Application ID: {application.id}", f"Received: {application.created_at}", ""]
    for field in fields_for_branch(loan_type):
        if not field.submitted or field.key != field.payload_key:
            continue
        value = getattr(application, field.attr, None)
        if field.boolean:
            shown = "Not provided" if value is None else ("Yes" if value else "No")
        else:
            shown = display_value(field.key, value)
        lines.append(f"{field.label}: {shown}")

    lines += [
        "",
        f"Source: {application.source}",
        f"Currency displayed: {application.currency_displayed}",
        f"Marketing consent: {'Yes' if application.marketing_consent else 'No'}",
    ]
    message.set_content("\n".join(lines))
    return message


def send_email(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_username:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(message)


# ── SMS ──────────────────────────────────────────────────────

def build_sms(application: LandingApplication) -> str:
    loan_type = display_value("loanType", application.loan_type)
    budget = application.budget_range or application.investment_budget
    budget_label = f", {display_value('budgetRange', budget)}" if budget else ""
    return f"New landing lead ({loan_type}): {application.full_name} ({application.phone_number}){budget_label}"


def send_sms(body: str) -> None:
    from twilio.rest import Client
    client = Client(settings.twilio_account_sid, settings.twilio_auth_token)
    client.messages.create(
        body=body,
        from_=settings.twilio_from_number,
        to=settings.landing_notification_phone,
    )


# ── Background task ──────────────────────────────────────────

async def _deliver(db: AsyncSession, application: LandingApplication, channel: str, send, recipient: str) -> None:
    try:
        await asyncio.to_thread(send)
    except Exception as e:
        logger.error(f"{channel} notification failed for {application.id}: {e}")
        add_audit_entry(
            db, application, action="notification_failed",
            details={"type": channel, "error": str(e)},
        )
        return

    logger.info(f"{channel} notification sent for {application.id}")
    add_audit_entry(
        db, application, action="notification_sent",
        details={"type": channel, "recipient": recipient},
    )


async def notify_new_application(
    application_id: str,
    session_factory: async_sessionmaker = async_session,
) -> None:
    async with session_factory() as db:
        result = await db.execute(
            select(LandingApplication).where(LandingApplication.id == application_id)
        )
        application = result.scalar_one_or_none()
        if application is None:
            logger.warning(f"Notification skipped, application {application_id} not found")
            return

        if email_enabled():
            message = build_email(application)
            await _deliver(
                db, application, "email",
                lambda: send_email(message), settings.landing_notification_email,
            )

        if sms_enabled():
            body = build_sms(application)
            await _deliver(
                db, application, "sms",
                lambda: send_sms(body), settings.landing_notification_phone,
            )

        await db.commit()
