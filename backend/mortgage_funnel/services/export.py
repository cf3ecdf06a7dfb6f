"""CSV export of landing applications."""

import csv
import io
from typing import Iterable

from mortgage_funnel.models.application import LandingApplication

EXPORT_FILENAME = "mortgage-applications.csv"

CSV_HEADERS = [
    "ID", "Full Name", "Email", "Phone Number", "Loan Type", "Budget Range",
    "Property Type", "Monthly Income", "Employment Status", "Status",
    "Created At", "Last Updated",
]


def _date(value) -> str:
    return value.date().isoformat() if value else ""


def application_row(application: LandingApplication) -> list[str]:
    return [
        application.id,
        application.full_name or "",
        application.email or "",
        application.phone_number or "",
        application.loan_type or "",
        application.budget_range or application.investment_budget or "",
        application.property_type or "",
        application.monthly_income or "",
        application.employment_status or "",
        application.status or "New Lead",
        _date(application.created_at),
        _date(application.updated_at),
    ]


def applications_to_csv(applications: Iterable[LandingApplication]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for application in applications:
        writer.writerow(application_row(application))
    return buffer.getvalue()
