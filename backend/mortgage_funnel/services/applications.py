"""Query helpers shared by the admin router and the management CLI."""

from collections import Counter
from datetime import datetime, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mortgage_funnel.fields import ApplicationStatus
from mortgage_funnel.models.application import LandingApplication
from mortgage_funnel.schemas.common import Pagination

SORTABLE_COLUMNS = {
    "createdAt": LandingApplication.created_at,
    "updatedAt": LandingApplication.updated_at,
    "lastUpdated": LandingApplication.last_updated,
    "fullName": LandingApplication.full_name,
    "email": LandingApplication.email,
    "status": LandingApplication.status,
    "loanType": LandingApplication.loan_type,
    "priority": LandingApplication.priority,
}

# Dashboard keys for the per-status counts
STATUS_STAT_KEYS = {
    ApplicationStatus.NEW_LEAD.value: "newLeadApplications",
    ApplicationStatus.CONTACTED.value: "contactedApplications",
    ApplicationStatus.QUALIFIED.value: "qualifiedApplications",
    ApplicationStatus.PROPOSAL_SENT.value: "proposalSentApplications",
    ApplicationStatus.APPROVED.value: "approvedApplications",
    ApplicationStatus.REJECTED.value: "rejectedApplications",
    ApplicationStatus.ARCHIVED.value: "archivedApplications",
}


def application_filters(
    status: str | None = None,
    loan_type: str | None = None,
    search: str | None = None,
) -> list:
    """WHERE clauses for the list and export endpoints. "all" means no filter."""
    clauses = []
    if status and status != "all":
        clauses.append(LandingApplication.status == status)
    if loan_type and loan_type != "all":
        clauses.append(LandingApplication.loan_type == loan_type)
    if search:
        pattern = f"%{search.lower()}%"
        clauses.append(or_(
            func.lower(LandingApplication.full_name).like(pattern),
            func.lower(LandingApplication.email).like(pattern),
            func.lower(LandingApplication.phone_number).like(pattern),
        ))
    return clauses


def sort_clause(sort_by: str = "createdAt", sort_order: str = "desc"):
    column = SORTABLE_COLUMNS.get(sort_by, LandingApplication.created_at)
    return column.asc() if sort_order == "asc" else column.desc()


def pagination(page: int, limit: int, total: int) -> dict:
    total_pages = -(-total // limit) if limit else 0
    return Pagination(
        current=page,
        total=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
        totalRecords=total,
    ).model_dump()


def _month_start(now: datetime, months_back: int) -> datetime:
    year, month = now.year, now.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


async def dashboard_stats(db: AsyncSession, now: datetime | None = None) -> dict:
    now = now or datetime.utcnow()

    total = (await db.execute(
        select(func.count()).select_from(LandingApplication)
    )).scalar() or 0

    stats: dict = {"totalApplications": total}
    status_counts = dict((await db.execute(
        select(LandingApplication.status, func.count()).group_by(LandingApplication.status)
    )).all())
    for status_value, key in STATUS_STAT_KEYS.items():
        stats[key] = status_counts.get(status_value, 0)

    budget_rows = (await db.execute(
        select(LandingApplication.budget_range, func.count())
        .group_by(LandingApplication.budget_range)
        .order_by(func.count().desc())
    )).all()
    stats["budgetRangeStats"] = [{"_id": row[0], "count": row[1]} for row in budget_rows]

    stats["recentApplications"] = (await db.execute(
        select(func.count()).select_from(LandingApplication)
        .where(LandingApplication.created_at >= now - timedelta(days=30))
    )).scalar() or 0

    # Grouped in Python so the query stays portable across backends
    created = (await db.execute(
        select(LandingApplication.created_at)
        .where(LandingApplication.created_at >= _month_start(now, 6))
    )).scalars().all()
    months = Counter((c.year, c.month) for c in created)
    stats["monthlyTrend"] = [
        {"_id": {"year": year, "month": month}, "count": count}
        for (year, month), count in sorted(months.items())
    ]

    currency_rows = (await db.execute(
        select(
            LandingApplication.currency_displayed,
            func.count(),
            func.avg(LandingApplication.completion_time_seconds),
        ).group_by(LandingApplication.currency_displayed)
    )).all()
    stats["currencyBreakdown"] = [
        {
            "_id": row[0],
            "count": row[1],
            "avgCompletionTime": float(row[2]) if row[2] is not None else None,
        }
        for row in currency_rows
    ]
    return stats
