"""Management CLI for the application store.

Usage:
    python -m mortgage_funnel.cli create-tables
    python -m mortgage_funnel.cli list-applications [status]
    python -m mortgage_funnel.cli export-csv [path]
"""

import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from mortgage_funnel.config import settings
from mortgage_funnel.database import Base
from mortgage_funnel.models.application import LandingApplication
from mortgage_funnel.services.applications import application_filters
from mortgage_funnel.services.export import EXPORT_FILENAME, applications_to_csv


def get_engine():
    return create_engine(settings.database_url_sync)


def fetch_applications(engine, status: str | None = None) -> list[LandingApplication]:
    with Session(engine) as session:
        result = session.execute(
            select(LandingApplication)
            .where(*application_filters(status=status))
            .order_by(LandingApplication.created_at.desc())
        )
        return list(result.scalars().all())


def create_tables(engine=None):
    import mortgage_funnel.models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())
    print("Tables created.")


def list_applications(status: str | None = None, engine=None):
    applications = fetch_applications(engine or get_engine(), status)
    for a in applications:
        print(f"  {a.id}  {a.created_at:%Y-%m-%d}  {a.status:<14} {a.loan_type:<13} {a.full_name} <{a.email}>")
    print(f"\n{len(applications)} application(s)")


def export_csv(path: str = EXPORT_FILENAME, engine=None):
    applications = fetch_applications(engine or get_engine())
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(applications_to_csv(applications))
    print(f"Exported {len(applications)} application(s) to {path}")


def main(argv: list[str]) -> int:
    cmd = argv[1] if len(argv) > 1 else ""
    arg = argv[2] if len(argv) > 2 else None
    if cmd == "create-tables":
        create_tables()
    elif cmd == "list-applications":
        list_applications(arg)
    elif cmd == "export-csv":
        export_csv(arg or EXPORT_FILENAME)
    else:
        print("Usage: python -m mortgage_funnel.cli [create-tables|list-applications|export-csv]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
