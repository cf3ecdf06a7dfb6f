"""Tests for the management CLI."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from mortgage_funnel import cli
from mortgage_funnel.models.application import LandingApplication
from mortgage_funnel.services.export import CSV_HEADERS


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'cli.db'}")
    cli.create_tables(engine)
    with Session(engine) as session:
        session.add_all([
            LandingApplication(
                loan_type="new-purchase", is_uae_resident=True, residency_status="uae-resident",
                full_name="Jane Doe", email="jane@example.com", phone_number="+971501234567",
                ip_address="127.0.0.1", notes=[],
            ),
            LandingApplication(
                loan_type="investment", is_uae_resident=False, residency_status="non-resident",
                investment_budget="2m-5m", status="Qualified",
                full_name="Sam Lee", email="sam@example.com", phone_number="+14155550100",
                ip_address="127.0.0.1", notes=[],
            ),
        ])
        session.commit()
    yield engine
    engine.dispose()


@pytest.mark.unit
class TestCli:

    def test_list_applications(self, engine, capsys):
        cli.list_applications(engine=engine)

        out = capsys.readouterr().out
        assert "Jane Doe <jane@example.com>" in out
        assert "2 application(s)" in out

    def test_list_filtered_by_status(self, engine, capsys):
        cli.list_applications("Qualified", engine=engine)

        out = capsys.readouterr().out
        assert "Sam Lee" in out
        assert "Jane Doe" not in out

    def test_export_csv(self, engine, tmp_path):
        path = tmp_path / "leads.csv"

        cli.export_csv(str(path), engine=engine)

        lines = path.read_text(encoding="utf-8").strip().split("\n")
        assert lines[0] == ",".join(CSV_HEADERS)
        assert len(lines) == 3
        assert any(",2m-5m," in line for line in lines[1:])

    def test_unknown_command(self, capsys):
        assert cli.main(["cli", "drop-everything"]) == 1
        assert "Usage" in capsys.readouterr().out
