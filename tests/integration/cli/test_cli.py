"""CLI commands against a SQLite file."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, inspect, select
from sqlalchemy.orm import Session
from typer.testing import CliRunner

from finsync.infrastructure.persistence.sqlalchemy.models import (
    Base,
    TransactionModel,
    VendorCredentialModel,
)
from finsync.presentation.cli.app import app
from finsync_config import clear_settings_cache
from tests.shared.fixtures.database import sqlite_url

runner = CliRunner()


@pytest.fixture
def database_path(tmp_path, monkeypatch):
    path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_URL_OVERRIDE", sqlite_url(path))
    clear_settings_cache()
    yield path
    clear_settings_cache()


@pytest.fixture
def sync_engine(database_path):
    engine = create_engine(f"sqlite:///{database_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def exact_pair(sync_engine):
    with Session(sync_engine) as session:
        for identifier in ("a", "b"):
            session.add(
                TransactionModel(
                    identifier=identifier,
                    vendor="max",
                    name="Supermarket",
                    transaction_date=date(2024, 3, 5),
                    price=Decimal("-80.00"),
                ),
            )
        session.commit()


def _identifiers(engine) -> list[str]:
    with Session(engine) as session:
        return list(session.scalars(select(TransactionModel.identifier)))


class TestDbInit:
    def test_creates_schema(self, database_path):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        engine = create_engine(f"sqlite:///{database_path}")
        tables = set(inspect(engine).get_table_names())
        engine.dispose()
        assert {"transactions", "vendor_credentials", "potential_duplicates"} <= tables


class TestDuplicatesCommands:
    def test_list(self, exact_pair):
        result = runner.invoke(app, ["duplicates", "list"])

        assert result.exit_code == 0
        assert "Supermarket" in result.output
        assert "max/b" in result.output

    def test_list_without_candidates(self, sync_engine):
        result = runner.invoke(app, ["duplicates", "list"])

        assert result.exit_code == 0
        assert "No duplicate candidates" in result.output

    def test_resolve_by_number(self, sync_engine, exact_pair):
        result = runner.invoke(app, ["duplicates", "resolve", "1", "keep_first"])

        assert result.exit_code == 0
        assert "Deleted" in result.output
        assert _identifiers(sync_engine) == ["a"]

    def test_resolve_unknown_number(self, exact_pair):
        result = runner.invoke(app, ["duplicates", "resolve", "5", "keep_first"])

        assert result.exit_code == 1
        assert "No candidate number 5" in result.output

    def test_resolve_invalid_action(self, sync_engine, exact_pair):
        result = runner.invoke(app, ["duplicates", "resolve", "1", "delete_both"])

        assert result.exit_code == 1
        assert "INVALID_RESOLUTION_ACTION" in result.output
        assert sorted(_identifiers(sync_engine)) == ["a", "b"]

    def test_auto_resolve_dry_run(self, sync_engine, exact_pair):
        result = runner.invoke(app, ["duplicates", "auto-resolve", "--dry-run"])

        assert result.exit_code == 0
        assert "Would delete" in result.output
        assert sorted(_identifiers(sync_engine)) == ["a", "b"]

    def test_auto_resolve(self, sync_engine, exact_pair):
        result = runner.invoke(app, ["duplicates", "auto-resolve"])

        assert result.exit_code == 0
        assert _identifiers(sync_engine) == ["a"]


class TestSyncCommands:
    def test_plan_lists_accounts(self, sync_engine):
        with Session(sync_engine) as session:
            session.add(VendorCredentialModel(id="c1", vendor="leumi", nickname="Main"))
            session.commit()

        result = runner.invoke(app, ["sync", "plan"])

        assert result.exit_code == 0
        assert "Main" in result.output
        assert "leumi" in result.output

    def test_force_stop_can_be_declined(self, database_path):
        result = runner.invoke(app, ["sync", "force-stop"], input="n\n")

        assert result.exit_code == 1
