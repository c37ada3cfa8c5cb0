"""Top-level pytest hooks.

Layout::

    tests/unit/         fakes only, no I/O
    tests/integration/  file-backed SQLite, the HTTP API and the CLI;
                        tests marked ``integration`` need Docker (Testcontainers)
    tests/shared/       fakes, builders and database fixtures

Postgres-backed tests are skipped unless ``--postgres`` (or ``--run-all``) is
passed, or ``RUN_INTEGRATION`` / ``RUN_ALL_TESTS`` is set to a truthy value.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from finsync_config import clear_settings_cache

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

for _candidate in (".env.dev", ".env"):
    if (CONFIG_DIR / _candidate).exists():
        load_dotenv(CONFIG_DIR / _candidate)
        break


def _flag_from_env(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


def pytest_addoption(parser):
    group = parser.getgroup("finsync")
    group.addoption(
        "--postgres",
        "--run-integration",
        dest="run_postgres",
        action="store_true",
        default=False,
        help="also run tests that start a PostgreSQL container",
    )
    group.addoption(
        "--run-all",
        dest="run_all",
        action="store_true",
        default=False,
        help="run every collected test",
    )


def pytest_collection_modifyitems(config, items):
    wants_all = config.getoption("run_all") or _flag_from_env("RUN_ALL_TESTS")
    wants_postgres = config.getoption("run_postgres") or _flag_from_env(
        "RUN_INTEGRATION",
    )
    if wants_all or wants_postgres:
        return

    marker = pytest.mark.skip(
        reason="needs PostgreSQL; pass --postgres or set RUN_INTEGRATION=1",
    )
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(marker)


@pytest.fixture(scope="session", autouse=True)
def fresh_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()
