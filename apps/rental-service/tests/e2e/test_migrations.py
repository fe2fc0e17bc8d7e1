import os
import shutil
import sys
from contextlib import contextmanager

import pytest
from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

EXPECTED_TABLES = {
    "stored_events",
    "customers",
    "locations",
    "vehicles",
    "pricing_policies",
    "reservations",
    "email_notification_logs",
}


def _service_root() -> str:
    here = os.path.dirname(__file__)
    return os.path.abspath(os.path.join(here, "..", ".."))


def _alembic_config(db_url: str) -> Config:
    service_dir = _service_root()
    if service_dir not in sys.path:
        sys.path.insert(0, service_dir)
    cfg = Config(os.path.join(service_dir, "alembic.ini"))
    os.environ["TEST_DATABASE_URL"] = db_url
    return cfg


@contextmanager
def _postgres_url():
    """An explicit E2E_DATABASE_URL, else a throwaway container."""
    explicit = os.getenv("E2E_DATABASE_URL")
    if explicit:
        yield explicit
        return
    if os.getenv("RUN_E2E") != "1":
        pytest.skip("Set RUN_E2E=1 or E2E_DATABASE_URL to run migration tests")
    if not shutil.which("docker"):
        pytest.skip("Docker CLI is not available; skipping e2e tests that require containers")
    from testcontainers.postgres import PostgresContainer

    image = os.getenv("TEST_POSTGRES_IMAGE", "postgres:16-alpine")
    with PostgresContainer(image) as pg:
        url = pg.get_connection_url()
        if "+" in url:
            parts = url.split("+")
            url = parts[0] + "://" + parts[1].split("//", 1)[1]
        yield url


def _linear_revisions(cfg: Config):
    script = ScriptDirectory.from_config(cfg)
    heads = script.get_heads()
    assert len(heads) == 1, f"Expected a single migration head, found {heads}"
    revs = list(script.walk_revisions(base="base", head=heads[0]))
    revs.reverse()
    return [r.revision for r in revs]


@pytest.mark.e2e
def test_upgrade_to_head_and_back():
    previous = os.environ.get("TEST_DATABASE_URL")
    try:
        with _postgres_url() as db_url:
            cfg = _alembic_config(db_url)
            assert _linear_revisions(cfg)

            command.upgrade(cfg, "head")
            engine = create_engine(db_url)
            try:
                tables = set(inspect(engine).get_table_names())
                assert EXPECTED_TABLES <= tables
                with engine.connect() as conn:
                    version = conn.execute(text("select version_num from alembic_version")).scalar()
                assert version == ScriptDirectory.from_config(cfg).get_current_head()

                command.downgrade(cfg, "base")
                remaining = set(inspect(engine).get_table_names())
                assert not (EXPECTED_TABLES & remaining)
            finally:
                engine.dispose()
    finally:
        if previous is None:
            os.environ.pop("TEST_DATABASE_URL", None)
        else:
            os.environ["TEST_DATABASE_URL"] = previous
