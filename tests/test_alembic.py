"""
test_alembic.py — Verify the Alembic migration chain

Loads the script directory through Alembic's own API and runs the upgrade
and downgrade against a throwaway SQLite file.

Called by: pytest
Depends on: alembic/, wholesale.models
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect

from wholesale.models import Base

ROOT = Path(__file__).parent.parent


def _config() -> Config:
    # No ini file: keeps alembic's fileConfig from replacing the app's logging
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return cfg


def test_single_head():
    script = ScriptDirectory.from_config(_config())
    assert script.get_heads() == ["001_initial"]


def test_initial_revision_has_no_parent():
    script = ScriptDirectory.from_config(_config())
    assert script.get_revision("001_initial").down_revision is None


def test_upgrade_creates_every_model_table(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    monkeypatch.setenv("DATABASE_URL", url)

    command.upgrade(_config(), "head")

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables
    finally:
        engine.dispose()


def test_downgrade_drops_tables(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = _config()

    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
