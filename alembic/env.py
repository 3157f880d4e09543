"""
env.py — Alembic environment for the wholesale schema

The database URL always comes from Settings (DATABASE_URL), so the same
revisions run against PostgreSQL in production and SQLite in tests.

Business Rules:
- One transaction per migration run
- SQLite migrations use batch mode (no in-place ALTER COLUMN there)
- Column type changes are picked up by autogenerate

Called by: alembic CLI, tests/test_alembic.py
Depends on: wholesale.models (Base + all tables), wholesale.config (Settings)
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from wholesale.config import Settings
from wholesale.models import Base

config = context.config
config.set_main_option("sqlalchemy.url", Settings().database_url)

# alembic.ini carries logger sections; programmatic Configs have no file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Print the SQL for the requested revisions instead of executing it."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"}, **_options(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **_options(str(engine.url)))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
