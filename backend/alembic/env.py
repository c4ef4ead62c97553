"""
Alembic Migration Environment
===============================

What:  Configures Alembic for the junkick async SQLAlchemy models.
Why:   Production schema changes go through revisions; `Database.create_all()`
       is only for tests and local bootstrap.
How:   Reads DATABASE_URL from junkick settings (never from alembic.ini) and
       runs the revisions through an async engine.
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision).
When:  During migration operations (development and deployment).
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from junkick.config import settings
from junkick.database import Base

# Registers users, sessions, projects, project_tags, project_members,
# applications and the dictionary tables with Base.metadata
import junkick.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", settings.database_url)


def _configure_options() -> dict:
    url = config.get_main_option("sqlalchemy.url") or ""
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        # ALTER TABLE on SQLite needs copy-and-move batches
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting (review before applying)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, **_configure_options())

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Apply pending revisions through an async engine without pooling."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
