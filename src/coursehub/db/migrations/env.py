"""Alembic environment for the coursehub schema.

Learn: The database URL is resolved in this order:
1. sqlalchemy.url on the alembic config (`coursehub migrate --database-url`)
2. COURSEHUB_DATABASE_URL via settings

SQLite cannot ALTER most things in place, so autogenerated migrations
use batch mode there.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from coursehub.config import settings
from coursehub.db.models import Base

config = context.config
target_metadata = Base.metadata

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        url = settings.database_url
        config.set_main_option("sqlalchemy.url", url)
    return url


def run_offline(url: str) -> None:
    """Emit the migration SQL instead of executing it."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


url = _database_url()
if context.is_offline_mode():
    run_offline(url)
else:
    asyncio.run(run_online())
