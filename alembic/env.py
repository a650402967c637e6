"""Alembic environment. Migrations run through the same async driver as the application."""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from noticeboard.config import settings
from noticeboard.db.session import _connect_args
from noticeboard.models import Base

# Alembic Config
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Migration database URL. DATABASE_URL is required."""
    url = settings.database_url
    if not url:
        raise ValueError("DATABASE_URL not set. Set it in .env or environment.")
    return url.strip()


def run_migrations_offline() -> None:
    """Offline mode: emit SQL without connecting."""
    context.configure(
        url=settings.database_url_sync,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=settings.database_url_sync.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Online mode: connect with the async engine and run migrations in a sync shim."""
    url = get_url()
    connectable = create_async_engine(
        url,
        poolclass=pool.NullPool,
        connect_args=_connect_args(url),
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
