"""Alembic environment for the photon schema; migrations run on sync drivers."""
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool, text
from alembic import context

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from photon.core.config import settings
from photon.core.database import Base
import photon.models  # noqa: F401  (registers all tables on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _sync_url(url: str) -> str:
    # ConfigParser interpolates '%', so double it
    return url.replace('+asyncpg', '').replace('+aiosqlite', '').replace('%', '%%')


config.set_main_option('sqlalchemy.url', _sync_url(settings.DATABASE_URL))
target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    if not settings.DB_SCHEMA:
        return True
    table = object if type_ == "table" else getattr(object, "table", None)
    if table is not None and getattr(table, "schema", None) != settings.DB_SCHEMA:
        return False
    return True


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table_schema=settings.DB_SCHEMA,
        include_schemas=False,
        include_object=include_object
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live connection, creating DB_SCHEMA first if set."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        if settings.DB_SCHEMA:
            connection.execution_options(isolation_level="AUTOCOMMIT").execute(
                text(f'CREATE SCHEMA IF NOT EXISTS "{settings.DB_SCHEMA}"')
            )

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            version_table_schema=settings.DB_SCHEMA,
            include_schemas=bool(settings.DB_SCHEMA),
            include_object=include_object
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
