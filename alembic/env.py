"""
Alembic environment for the route planner schema.

The target URL is resolved in this order: ``-x db_url=...`` on the
command line, ``sqlalchemy.url`` in the config (tests set it), then the
synchronous URL from the application settings.
"""
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.config import get_settings
from app.db.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def resolve_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return override or config.get_main_option("sqlalchemy.url") or get_settings().database_url_sync


def include_object(object, name, type_, reflected, compare_to):
    """Keep Alembic's own bookkeeping table out of autogenerate."""
    return not (type_ == "table" and name == "alembic_version")


COMMON_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "include_object": include_object,
}


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMMON_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    connectable = engine_from_config(
        {"sqlalchemy.url": url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **COMMON_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_offline(resolve_url())
else:
    run_online(resolve_url())
