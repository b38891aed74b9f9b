from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from stridehr.app_logger import get_logger
from stridehr.core.config import get_settings, sync_url

# Importing the models package registers every table on Base.metadata
import stridehr.db.models  # noqa: F401
from stridehr.db.base import Base

# Alembic Config object
config = context.config

# Logging (only when driven by an alembic.ini file)
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

log = get_logger("migrations")

target_metadata = Base.metadata

# ----- helpers ---------------------------------------------------------------


def _xargs() -> dict[str, str]:
    return context.get_x_argument(as_dictionary=True)


def _choose_url() -> str:
    """``-x sqlalchemy_url=...`` > ``sqlalchemy.url`` option > settings."""
    url = (
        _xargs().get("sqlalchemy_url")
        or config.get_main_option("sqlalchemy.url")
        or get_settings().DATABASE_URL
    )
    # Alembic always runs on a blocking driver
    return sync_url(url)


def _version_table() -> str:
    return config.get_main_option("version_table") or get_settings().MIGRATIONS_VERSION_TABLE


# ----- runners ---------------------------------------------------------------


def run_migrations_offline() -> None:
    """Render SQL to stdout / the configured buffer instead of executing it."""
    url = _choose_url()
    log.info("rendering offline SQL for %s", url.partition("://")[0])

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table=_version_table(),
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _choose_url()
    cfg = dict(config.get_section(config.config_ini_section) or {})
    cfg["sqlalchemy.url"] = url

    connectable = engine_from_config(cfg, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        with connectable.connect() as connection:
            log.info("running migrations on %s (version table %s)", connection.dialect.name, _version_table())
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                version_table=_version_table(),
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
