"""
Alembic migration environment.

The schema here is the authority for every integrity rule the repositories
rely on (unique slug, unique event/email pair, bookings -> events FK), so
autogenerate compares types as well as names.

`alembic -x url=...` overrides DATABASE_URL_SYNC for one-off runs.
"""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from devevent.db.base import Base
from devevent.models import Event, Booking  # noqa: F401 - Import models for autogenerate
from devevent.core.config import get_settings

config = context.config
settings = get_settings()

url_override = context.get_x_argument(as_dictionary=True).get("url")
config.set_main_option("sqlalchemy.url", url_override or settings.DATABASE_URL_SYNC)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
