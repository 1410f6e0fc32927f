# backend/alembic/env.py
from logging.config import fileConfig
from alembic import context

from receiving.core.config import get_settings
from receiving.core.db import Base, make_engine
# importing the models fills the metadata
from receiving import models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    # `alembic -x url=sqlite:///./other.db upgrade head` targets another database
    return context.get_x_argument(as_dictionary=True).get("url") or get_settings().database_url


def _configure_kwargs(dialect_name: str) -> dict:
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=False,
        # SQLite cannot ALTER constraints in place
        render_as_batch=(dialect_name == "sqlite"),
    )


def run_migrations_offline():
    """Emit SQL for the configured database without connecting."""
    engine = make_engine(_database_url())
    context.configure(url=engine.url.render_as_string(hide_password=False), literal_binds=True, **_configure_kwargs(engine.dialect.name))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = make_engine(_database_url())
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_configure_kwargs(engine.dialect.name))
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
