import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

# makes "app." importable when alembic runs from the project root
sys.path.append(os.path.abspath(os.getcwd()))

from app.core.config import Settings, get_database_url
from app.db.base import Base
import app.models  # noqa: F401

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)


def content_database_url() -> str:
    # an explicit sqlalchemy.url (set by callers such as tests) wins over DATABASE_URL
    return config.get_main_option("sqlalchemy.url") or get_database_url(Settings())


def migrate_content_tables() -> None:
    url = content_database_url()
    engine = engine_from_config({"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            compare_type=True,
            render_as_batch=url.lower().startswith("sqlite"),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    raise RuntimeError("Offline (--sql) migrations are not supported; run against a live database")

migrate_content_tables()
