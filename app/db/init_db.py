import logging

from sqlalchemy.engine import Engine

from app.db.base import Base

logger = logging.getLogger(__name__)


def create_tables(engine: Engine) -> None:
    # registers every model on Base.metadata
    import app.models  # noqa: F401

    # existing tables are left untouched
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Tables ensured on %s", engine.url.render_as_string(hide_password=True))
