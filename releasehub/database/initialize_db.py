import logging

from sqlalchemy.engine import Engine

from releasehub.models import (  # noqa: F401  registers tables on Base.metadata
    config_entry,
    download_record,
    link,
    subscriber,
)
from releasehub.database.db_setup import Base

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.exception(f"[-] Failed to create database tables: {e}")
        raise
