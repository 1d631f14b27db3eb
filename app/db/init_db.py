import logging

from app.db.session import engine
from app.db.base import Base
from app.db import models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db():
    """Create missing tables without touching existing ones."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
