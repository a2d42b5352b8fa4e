import logging

from app.database.engine import SessionLocal
from app.database.base import Base

logger = logging.getLogger(__name__)


def get_db():
    """Request-scoped session backing the SQL ledger store."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create the ledger tables on ``bind`` (defaults to the configured engine).

    Quick dev bootstrap; deployed databases are migrated with Alembic.
    """
    import app.models  # noqa: F401  registers every ledger table on Base.metadata

    if bind is None:
        from app.database.engine import engine as bind

    Base.metadata.create_all(bind=bind)
    logger.info("Ledger tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
