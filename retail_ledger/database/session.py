import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from retail_ledger.core.errors import StoreError
from retail_ledger.database.engine import engine

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Run a block of ledger writes as one transaction.

    Commits when the block finishes, rolls everything back when it raises.
    Driver failures surface as ``StoreError``; engine errors pass through as-is.
    """
    try:
        yield db
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Ledger store failure, transaction rolled back")
        raise StoreError("Ledger store is unavailable, no changes were saved.") from exc
    except Exception:
        db.rollback()
        raise
