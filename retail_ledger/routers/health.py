import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_ledger.config import get_settings
from retail_ledger.core.security import auth_enabled
from retail_ledger.dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check could not reach the ledger store")
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "auth_enabled": auth_enabled(),
        "time": datetime.now(timezone.utc).isoformat(),
    }
