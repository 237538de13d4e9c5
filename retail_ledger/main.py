import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from retail_ledger.config import Settings, get_settings
from retail_ledger.core.errors import LedgerError
from retail_ledger.core.logging import setup_logging
from retail_ledger.database import Base, SessionLocal, engine
from retail_ledger.models import import_all_models
from retail_ledger.routers import (
    customers_router,
    daily_transactions_router,
    health_router,
    investments_router,
    products_router,
    sales_router,
    stock_router,
    summaries_router,
)
from retail_ledger.services.batch_trigger import SummaryBatchTrigger

logger = logging.getLogger(__name__)

_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

setup_logging()
settings: Settings = get_settings()

import_all_models()
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME)
app.state.summary_trigger = SummaryBatchTrigger()
app.state.session_factory = SessionLocal

app.include_router(health_router)
app.include_router(products_router)
app.include_router(stock_router)
app.include_router(customers_router)
app.include_router(sales_router)
app.include_router(daily_transactions_router)
app.include_router(investments_router)
app.include_router(summaries_router)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "data": None},
    )


@app.middleware("http")
async def count_writes(request: Request, call_next):
    response = await call_next(request)
    if request.method in _WRITE_METHODS and response.status_code < 400:
        await run_in_threadpool(app.state.summary_trigger.record_write, app.state.session_factory)
    return response


__all__ = ["app"]
