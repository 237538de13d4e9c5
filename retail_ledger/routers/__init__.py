from retail_ledger.routers.customers import router as customers_router
from retail_ledger.routers.daily_transactions import router as daily_transactions_router
from retail_ledger.routers.health import router as health_router
from retail_ledger.routers.investments import router as investments_router
from retail_ledger.routers.products import router as products_router
from retail_ledger.routers.sales import router as sales_router
from retail_ledger.routers.stock import router as stock_router
from retail_ledger.routers.summaries import router as summaries_router

__all__ = [
    "customers_router",
    "daily_transactions_router",
    "health_router",
    "investments_router",
    "products_router",
    "sales_router",
    "stock_router",
    "summaries_router",
]
