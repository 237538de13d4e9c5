import importlib

from retail_ledger.models.customer import Customer
from retail_ledger.models.daily_transaction import DailyTransaction
from retail_ledger.models.installment import Installment
from retail_ledger.models.investment import Investment
from retail_ledger.models.monthly_summary import MonthlySummary
from retail_ledger.models.product import Product
from retail_ledger.models.sale import Sale
from retail_ledger.models.stock_transaction import StockTransaction


def import_all_models() -> None:
    for module_name in (
        "retail_ledger.models.customer",
        "retail_ledger.models.daily_transaction",
        "retail_ledger.models.installment",
        "retail_ledger.models.investment",
        "retail_ledger.models.monthly_summary",
        "retail_ledger.models.product",
        "retail_ledger.models.sale",
        "retail_ledger.models.stock_transaction",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Customer",
    "DailyTransaction",
    "Installment",
    "Investment",
    "MonthlySummary",
    "Product",
    "Sale",
    "StockTransaction",
    "import_all_models",
]
