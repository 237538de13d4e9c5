from retail_ledger.services.batch_trigger import SummaryBatchTrigger
from retail_ledger.services.installment_service import pay_installment, sweep_late_installments, update_installment
from retail_ledger.services.sale_service import create_sale, return_sale
from retail_ledger.services.stock_service import apply_stock_movement
from retail_ledger.services.summary_service import aggregate_range, recompute_month

__all__ = [
    "SummaryBatchTrigger",
    "aggregate_range",
    "apply_stock_movement",
    "create_sale",
    "pay_installment",
    "recompute_month",
    "return_sale",
    "sweep_late_installments",
    "update_installment",
]
