from support import SALE_DATE, count_rows, make_session_factory, seed_customer, seed_product

import unittest
from datetime import date
from decimal import Decimal

from retail_ledger.core.clock import FixedClock
from retail_ledger.core.errors import NotFoundError, ValidationError
from retail_ledger.models.monthly_summary import MonthlySummary
from retail_ledger.services.batch_trigger import SummaryBatchTrigger
from retail_ledger.services.daily_transaction_service import create_daily_transaction
from retail_ledger.services.investment_service import create_investment
from retail_ledger.services.sale_service import create_sale
from retail_ledger.services.summary_service import (
    SUMMARY_FIELDS,
    aggregate_range,
    delete_summary,
    list_summaries,
    recompute_month,
)


class SummaryServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = make_session_factory()
        self.db = self.Session()
        product = seed_product(self.db)
        customer = seed_customer(self.db)
        create_sale(self.db, customer_id=customer.id, product_id=product.id, sale_date=SALE_DATE, quantity=3)
        create_sale(
            self.db,
            customer_id=customer.id,
            product_id=product.id,
            sale_date=date(2024, 2, 10),
            sale_type="INSTALLMENT",
            quantity=2,
            down_payment=Decimal("100"),
            total_installments=2,
        )
        create_daily_transaction(self.db, ledger_type="EXPENSE", amount=Decimal("100"), entry_date=date(2024, 2, 12))
        create_daily_transaction(self.db, ledger_type="DEBT", amount=Decimal("50"), entry_date=date(2024, 2, 13))
        create_daily_transaction(
            self.db, ledger_type="BANK", direction="IN", amount=Decimal("200"), entry_date=date(2024, 2, 14)
        )
        create_investment(
            self.db, investor="Hamza", amount=Decimal("1000"), investment_date=date(2024, 2, 20), method="BANK"
        )

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_month_is_rebuilt_from_the_ledgers(self):
        summary = recompute_month(self.db, 2, 2024)

        expected = {
            "total_expense": Decimal("100"),
            "total_debt": Decimal("50"),
            "total_bank": Decimal("1200"),
            "total_cash": Decimal("550"),
            "total_sales": Decimal("750"),
            "cost_of_stock": Decimal("500"),
            "gross_profit": Decimal("250"),
            "net_profit": Decimal("100"),
            "stock_value": Decimal("500"),
            "total_investment": Decimal("1000"),
        }
        self.assertEqual({field: getattr(summary, field) for field in SUMMARY_FIELDS}, expected)

    def test_cash_is_a_signed_monthly_flow(self):
        january = recompute_month(self.db, 1, 2024)
        self.assertEqual(january.total_cash, Decimal("-1000"))
        self.assertEqual(january.total_sales, Decimal("0"))

    def test_recompute_is_idempotent(self):
        first = recompute_month(self.db, 2, 2024)
        first_values = {field: getattr(first, field) for field in SUMMARY_FIELDS}

        second = recompute_month(self.db, 2, 2024)

        self.assertEqual(first.id, second.id)
        self.assertEqual({field: getattr(second, field) for field in SUMMARY_FIELDS}, first_values)
        self.assertEqual(count_rows(self.db, MonthlySummary), 1)

    def test_range_sums_flows_and_keeps_last_stock_snapshot(self):
        result = aggregate_range(self.db, 2, 2024, 1, 2024)

        self.assertEqual(result["months"], 2)
        self.assertEqual(result["from"], {"month": 1, "year": 2024})
        self.assertEqual(result["to"], {"month": 2, "year": 2024})
        self.assertEqual(result["total_cash"], Decimal("-450"))
        self.assertEqual(result["total_bank"], Decimal("1200"))
        self.assertEqual(result["total_sales"], Decimal("750"))
        self.assertEqual(result["stock_value"], Decimal("500"))
        self.assertEqual(result["total_customer_debt"], Decimal("200"))
        self.assertEqual(result["total_stock_quantity"], 5)
        self.assertEqual(result["total_customers"], 1)
        self.assertEqual([(p["month"], p["total_sales"]) for p in result["trend_data"]], [(1, Decimal("0")), (2, Decimal("750"))])
        self.assertEqual(count_rows(self.db, MonthlySummary), 2)

    def test_invalid_month_is_rejected(self):
        with self.assertRaises(ValidationError):
            recompute_month(self.db, 13, 2024)
        with self.assertRaises(ValidationError):
            aggregate_range(self.db, 1, 2024, 0, 2024)

    def test_list_and_delete(self):
        aggregate_range(self.db, 1, 2024, 3, 2024)

        listed = list_summaries(self.db, year=2024)
        self.assertEqual([s.month for s in listed["monthly_summaries"]], [3, 2, 1])

        delete_summary(self.db, listed["monthly_summaries"][0].id)
        self.assertEqual(list_summaries(self.db)["total"], 2)
        with self.assertRaises(NotFoundError):
            delete_summary(self.db, 999)

    def test_batch_trigger_recomputes_after_threshold(self):
        trigger = SummaryBatchTrigger(threshold=2, enabled=True, clock=FixedClock(date(2024, 2, 28)))

        self.assertFalse(trigger.record_write(self.Session))
        self.assertEqual(count_rows(self.db, MonthlySummary), 0)
        self.assertTrue(trigger.record_write(self.Session))
        self.assertEqual(trigger.writes, 0)

        summary = self.db.query(MonthlySummary).one()
        self.assertEqual((summary.year, summary.month), (2024, 2))
        self.assertEqual(summary.total_sales, Decimal("750"))

    def test_disabled_batch_trigger_never_runs(self):
        trigger = SummaryBatchTrigger(threshold=1, enabled=False)
        self.assertFalse(trigger.record_write(self.Session))
        self.assertEqual(count_rows(self.db, MonthlySummary), 0)


if __name__ == "__main__":
    unittest.main()
