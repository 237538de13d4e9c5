from support import SALE_DATE, ledger_rows, make_session_factory, seed_customer, seed_product

import unittest
from datetime import date
from decimal import Decimal

from retail_ledger.core.clock import FixedClock
from retail_ledger.core.errors import InvalidDate, StateConflictError, ValidationError
from retail_ledger.models.product import Product
from retail_ledger.services.installment_service import pay_installment
from retail_ledger.services.lookups import sale_installments
from retail_ledger.services.product_service import update_product
from retail_ledger.services.sale_service import create_sale, return_sale


class ReturnSaleTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = make_session_factory()
        self.db = Session()
        self.product = seed_product(self.db)
        self.customer = seed_customer(self.db)
        self.clock = FixedClock(date(2024, 6, 1))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _sell(self, **overrides):
        values = dict(customer_id=self.customer.id, product_id=self.product.id, sale_date=SALE_DATE)
        values.update(overrides)
        return create_sale(self.db, **values)

    def _stock(self):
        return self.db.get(Product, self.product.id).stock_quantity

    def test_full_return_of_cash_sale_refunds_everything(self):
        sale = self._sell(quantity=3)

        sale = return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=3)

        self.assertEqual(sale.status, "RETURNED")
        self.assertEqual(sale.quantity, 0)
        self.assertEqual(sale.paid_amount, Decimal("0"))
        self.assertEqual(sale.remaining_amount, Decimal("0"))
        self.assertEqual(sale.return_quantity, 3)
        self.assertEqual(sale.return_amount, Decimal("450"))
        self.assertEqual(self._stock(), 10)

        rows = ledger_rows(self.db, sale_id=sale.id)
        self.assertEqual([(r.direction, r.amount) for r in rows], [("OUT", Decimal("450"))])
        self.assertEqual(rows[0].date, date(2024, 2, 10))

    def test_partial_return_refunds_from_down_payment(self):
        sale = self._sell(quantity=3)

        sale = return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=1)

        self.assertEqual(sale.status, "PARTIAL")
        self.assertEqual(sale.quantity, 2)
        self.assertEqual(sale.total_amount, Decimal("300"))
        self.assertEqual(sale.paid_amount, Decimal("300"))
        self.assertEqual(sale.remaining_amount, Decimal("0"))
        self.assertEqual(sale.return_amount, Decimal("150"))
        self.assertEqual(self._stock(), 8)

        rows = ledger_rows(self.db, sale_id=sale.id)
        self.assertEqual(
            [(r.direction, r.amount) for r in rows],
            [("IN", Decimal("450")), ("OUT", Decimal("150"))],
        )

    def test_partial_return_without_down_payment_cover_refunds_nothing(self):
        sale = self._sell(
            sale_type="INSTALLMENT",
            quantity=4,
            down_payment=Decimal("100"),
            total_installments=3,
        )

        sale = return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=1)

        self.assertEqual(sale.status, "PARTIAL")
        self.assertEqual(sale.total_amount, Decimal("450"))
        self.assertEqual(sale.paid_amount, Decimal("100"))
        self.assertEqual(sale.remaining_amount, Decimal("350"))
        self.assertEqual(sale.return_amount, Decimal("0"))
        self.assertEqual(self._stock(), 7)
        self.assertEqual([r.direction for r in ledger_rows(self.db, sale_id=sale.id)], ["IN"])

        sale = pay_installment(self.db, sale.id, paid_date=date(2024, 3, 1), clock=self.clock)
        self.assertEqual(sale.status, "PARTIAL")
        self.assertEqual(sale.paid_amount + sale.remaining_amount, Decimal("450"))

    def test_partial_return_respreads_unpaid_installments(self):
        sale = self._sell(
            sale_type="INSTALLMENT",
            quantity=4,
            down_payment=Decimal("100"),
            total_installments=3,
        )

        sale = return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=1)

        installments = sale_installments(self.db, sale.id)
        self.assertEqual([i.amount for i in installments], [Decimal("116"), Decimal("116"), Decimal("118")])
        self.assertEqual(sum(i.amount for i in installments), sale.remaining_amount)
        self.assertEqual([i.due_date for i in installments], [date(2024, 3, 1), date(2024, 4, 1), date(2024, 5, 1)])

        for month in (3, 4, 5):
            sale = pay_installment(self.db, sale.id, paid_date=date(2024, month, 1), clock=self.clock)

        self.assertEqual(sale.status, "COMPLETED")
        self.assertEqual(sale.paid_amount, Decimal("450"))
        self.assertEqual(sale.remaining_amount, Decimal("0"))
        self.assertEqual(sale.paid_installments, 3)

    def test_partial_return_after_settlement_leaves_customer_credit(self):
        sale = self._sell(
            sale_type="INSTALLMENT",
            quantity=4,
            down_payment=Decimal("100"),
            total_installments=3,
        )
        for month in (3, 4, 5):
            sale = pay_installment(self.db, sale.id, paid_date=date(2024, month, 1), clock=self.clock)
        self.assertEqual(sale.status, "COMPLETED")

        sale = return_sale(self.db, sale.id, return_date=date(2024, 5, 10), quantity=1)

        # The down payment cannot cover the returned unit, so nothing is refunded.
        self.assertEqual(sale.status, "PARTIAL")
        self.assertEqual(sale.total_amount, Decimal("450"))
        self.assertEqual(sale.paid_amount, Decimal("600"))
        self.assertEqual(sale.remaining_amount, Decimal("0"))
        self.assertEqual(sale.return_amount, Decimal("0"))
        self.assertEqual(sale.paid_amount - (sale.total_amount - sale.discount), Decimal("150"))
        self.assertEqual([r.direction for r in ledger_rows(self.db, sale_id=sale.id)], ["IN"] * 4)
        with self.assertRaises(StateConflictError):
            pay_installment(self.db, sale.id, paid_date=date(2024, 5, 20), clock=self.clock)

    def test_partial_return_values_units_at_the_sale_price(self):
        sale = self._sell(quantity=3)
        update_product(self.db, self.product.id, selling_price="200")

        sale = return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=1)

        self.assertEqual(sale.return_amount, Decimal("150"))
        self.assertEqual(sale.paid_amount, Decimal("300"))
        self.assertEqual(sale.remaining_amount, Decimal("0"))

    def test_full_return_of_installment_sale_closes_schedule(self):
        sale = self._sell(
            sale_type="INSTALLMENT",
            quantity=2,
            down_payment=Decimal("100"),
            total_installments=2,
        )
        pay_installment(self.db, sale.id, paid_date=date(2024, 3, 1), clock=self.clock)

        sale = return_sale(self.db, sale.id, return_date=date(2024, 3, 10), quantity=2, refund_method="BANK")

        self.assertEqual(sale.status, "RETURNED")
        self.assertEqual(sale.down_payment, Decimal("0"))
        rows = ledger_rows(self.db, sale_id=sale.id)
        self.assertEqual([(r.type, r.direction, r.amount) for r in rows], [("BANK", "OUT", Decimal("200"))])
        installments = sale_installments(self.db, sale.id)
        self.assertTrue(all(i.status == "PAID" and i.amount == Decimal("0") for i in installments))
        self.assertEqual(self._stock(), 10)

    def test_return_guards(self):
        sale = self._sell(quantity=2)

        with self.assertRaises(StateConflictError):
            return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=3)
        with self.assertRaises(ValidationError):
            return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=0)
        with self.assertRaises(InvalidDate):
            return_sale(self.db, sale.id, return_date=date(2024, 1, 31), quantity=1)
        self.assertEqual(self._stock(), 8)

        return_sale(self.db, sale.id, return_date=date(2024, 2, 10), quantity=2)
        with self.assertRaises(StateConflictError):
            return_sale(self.db, sale.id, return_date=date(2024, 2, 11), quantity=1)


if __name__ == "__main__":
    unittest.main()
