from support import PURCHASE_DATE, SALE_DATE, count_rows, ledger_rows, make_session_factory, seed_customer, seed_product

import unittest
from datetime import date
from decimal import Decimal

from retail_ledger.core.errors import InvalidDate, InvalidStockOperation, StateConflictError, ValidationError
from retail_ledger.models.daily_transaction import DailyTransaction
from retail_ledger.models.product import Product
from retail_ledger.models.stock_transaction import StockTransaction
from retail_ledger.services.sale_service import create_sale
from retail_ledger.services.stock_service import (
    apply_stock_movement,
    delete_stock_transaction,
    list_stock_transactions,
)


class StockServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = make_session_factory()
        self.db = Session()
        self.product = seed_product(self.db)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _stock(self):
        return self.db.get(Product, self.product.id).stock_quantity

    def _move(self, **overrides):
        values = dict(
            quantity=5,
            direction="IN",
            movement_type="PURCHASE",
            movement_date=date(2024, 1, 15),
        )
        values.update(overrides)
        return apply_stock_movement(self.db, self.product.id, **values)

    def test_founding_purchase_is_booked(self):
        movement = self.db.query(StockTransaction).filter_by(product_id=self.product.id).one()
        self.assertTrue(movement.initial)
        self.assertEqual((movement.type, movement.direction, movement.quantity), ("PURCHASE", "IN", 10))
        self.assertEqual(movement.date, PURCHASE_DATE)

        rows = ledger_rows(self.db, stock_id=movement.id)
        self.assertEqual([(r.direction, r.amount, r.product_id) for r in rows], [("OUT", Decimal("1000"), self.product.id)])

    def test_purchase_adds_stock_and_pays_supplier(self):
        movement = self._move(payment_method="BANK")

        self.assertEqual(self._stock(), 15)
        rows = ledger_rows(self.db, stock_id=movement.id)
        self.assertEqual([(r.type, r.direction, r.amount) for r in rows], [("BANK", "OUT", Decimal("500"))])

    def test_supplier_return_removes_stock_and_books_refund(self):
        movement = self._move(quantity=3, direction="OUT", movement_type="RETURN")

        self.assertEqual(self._stock(), 7)
        rows = ledger_rows(self.db, stock_id=movement.id)
        self.assertEqual([(r.direction, r.amount) for r in rows], [("IN", Decimal("300"))])

    def test_stock_never_goes_negative(self):
        movements_before = count_rows(self.db, StockTransaction)

        with self.assertRaises(InvalidStockOperation):
            self._move(quantity=11, direction="OUT", movement_type="RETURN")

        self.assertEqual(self._stock(), 10)
        self.assertEqual(count_rows(self.db, StockTransaction), movements_before)

    def test_movement_validation(self):
        with self.assertRaises(ValidationError):
            self._move(movement_type="SALE")
        with self.assertRaises(ValidationError):
            self._move(quantity=0)
        with self.assertRaises(ValidationError):
            self._move(direction="SIDEWAYS")
        with self.assertRaises(InvalidDate):
            self._move(movement_date=date(2024, 1, 1))

    def test_only_purchases_in_and_supplier_returns_out_are_accepted(self):
        movements_before = count_rows(self.db, StockTransaction)
        ledger_before = count_rows(self.db, DailyTransaction)

        with self.assertRaises(ValidationError):
            self._move(direction="OUT", movement_type="PURCHASE")
        with self.assertRaises(ValidationError):
            self._move(direction="IN", movement_type="RETURN")

        self.assertEqual(self._stock(), 10)
        self.assertEqual(count_rows(self.db, StockTransaction), movements_before)
        self.assertEqual(count_rows(self.db, DailyTransaction), ledger_before)

    def test_deleting_a_movement_reverses_it(self):
        movement = self._move()
        movement_id = movement.id

        product = delete_stock_transaction(self.db, movement_id)

        self.assertEqual(product.stock_quantity, 10)
        self.assertIsNone(self.db.get(StockTransaction, movement_id))
        self.assertEqual(ledger_rows(self.db, stock_id=movement_id), [])

    def test_deleting_reduces_stock_only_when_units_remain(self):
        movement = self._move()
        self._move(quantity=12, direction="OUT", movement_type="RETURN")

        with self.assertRaises(InvalidStockOperation):
            delete_stock_transaction(self.db, movement.id)
        self.assertEqual(self._stock(), 3)

    def test_founding_and_sale_movements_cannot_be_deleted(self):
        founding = self.db.query(StockTransaction).filter_by(initial=True).one()
        with self.assertRaises(StateConflictError):
            delete_stock_transaction(self.db, founding.id)

        customer = seed_customer(self.db)
        sale = create_sale(self.db, customer_id=customer.id, product_id=self.product.id, sale_date=SALE_DATE)
        sold = self.db.query(StockTransaction).filter_by(sale_id=sale.id).one()
        with self.assertRaises(StateConflictError):
            delete_stock_transaction(self.db, sold.id)
        self.assertEqual(self._stock(), 9)

    def test_listing_filters_by_type(self):
        self._move()
        self._move(quantity=2, direction="OUT", movement_type="RETURN")

        result = list_stock_transactions(self.db, product_id=self.product.id, movement_type="RETURN")
        self.assertEqual(result["total"], 1)
        self.assertEqual(result["stock_transactions"][0].quantity, 2)
        self.assertEqual(list_stock_transactions(self.db)["total"], 3)


if __name__ == "__main__":
    unittest.main()
