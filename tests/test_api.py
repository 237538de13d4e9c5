from support import make_session_factory

import os
import unittest
from datetime import date
from unittest import mock

from fastapi.testclient import TestClient

from retail_ledger.config import get_settings
from retail_ledger.core.clock import FixedClock
from retail_ledger.dependencies import get_clock, get_db
from retail_ledger.main import app


class ApiTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = make_session_factory()

        def override_db():
            db = Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_clock] = lambda: FixedClock(date(2024, 3, 15))
        app.state.summary_trigger.enabled = False
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def _seed(self):
        customer = self.client.post(
            "/customers",
            json={
                "name": "Ali Raza",
                "cnic": "3520212345671",
                "phone": "03001234567",
                "address": "Model Town, Lahore",
            },
        )
        self.assertEqual(customer.status_code, 201, customer.text)
        product = self.client.post(
            "/products",
            json={
                "name": "Ceiling Fan",
                "buying_price": "100",
                "selling_price": "150",
                "stock_quantity": 10,
                "purchase_date": "2024-01-10",
            },
        )
        self.assertEqual(product.status_code, 201, product.text)
        return customer.json()["data"]["id"], product.json()["data"]["id"]

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_cash_sale_round_trip(self):
        customer_id, product_id = self._seed()

        response = self.client.post(
            "/sales",
            json={"customer_id": customer_id, "product_id": product_id, "sale_date": "2024-02-01", "quantity": 3},
        )

        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertTrue(body["success"])
        sale = body["data"]["sale"]
        self.assertEqual(sale["status"], "COMPLETED")
        self.assertEqual(float(sale["paid_amount"]), 450.0)
        self.assertEqual(body["data"]["product"]["stock_quantity"], 7)

        listed = self.client.get("/sales", params={"customer_name": "ali"}).json()["data"]
        self.assertEqual(listed["total"], 1)
        self.assertEqual(listed["sales"][0]["product_name"], "ceiling fan")

    def test_engine_failures_map_to_status_codes(self):
        customer_id, product_id = self._seed()

        response = self.client.post(
            "/sales",
            json={"customer_id": customer_id, "product_id": product_id, "sale_date": "2024-02-01", "quantity": 20},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["success"], False)
        self.assertIn("Not enough stock", response.json()["message"])
        self.assertIsNone(response.json()["data"])

        self.assertEqual(self.client.get("/sales/999").status_code, 404)

    def test_installment_flow(self):
        customer_id, product_id = self._seed()
        sale = self.client.post(
            "/sales",
            json={
                "customer_id": customer_id,
                "product_id": product_id,
                "sale_date": "2024-02-01",
                "sale_type": "INSTALLMENT",
                "quantity": 4,
                "down_payment": "200",
                "total_installments": 3,
            },
        ).json()["data"]
        sale_id = sale["sale"]["id"]
        self.assertEqual([float(i["amount"]) for i in sale["installments"]], [133.0, 133.0, 134.0])

        early = self.client.post("/sales/{}/installments".format(sale_id), json={"paid_date": "2024-01-20"})
        self.assertEqual(early.status_code, 400)

        paid = self.client.post("/sales/{}/installments".format(sale_id), json={"paid_date": "2024-03-01"})
        self.assertEqual(paid.status_code, 200, paid.text)
        data = paid.json()["data"]
        self.assertEqual([i["status"] for i in data["installments"]], ["PAID", "PENDING", "PENDING"])
        self.assertEqual(float(data["sale"]["remaining_amount"]), 267.0)

        installment_id = data["installments"][0]["id"]
        edited = self.client.put("/sales/installments/{}".format(installment_id), json={"amount": "400"})
        self.assertEqual(edited.json()["data"]["sale"]["status"], "COMPLETED")

        returned = self.client.put(
            "/sales/{}/return".format(sale_id), json={"return_date": "2024-03-10", "quantity": 4}
        )
        self.assertEqual(returned.json()["data"]["sale"]["status"], "RETURNED")

    def test_request_validation_rejects_short_cnic(self):
        response = self.client.post(
            "/customers",
            json={"name": "Ali", "cnic": "123", "phone": "03001234567", "address": "Lahore"},
        )
        self.assertEqual(response.status_code, 422)

    def test_dashboard_reports_range(self):
        self._seed()
        response = self.client.get("/summaries/dashboard", params={"start_month": 1, "start_year": 2024})
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()["data"]
        self.assertEqual(data["months"], 1)
        self.assertEqual(float(data["total_cash"]), -1000.0)

    def test_writes_require_api_key_when_configured(self):
        with mock.patch.dict(os.environ, {"API_KEYS": "shop-key"}):
            get_settings.cache_clear()
            try:
                denied = self.client.post("/daily-transactions", json={"type": "EXPENSE", "amount": "10", "date": "2024-02-01"})
                allowed = self.client.post(
                    "/daily-transactions",
                    json={"type": "EXPENSE", "amount": "10", "date": "2024-02-01"},
                    headers={"X-API-Key": "shop-key"},
                )
                reads = self.client.get("/daily-transactions")
            finally:
                get_settings.cache_clear()

        self.assertEqual(denied.status_code, 401)
        self.assertEqual(allowed.status_code, 201, allowed.text)
        self.assertEqual(allowed.json()["data"]["direction"], "OUT")
        self.assertEqual(reads.status_code, 200)


if __name__ == "__main__":
    unittest.main()
