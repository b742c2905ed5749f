from __future__ import annotations

import datetime
import unittest
from decimal import Decimal

from carwash.core.config import settings
from carwash.models.invoice import Invoice, InvoiceSequence
from tests.support import ApiTestCase

INVOICE = {
    "customer": {"name": "Juan Pérez", "phone": "9999-0000", "taxId": "0801-1990-12345"},
    "items": [{"serviceName": "Lavado Básico", "quantity": 1, "unitPrice": 80.00}],
    "date": "2025-01-15",
}


class InvoiceApiTests(ApiTestCase):
    def post_invoice(self, **overrides):
        return self.client.post("/invoices", json={**INVOICE, **overrides})

    def test_create_and_fetch(self):
        resp = self.post_invoice()
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        invoice = body["invoice"]
        self.assertRegex(invoice["number"], r"^\d{3}-\d{4}$")
        self.assertEqual(invoice["subtotal"], "80.00")
        self.assertEqual(invoice["tax"], "0.00")
        self.assertEqual(invoice["total"], "80.00")
        self.assertEqual(invoice["customerTaxId"], "0801-1990-12345")
        self.assertEqual(invoice["status"], "pending")
        self.assertEqual(invoice["date"], "2025-01-15")
        self.assertEqual(len(body["items"]), 1)
        self.assertEqual(body["items"][0]["unitPrice"], "80.00")
        self.assertEqual(body["items"][0]["invoiceId"], invoice["id"])

        fetched = self.client.get(f"/invoices/{invoice['id']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json(), body)

    def test_list_is_newest_first(self):
        first = self.post_invoice().json()["invoice"]["number"]
        second = self.post_invoice().json()["invoice"]["number"]
        listed = self.client.get("/invoices").json()
        self.assertEqual([i["number"] for i in listed], [second, first])

    def test_missing_invoice(self):
        resp = self.client.get("/invoices/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Invoice not found")

    def test_stock_is_deducted(self):
        product = self.create_product(quantity=5)
        resp = self.post_invoice(inventoryItems=[{"id": product["id"], "quantity": 2}])
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(self.client.get(f"/inventory/{product['id']}").json()["quantity"], 3)

    def test_insufficient_stock(self):
        product = self.create_product(quantity=1)
        resp = self.post_invoice(inventoryItems=[{"id": product["id"], "quantity": 2}])
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Cera Automotriz", resp.json()["detail"])
        self.assertEqual(self.client.get(f"/inventory/{product['id']}").json()["quantity"], 1)
        self.assertEqual(self.client.get("/invoices").json(), [])

    def test_unknown_inventory_item_is_a_bad_request(self):
        resp = self.post_invoice(inventoryItems=[{"id": 4242, "quantity": 1}])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get("/invoices").json(), [])

    def test_validation_failures(self):
        cases = [
            {"items": []},
            {"items": [{"serviceName": "Lavado", "quantity": 0, "unitPrice": 10}]},
            {"items": [{"serviceName": "Lavado", "quantity": 1, "unitPrice": -5}]},
            {"date": "15-01-2025"},
            {"customer": {"name": ""}},
            {"customer": None},
        ]
        for overrides in cases:
            resp = self.post_invoice(**overrides)
            self.assertEqual(resp.status_code, 400, overrides)
            self.assertTrue(resp.json()["detail"])
        self.assertEqual(self.client.get("/invoices").json(), [])

    def test_status_change_needs_admin(self):
        invoice_id = self.post_invoice().json()["invoice"]["id"]

        denied = self.client.put(f"/invoices/{invoice_id}/status", json={"status": "paid"})
        self.assertEqual(denied.status_code, 401)
        self.assertEqual(denied.json()["detail"], "Incorrect password")

        resp = self.client.put(f"/invoices/{invoice_id}/status", json=self.admin(status="paid"))
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["status"], "paid")
        self.assertEqual(len(self.client.get("/invoices", params={"status": "paid"}).json()), 1)

        bad = self.client.put(f"/invoices/{invoice_id}/status", json=self.admin(status="lost"))
        self.assertEqual(bad.status_code, 400)

    def test_storage_failure_is_a_generic_500(self):
        product = self.create_product(quantity=5)
        with self.SessionTest() as db:
            db.add(InvoiceSequence(prefix=settings.invoice_prefix, last_value=0))
            db.add(
                Invoice(
                    number=f"{settings.invoice_prefix}-0001",
                    customer_name="Existente",
                    subtotal=Decimal("10.00"),
                    tax=Decimal("0.00"),
                    total=Decimal("10.00"),
                    date=datetime.date(2025, 1, 1),
                )
            )
            db.commit()

        with self.assertLogs("carwash", level="ERROR"):
            resp = self.post_invoice(inventoryItems=[{"id": product["id"], "quantity": 2}])
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"detail": "Storage failure. Please try again later."})
        self.assertNotIn("UNIQUE", resp.text)
        self.assertEqual(self.client.get(f"/inventory/{product['id']}").json()["quantity"], 5)

    def test_request_id_header(self):
        resp = self.client.get("/invoices", headers={"x-request-id": "abc123"})
        self.assertEqual(resp.headers["x-request-id"], "abc123")
        generated = self.client.get("/invoices").headers["x-request-id"]
        self.assertRegex(generated, r"^[0-9a-f]{12}$")


if __name__ == "__main__":
    unittest.main()
