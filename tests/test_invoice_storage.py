from __future__ import annotations

import datetime
import re
import unittest
from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from carwash.core.errors import InsufficientStockError, NotFoundError, PersistenceError, ValidationError
from carwash.models.invoice import Invoice, InvoiceSequence
from carwash.schemas.invoice import InvoiceCreate
from carwash.services import invoicing
from carwash.storage import MemoryStorage, SqlStorage
from tests.support import memory_engine

NUMBER_RE = re.compile(r"^\d{3}-\d{4}$")


def make_request(items=None, inventory_items=None, name="Juan Pérez", date="2025-01-15") -> InvoiceCreate:
    if items is None:
        items = [{"serviceName": "Lavado Básico", "quantity": 1, "unitPrice": "80.00"}]
    return InvoiceCreate.model_validate(
        {
            "customer": {"name": name, "phone": "9999-0000"},
            "items": items,
            "date": date,
            "inventoryItems": inventory_items,
        }
    )


class InvoiceStorageContract:
    """Behaviour every Storage must share; mixed into one TestCase per backend."""

    def make_storage(self):
        raise NotImplementedError

    def setUp(self):
        self.storage = self.make_storage()

    def add_product(self, name="Cera Automotriz", quantity=5, is_service=False) -> int:
        with self.storage.transaction():
            row = self.storage.create_inventory_item(
                {
                    "name": name,
                    "description": None,
                    "barcode": None,
                    "quantity": quantity,
                    "min_quantity": 1,
                    "price": Decimal("120.00"),
                    "supplier": None,
                    "category": None,
                    "is_service": is_service,
                    "active": True,
                }
            )
        return row.id

    def quantity_of(self, item_id: int):
        return self.storage.get_inventory_item(item_id).quantity

    def test_single_service_invoice(self):
        bundle = invoicing.create_invoice(self.storage, make_request(), tax_rate=Decimal("0"))
        invoice = bundle.invoice
        self.assertEqual(invoice.subtotal, Decimal("80.00"))
        self.assertEqual(invoice.tax, Decimal("0.00"))
        self.assertEqual(invoice.total, Decimal("80.00"))
        self.assertRegex(invoice.number, NUMBER_RE)
        self.assertEqual(invoice.status, "pending")
        self.assertEqual(len(bundle.items), 1)
        self.assertEqual(bundle.items[0].service_name, "Lavado Básico")
        self.assertEqual(bundle.items[0].total, Decimal("80.00"))

    def test_tax_is_applied_to_subtotal(self):
        bundle = invoicing.create_invoice(self.storage, make_request(), tax_rate=Decimal("0.15"))
        self.assertEqual(bundle.invoice.tax, Decimal("12.00"))
        self.assertEqual(bundle.invoice.total, Decimal("92.00"))

    def test_numbers_strictly_increase(self):
        numbers = [invoicing.create_invoice(self.storage, make_request()).invoice.number for _ in range(5)]
        self.assertEqual(len(set(numbers)), 5)
        sequences = [int(n.split("-")[1]) for n in numbers]
        self.assertEqual(sequences, sorted(sequences))
        self.assertEqual(sequences, list(range(sequences[0], sequences[0] + 5)))

    def test_stock_is_deducted_until_exhausted(self):
        item_id = self.add_product(quantity=5)
        invoicing.create_invoice(self.storage, make_request(inventory_items=[{"id": item_id, "quantity": 5}]))
        self.assertEqual(self.quantity_of(item_id), 0)

        with self.assertRaises(InsufficientStockError) as ctx:
            invoicing.create_invoice(self.storage, make_request(inventory_items=[{"id": item_id, "quantity": 1}]))
        self.assertEqual(ctx.exception.product_name, "Cera Automotriz")
        self.assertEqual(ctx.exception.available, 0)
        self.assertIn("Cera Automotriz", ctx.exception.message)
        self.assertEqual(self.quantity_of(item_id), 0)
        self.assertEqual(len(self.storage.list_invoices()), 1)

    def test_service_rows_are_not_stock_tracked(self):
        item_id = self.add_product(name="Lavado Express", quantity=0, is_service=True)
        invoicing.create_invoice(self.storage, make_request(inventory_items=[{"id": item_id, "quantity": 100}]))
        self.assertEqual(self.quantity_of(item_id), 0)

    def test_failed_deduction_rolls_back_earlier_ones(self):
        first = self.add_product(name="Champú para Autos", quantity=5)
        second = self.add_product(name="Desengrasante", quantity=1)
        with self.assertRaises(InsufficientStockError):
            invoicing.create_invoice(
                self.storage,
                make_request(inventory_items=[{"id": first, "quantity": 3}, {"id": second, "quantity": 2}]),
            )
        self.assertEqual(self.quantity_of(first), 5)
        self.assertEqual(self.quantity_of(second), 1)
        self.assertEqual(self.storage.list_invoices(), [])

    def test_unknown_inventory_item(self):
        first = self.add_product(quantity=5)
        with self.assertRaises(NotFoundError):
            invoicing.create_invoice(
                self.storage,
                make_request(inventory_items=[{"id": first, "quantity": 2}, {"id": 9999, "quantity": 1}]),
            )
        self.assertEqual(self.quantity_of(first), 5)
        self.assertEqual(self.storage.list_invoices(), [])

    def test_failed_invoice_does_not_burn_a_number(self):
        item_id = self.add_product(quantity=0)
        first = invoicing.create_invoice(self.storage, make_request()).invoice.number
        with self.assertRaises(InsufficientStockError):
            invoicing.create_invoice(self.storage, make_request(inventory_items=[{"id": item_id, "quantity": 1}]))
        second = invoicing.create_invoice(self.storage, make_request()).invoice.number
        self.assertEqual(int(second.split("-")[1]), int(first.split("-")[1]) + 1)

    def test_line_items_are_independent_of_stock_rows(self):
        item_id = self.add_product(quantity=10)
        bundle = invoicing.create_invoice(
            self.storage,
            make_request(
                items=[
                    {"serviceName": "Lavado Completo", "quantity": 2, "unitPrice": "45.50"},
                    {"serviceName": "Toallas", "quantity": 3, "unitPrice": "15.25"},
                ],
                inventory_items=[{"id": item_id, "quantity": 4}],
            ),
            tax_rate=Decimal("0"),
        )
        self.assertEqual(bundle.invoice.subtotal, Decimal("136.75"))
        self.assertEqual(self.quantity_of(item_id), 6)

    def test_stored_lines_multiply_out_after_rounding(self):
        bundle = invoicing.create_invoice(
            self.storage,
            make_request(items=[{"serviceName": "Cera", "quantity": 2, "unitPrice": "10.005"}]),
            tax_rate=Decimal("0"),
        )
        item = bundle.items[0]
        self.assertEqual(item.unit_price, Decimal("10.01"))
        self.assertEqual(item.total, item.quantity * item.unit_price)
        self.assertEqual(bundle.invoice.subtotal, Decimal("20.02"))

    def test_fetch_returns_what_was_stored(self):
        created = invoicing.create_invoice(
            self.storage,
            make_request(
                items=[
                    {"serviceName": "Lavado Premium", "quantity": 1, "unitPrice": "150"},
                    {"serviceName": "Encerado", "quantity": 2, "unitPrice": "60.00"},
                ]
            ),
        )
        fetched = self.storage.get_invoice(created.invoice.id)
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.invoice.number, created.invoice.number)
        self.assertEqual(fetched.invoice.customer_name, "Juan Pérez")
        self.assertEqual(fetched.invoice.customer_phone, "9999-0000")
        self.assertEqual(fetched.invoice.total, created.invoice.total)
        self.assertEqual([i.service_name for i in fetched.items], ["Lavado Premium", "Encerado"])
        self.assertEqual([i.total for i in fetched.items], [Decimal("150.00"), Decimal("120.00")])
        self.assertIsNone(self.storage.get_invoice(created.invoice.id + 100))

    def test_invalid_requests_persist_nothing(self):
        item_id = self.add_product(quantity=5)
        bad_requests = [
            make_request(items=[]),
            make_request(items=[{"serviceName": "Lavado", "quantity": 0, "unitPrice": "10"}]),
            make_request(items=[{"serviceName": "Lavado", "quantity": 1, "unitPrice": "-1"}]),
            make_request(items=[{"serviceName": "  ", "quantity": 1, "unitPrice": "10"}]),
            make_request(name=" "),
            make_request(date="15/01/2025"),
            make_request(date="2025-02-30"),
            make_request(inventory_items=[{"id": item_id, "quantity": 0}]),
        ]
        for request in bad_requests:
            with self.assertRaises(ValidationError):
                invoicing.create_invoice(self.storage, request)
        self.assertEqual(self.storage.list_invoices(), [])
        self.assertEqual(self.quantity_of(item_id), 5)

    def test_status_update(self):
        created = invoicing.create_invoice(self.storage, make_request())
        row = invoicing.update_invoice_status(self.storage, created.invoice.id, "Paid")
        self.assertEqual(row.status, "paid")
        self.assertEqual([r.id for r in self.storage.list_invoices("paid")], [created.invoice.id])
        self.assertEqual(self.storage.list_invoices("pending"), [])
        with self.assertRaises(ValidationError):
            invoicing.update_invoice_status(self.storage, created.invoice.id, "refunded")
        with self.assertRaises(NotFoundError):
            invoicing.update_invoice_status(self.storage, created.invoice.id + 100, "paid")

    def test_reduce_stock_directly(self):
        item_id = self.add_product(quantity=3)
        with self.storage.transaction():
            self.storage.reduce_stock(item_id, 2)
        self.assertEqual(self.quantity_of(item_id), 1)
        with self.assertRaises(InsufficientStockError):
            with self.storage.transaction():
                self.storage.reduce_stock(item_id, 2)
        with self.assertRaises(NotFoundError):
            with self.storage.transaction():
                self.storage.reduce_stock(item_id + 100, 1)
        self.assertEqual(self.quantity_of(item_id), 1)


class MemoryStorageTests(InvoiceStorageContract, unittest.TestCase):
    def make_storage(self):
        return MemoryStorage()


class SqlStorageTests(InvoiceStorageContract, unittest.TestCase):
    def make_storage(self):
        self.engine = memory_engine()
        self.session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)()
        return SqlStorage(self.session)

    def tearDown(self):
        self.session.close()
        self.engine.dispose()

    def test_sequence_row_continues_after_existing_invoices(self):
        for _ in range(3):
            invoicing.create_invoice(self.storage, make_request(), prefix="002")
        self.session.delete(self.session.get(InvoiceSequence, "002"))
        self.session.commit()

        bundle = invoicing.create_invoice(self.storage, make_request(), prefix="002")
        self.assertEqual(bundle.invoice.number, "002-0004")

    def test_sequence_row_skips_past_gaps(self):
        self.session.add(
            Invoice(
                number="003-0007",
                customer_name="Importada",
                subtotal=Decimal("10.00"),
                tax=Decimal("0.00"),
                total=Decimal("10.00"),
                date=datetime.date(2024, 12, 31),
            )
        )
        self.session.commit()

        bundle = invoicing.create_invoice(self.storage, make_request(), prefix="003")
        self.assertEqual(bundle.invoice.number, "003-0008")

    def test_storage_failure_rolls_back_and_is_reported(self):
        item_id = self.add_product(quantity=5)
        # counter at zero while 001-0001 already exists: the next insert collides
        self.session.add(InvoiceSequence(prefix="001", last_value=0))
        self.session.add(
            Invoice(
                number="001-0001",
                customer_name="Existente",
                subtotal=Decimal("10.00"),
                tax=Decimal("0.00"),
                total=Decimal("10.00"),
                date=datetime.date(2025, 1, 1),
            )
        )
        self.session.commit()

        with self.assertLogs("carwash.storage.sql", level="ERROR"):
            with self.assertRaises(PersistenceError) as ctx:
                invoicing.create_invoice(
                    self.storage, make_request(inventory_items=[{"id": item_id, "quantity": 2}]), prefix="001"
                )
        self.assertNotIn("UNIQUE", ctx.exception.message)
        self.assertEqual(self.quantity_of(item_id), 5)
        self.assertEqual(len(self.storage.list_invoices()), 1)

    def test_prefixes_are_counted_separately(self):
        a = invoicing.create_invoice(self.storage, make_request(), prefix="001").invoice.number
        b = invoicing.create_invoice(self.storage, make_request(), prefix="002").invoice.number
        self.assertEqual((a, b), ("001-0001", "002-0001"))


if __name__ == "__main__":
    unittest.main()
