"""Dict-backed storage used by tests and demos. Same contract as SqlStorage."""
from __future__ import annotations

import copy
import datetime
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from typing import Any

from carwash.core.errors import InsufficientStockError, NotFoundError
from carwash.storage.base import InvoiceBundle, InvoiceHeader, InvoiceLine, Storage


@dataclass
class InventoryRecord:
    id: int
    name: str
    price: Decimal
    description: str | None = None
    barcode: str | None = None
    quantity: int | None = 0
    min_quantity: int | None = None
    supplier: str | None = None
    category: str | None = None
    is_service: bool = False
    active: bool = True


@dataclass
class InvoiceRecord:
    id: int
    number: str
    customer_name: str
    customer_phone: str | None
    customer_tax_id: str | None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    date: datetime.date
    status: str
    created_at: datetime.datetime


@dataclass
class InvoiceItemRecord:
    id: int
    invoice_id: int
    service_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass
class _State:
    inventory: dict[int, InventoryRecord] = field(default_factory=dict)
    invoices: dict[int, InvoiceRecord] = field(default_factory=dict)
    invoice_items: dict[int, list[InvoiceItemRecord]] = field(default_factory=dict)
    sequences: dict[str, int] = field(default_factory=dict)
    next_inventory_id: int = 1
    next_invoice_id: int = 1
    next_item_id: int = 1


class MemoryStorage(Storage):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._state = _State()

    @contextmanager
    def transaction(self):
        # The lock is held for the whole unit, so concurrent callers serialize.
        with self._lock:
            snapshot = copy.deepcopy(self._state)
            try:
                yield
            except BaseException:
                self._state = snapshot
                raise

    # Inventory

    def list_inventory(self, include_inactive: bool = False) -> list[InventoryRecord]:
        with self._lock:
            rows = sorted(self._state.inventory.values(), key=lambda r: r.id)
            return [replace(r) for r in rows if include_inactive or r.active]

    def get_inventory_item(self, item_id: int) -> InventoryRecord | None:
        with self._lock:
            row = self._state.inventory.get(item_id)
            return replace(row) if row else None

    def get_inventory_by_barcode(self, barcode: str) -> InventoryRecord | None:
        with self._lock:
            for row in self._state.inventory.values():
                if row.barcode is not None and row.barcode == barcode:
                    return replace(row)
            return None

    def create_inventory_item(self, data: dict[str, Any]) -> InventoryRecord:
        with self._lock:
            row = InventoryRecord(id=self._state.next_inventory_id, **data)
            self._state.next_inventory_id += 1
            self._state.inventory[row.id] = row
            return replace(row)

    def update_inventory_item(self, item_id: int, changes: dict[str, Any]) -> InventoryRecord:
        with self._lock:
            row = self._state.inventory.get(item_id)
            if row is None:
                raise NotFoundError(f"Inventory item {item_id} not found")
            for key, value in changes.items():
                setattr(row, key, value)
            return replace(row)

    def reduce_stock(self, item_id: int, quantity: int) -> InventoryRecord:
        with self._lock:
            row = self._state.inventory.get(item_id)
            if row is None:
                raise NotFoundError(f"Inventory item {item_id} not found")
            if row.is_service:
                return replace(row)
            on_hand = row.quantity or 0
            if on_hand < quantity:
                raise InsufficientStockError(row.name, requested=quantity, available=on_hand)
            row.quantity = on_hand - quantity
            return replace(row)

    # Invoices

    def next_invoice_sequence(self, prefix: str) -> int:
        with self._lock:
            value = self._state.sequences.get(prefix, 0) + 1
            self._state.sequences[prefix] = value
            return value

    def add_invoice(self, header: InvoiceHeader, lines: list[InvoiceLine]) -> InvoiceBundle:
        with self._lock:
            invoice = InvoiceRecord(
                id=self._state.next_invoice_id,
                created_at=datetime.datetime.now(datetime.timezone.utc),
                **asdict(header),
            )
            self._state.next_invoice_id += 1
            items: list[InvoiceItemRecord] = []
            for line in lines:
                items.append(InvoiceItemRecord(id=self._state.next_item_id, invoice_id=invoice.id, **asdict(line)))
                self._state.next_item_id += 1
            self._state.invoices[invoice.id] = invoice
            self._state.invoice_items[invoice.id] = items
            return InvoiceBundle(invoice=replace(invoice), items=[replace(i) for i in items])

    def get_invoice(self, invoice_id: int) -> InvoiceBundle | None:
        with self._lock:
            invoice = self._state.invoices.get(invoice_id)
            if invoice is None:
                return None
            items = self._state.invoice_items.get(invoice_id, [])
            return InvoiceBundle(invoice=replace(invoice), items=[replace(i) for i in items])

    def list_invoices(self, status: str | None = None) -> list[InvoiceRecord]:
        with self._lock:
            rows = sorted(self._state.invoices.values(), key=lambda r: r.id, reverse=True)
            return [replace(r) for r in rows if status is None or r.status == status]

    def update_invoice_status(self, invoice_id: int, status: str) -> InvoiceRecord:
        with self._lock:
            invoice = self._state.invoices.get(invoice_id)
            if invoice is None:
                raise NotFoundError(f"Invoice {invoice_id} not found")
            invoice.status = status
            return replace(invoice)
