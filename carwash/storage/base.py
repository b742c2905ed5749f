"""
Storage interface shared by the relational store and the in-memory store.

Mutating methods never commit on their own: callers group them inside
``with storage.transaction():`` so that stock decrements, number allocation
and invoice rows either all persist or none do.
"""
from __future__ import annotations

import datetime
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass
class InvoiceHeader:
    number: str
    customer_name: str
    customer_phone: str | None
    customer_tax_id: str | None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    date: datetime.date
    status: str = "pending"


@dataclass
class InvoiceLine:
    service_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass
class InvoiceBundle:
    invoice: Any
    items: list[Any] = field(default_factory=list)


class Storage(ABC):
    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Atomic unit: everything done inside commits together or rolls back."""

    # Inventory

    @abstractmethod
    def list_inventory(self, include_inactive: bool = False) -> list[Any]: ...

    @abstractmethod
    def get_inventory_item(self, item_id: int) -> Any | None: ...

    @abstractmethod
    def get_inventory_by_barcode(self, barcode: str) -> Any | None: ...

    @abstractmethod
    def create_inventory_item(self, data: dict[str, Any]) -> Any: ...

    @abstractmethod
    def update_inventory_item(self, item_id: int, changes: dict[str, Any]) -> Any:
        """Raises NotFoundError for an unknown id."""

    @abstractmethod
    def reduce_stock(self, item_id: int, quantity: int) -> Any:
        """
        Decrement on-hand quantity. Service rows are returned unchanged.
        Raises NotFoundError or InsufficientStockError; the check and the
        decrement happen as one conditional write.
        """

    def deactivate_inventory_item(self, item_id: int) -> Any:
        return self.update_inventory_item(item_id, {"active": False})

    def next_service_code(self) -> str:
        """Four-digit code for a service created without a barcode."""
        n = sum(1 for row in self.list_inventory(include_inactive=True) if row.is_service) + 1
        while self.get_inventory_by_barcode(f"{n:04d}") is not None:
            n += 1
        return f"{n:04d}"

    # Invoices

    @abstractmethod
    def next_invoice_sequence(self, prefix: str) -> int:
        """Allocate the next sequence value for ``prefix``; never repeats."""

    @abstractmethod
    def add_invoice(self, header: InvoiceHeader, lines: list[InvoiceLine]) -> InvoiceBundle: ...

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> InvoiceBundle | None: ...

    @abstractmethod
    def list_invoices(self, status: str | None = None) -> list[Any]: ...

    @abstractmethod
    def update_invoice_status(self, invoice_id: int, status: str) -> Any:
        """Raises NotFoundError for an unknown id."""
