from __future__ import annotations

import datetime
from decimal import Decimal

from carwash.schemas.common import CamelModel, Money


class CustomerInfo(CamelModel):
    name: str
    phone: str | None = None
    tax_id: str | None = None


class InvoiceItemCreate(CamelModel):
    service_name: str
    quantity: int
    unit_price: Decimal


class StockDeduction(CamelModel):
    """Inventory row to decrement when the invoice is issued."""

    id: int
    quantity: int


class InvoiceCreate(CamelModel):
    customer: CustomerInfo
    items: list[InvoiceItemCreate]
    date: str
    inventory_items: list[StockDeduction] | None = None


class InvoiceStatusUpdate(CamelModel):
    status: str


class InvoiceItemRead(CamelModel):
    id: int
    invoice_id: int
    service_name: str
    quantity: int
    unit_price: Money
    total: Money


class InvoiceRead(CamelModel):
    id: int
    number: str
    customer_name: str
    customer_phone: str | None = None
    customer_tax_id: str | None = None
    subtotal: Money
    tax: Money
    total: Money
    status: str
    date: datetime.date
    created_at: datetime.datetime | None = None


class InvoiceWithItems(CamelModel):
    invoice: InvoiceRead
    items: list[InvoiceItemRead]
