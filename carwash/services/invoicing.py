"""
Invoice creation: totals, sequential numbering and stock bookkeeping as one
atomic unit on top of any ``Storage``.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from carwash.core.config import settings
from carwash.core.errors import InsufficientStockError, ValidationError
from carwash.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from carwash.storage.base import InvoiceBundle, InvoiceHeader, InvoiceLine, Storage

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
INVOICE_STATUSES = ("pending", "paid", "cancelled")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def to_money(value: Decimal | int | float | str) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {value!r}") from e


def compute_line_total(quantity: int, unit_price: Decimal | int | float | str) -> Decimal:
    # priced from the stored (cent-rounded) unit price so quantity * unit_price == total
    return to_money(Decimal(int(quantity)) * to_money(unit_price))


def compute_totals(items: Iterable[InvoiceItemCreate], tax_rate: Decimal | None = None) -> Totals:
    """
    subtotal = sum of rounded line totals; tax = round(subtotal * rate);
    total = subtotal + tax. ``tax_rate`` defaults to the configured ISV rate.
    """
    rate = Decimal(str(settings.tax_rate if tax_rate is None else tax_rate))
    subtotal = sum((compute_line_total(i.quantity, i.unit_price) for i in items), Decimal("0.00"))
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * rate)
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def format_invoice_number(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:04d}"


def next_invoice_number(storage: Storage, prefix: str | None = None) -> str:
    """Allocate a number; call inside the same transaction that stores the invoice."""
    p = prefix or settings.invoice_prefix
    return format_invoice_number(p, storage.next_invoice_sequence(p))


def parse_invoice_date(raw: str) -> date:
    text = (raw or "").strip()
    if not _ISO_DATE.match(text):
        raise ValidationError("date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {text}") from e


def validate_invoice_request(request: InvoiceCreate) -> date:
    if not (request.customer.name or "").strip():
        raise ValidationError("Customer name is required")
    if not request.items:
        raise ValidationError("Invoice must contain at least one item")
    for item in request.items:
        if not (item.service_name or "").strip():
            raise ValidationError("Every item needs a serviceName")
        if item.quantity < 1:
            raise ValidationError(f"Quantity for {item.service_name} must be at least 1")
        if item.unit_price < 0:
            raise ValidationError(f"Unit price for {item.service_name} cannot be negative")
    for deduction in request.inventory_items or []:
        if deduction.quantity < 1:
            raise ValidationError(f"Stock quantity for inventory item {deduction.id} must be at least 1")
    return parse_invoice_date(request.date)


def _clean(value: str | None) -> str | None:
    return (value or "").strip() or None


def create_invoice(
    storage: Storage,
    request: InvoiceCreate,
    *,
    tax_rate: Decimal | None = None,
    prefix: str | None = None,
) -> InvoiceBundle:
    invoice_date = validate_invoice_request(request)
    totals = compute_totals(request.items, tax_rate)
    lines = [
        InvoiceLine(
            service_name=item.service_name.strip(),
            quantity=int(item.quantity),
            unit_price=to_money(item.unit_price),
            total=compute_line_total(item.quantity, item.unit_price),
        )
        for item in request.items
    ]

    with storage.transaction():
        for deduction in request.inventory_items or []:
            try:
                storage.reduce_stock(deduction.id, deduction.quantity)
            except InsufficientStockError as e:
                logger.warning(
                    "invoice_rejected product=%s requested=%s available=%s", e.product_name, e.requested, e.available
                )
                raise
        header = InvoiceHeader(
            number=next_invoice_number(storage, prefix),
            customer_name=request.customer.name.strip(),
            customer_phone=_clean(request.customer.phone),
            customer_tax_id=_clean(request.customer.tax_id),
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            date=invoice_date,
        )
        bundle = storage.add_invoice(header, lines)

    logger.info(
        "invoice_created number=%s items=%s subtotal=%s tax=%s total=%s",
        header.number,
        len(lines),
        totals.subtotal,
        totals.tax,
        totals.total,
    )
    return bundle


def update_invoice_status(storage: Storage, invoice_id: int, status: str):
    value = (status or "").strip().lower()
    if value not in INVOICE_STATUSES:
        raise ValidationError("Invalid invoice status.")
    with storage.transaction():
        row = storage.update_invoice_status(invoice_id, value)
    logger.info("invoice_status id=%s status=%s", invoice_id, value)
    return row
