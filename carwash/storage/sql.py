"""Relational storage on a SQLAlchemy session (SQLite or PostgreSQL)."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from carwash.core.errors import InsufficientStockError, NotFoundError, PersistenceError
from carwash.models.inventory import InventoryItem
from carwash.models.invoice import Invoice, InvoiceSequence
from carwash.models.invoice_item import InvoiceItem
from carwash.storage.base import InvoiceBundle, InvoiceHeader, InvoiceLine, Storage

logger = logging.getLogger(__name__)


class SqlStorage(Storage):
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def transaction(self):
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("storage_transaction_failed")
            raise PersistenceError() from e
        except BaseException:
            self.session.rollback()
            raise

    # Inventory

    def list_inventory(self, include_inactive: bool = False) -> list[InventoryItem]:
        q = select(InventoryItem).order_by(InventoryItem.id)
        if not include_inactive:
            q = q.where(InventoryItem.active.is_(True))
        return list(self.session.execute(q).scalars().all())

    def get_inventory_item(self, item_id: int) -> InventoryItem | None:
        return self.session.get(InventoryItem, item_id)

    def get_inventory_by_barcode(self, barcode: str) -> InventoryItem | None:
        return self.session.execute(select(InventoryItem).where(InventoryItem.barcode == barcode)).scalars().first()

    def create_inventory_item(self, data: dict[str, Any]) -> InventoryItem:
        row = InventoryItem(**data)
        self.session.add(row)
        self.session.flush()
        return row

    def update_inventory_item(self, item_id: int, changes: dict[str, Any]) -> InventoryItem:
        row = self.session.get(InventoryItem, item_id)
        if row is None:
            raise NotFoundError(f"Inventory item {item_id} not found")
        for key, value in changes.items():
            setattr(row, key, value)
        self.session.flush()
        return row

    def reduce_stock(self, item_id: int, quantity: int) -> InventoryItem:
        row = self.session.get(InventoryItem, item_id)
        if row is None:
            raise NotFoundError(f"Inventory item {item_id} not found")
        if row.is_service:
            return row
        # Conditional write: a concurrent decrement between our read and this
        # statement makes the WHERE fail instead of being overwritten.
        result = self.session.execute(
            update(InventoryItem)
            .where(InventoryItem.id == item_id, InventoryItem.quantity >= quantity)
            .values(quantity=InventoryItem.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        self.session.refresh(row)
        if result.rowcount != 1:
            raise InsufficientStockError(row.name, requested=quantity, available=row.quantity)
        return row

    # Invoices

    def ensure_invoice_sequence(self, prefix: str) -> None:
        """Create the counter row for ``prefix``, continuing after existing invoices."""
        if self.session.get(InvoiceSequence, prefix) is not None:
            return
        numbers = self.session.execute(select(Invoice.number).where(Invoice.number.like(f"{prefix}-%"))).scalars()
        suffixes = (n[len(prefix) + 1 :] for n in numbers)
        highest = max((int(s) for s in suffixes if s.isdigit()), default=0)
        self.session.add(InvoiceSequence(prefix=prefix, last_value=highest))
        self.session.flush()

    def next_invoice_sequence(self, prefix: str) -> int:
        # The UPDATE takes the row's write lock until commit, so two
        # transactions can never read the same value.
        result = self.session.execute(
            update(InvoiceSequence)
            .where(InvoiceSequence.prefix == prefix)
            .values(last_value=InvoiceSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.ensure_invoice_sequence(prefix)
            return self.next_invoice_sequence(prefix)
        return self.session.execute(
            select(InvoiceSequence.last_value).where(InvoiceSequence.prefix == prefix)
        ).scalar_one()

    def add_invoice(self, header: InvoiceHeader, lines: list[InvoiceLine]) -> InvoiceBundle:
        row = Invoice(**asdict(header))
        row.items = [InvoiceItem(**asdict(line)) for line in lines]
        self.session.add(row)
        self.session.flush()
        return InvoiceBundle(invoice=row, items=list(row.items))

    def get_invoice(self, invoice_id: int) -> InvoiceBundle | None:
        row = (
            self.session.execute(select(Invoice).where(Invoice.id == invoice_id).options(selectinload(Invoice.items)))
            .scalars()
            .one_or_none()
        )
        if row is None:
            return None
        return InvoiceBundle(invoice=row, items=list(row.items))

    def list_invoices(self, status: str | None = None) -> list[Invoice]:
        q = select(Invoice).order_by(Invoice.id.desc())
        if status:
            q = q.where(Invoice.status == status)
        return list(self.session.execute(q).scalars().all())

    def update_invoice_status(self, invoice_id: int, status: str) -> Invoice:
        row = self.session.get(Invoice, invoice_id)
        if row is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        row.status = status
        self.session.flush()
        return row
