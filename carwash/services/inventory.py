"""Inventory CRUD and stock movements on top of ``Storage``."""
from __future__ import annotations

import logging

from carwash.core.errors import NotFoundError, ValidationError
from carwash.schemas.inventory import InventoryCreate, InventoryUpdate
from carwash.storage.base import Storage

logger = logging.getLogger(__name__)

# columns a partial update may leave out but never clear
NON_NULLABLE = ("name", "price", "is_service", "active")


def get_item(storage: Storage, item_id: int):
    row = storage.get_inventory_item(item_id)
    if row is None:
        raise NotFoundError("Product not found")
    return row


def get_item_by_barcode(storage: Storage, barcode: str):
    row = storage.get_inventory_by_barcode(barcode.strip())
    if row is None or not row.active:
        raise NotFoundError("Product not found")
    return row


def _check_barcode_free(storage: Storage, barcode: str, item_id: int | None = None) -> None:
    existing = storage.get_inventory_by_barcode(barcode)
    if existing is not None and existing.id != item_id:
        raise ValidationError(f"Barcode {barcode} is already assigned to {existing.name}")


def create_item(storage: Storage, payload: InventoryCreate):
    data = payload.model_dump()
    data["name"] = data["name"].strip()
    barcode = (data.get("barcode") or "").strip() or None
    with storage.transaction():
        if data["is_service"]:
            data["quantity"] = None
            data["min_quantity"] = None
            if barcode is None:
                barcode = storage.next_service_code()
        elif data["quantity"] is None:
            data["quantity"] = 0
        if barcode is not None:
            _check_barcode_free(storage, barcode)
        data["barcode"] = barcode
        row = storage.create_inventory_item(data)
    logger.info("inventory_created id=%s name=%s service=%s", row.id, row.name, row.is_service)
    return row


def update_item(storage: Storage, item_id: int, payload: InventoryUpdate):
    changes = payload.model_dump(exclude_unset=True)
    cleared = [k for k in NON_NULLABLE if k in changes and changes[k] is None]
    if cleared:
        raise ValidationError(f"{cleared[0]} cannot be null")
    if "name" in changes and changes["name"] is not None:
        changes["name"] = changes["name"].strip()
    if "barcode" in changes:
        changes["barcode"] = (changes["barcode"] or "").strip() or None
    with storage.transaction():
        current = get_item(storage, item_id)
        if changes.get("barcode"):
            _check_barcode_free(storage, changes["barcode"], item_id)
        if changes.get("is_service", current.is_service):
            changes["quantity"] = None
            changes["min_quantity"] = None
        row = storage.update_inventory_item(item_id, changes)
    return row


def delete_item(storage: Storage, item_id: int):
    """Soft delete: the row stays for history but drops out of listings."""
    with storage.transaction():
        row = storage.deactivate_inventory_item(item_id)
    logger.info("inventory_deactivated id=%s", item_id)
    return row


def reduce_stock(storage: Storage, item_id: int, quantity: int):
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    with storage.transaction():
        row = storage.reduce_stock(item_id, quantity)
    return row


def low_stock(storage: Storage) -> list:
    return [
        row
        for row in storage.list_inventory()
        if not row.is_service and row.min_quantity is not None and (row.quantity or 0) <= row.min_quantity
    ]
