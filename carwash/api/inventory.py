from __future__ import annotations

from fastapi import APIRouter, Depends

from carwash.api.deps import get_storage
from carwash.core.auth import require_admin
from carwash.schemas.common import MessageResponse
from carwash.schemas.inventory import InventoryCreate, InventoryRead, InventoryUpdate, StockReduction
from carwash.services import inventory as inventory_service
from carwash.storage.base import Storage

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=list[InventoryRead])
def list_inventory(storage: Storage = Depends(get_storage)) -> list[InventoryRead]:
    return [InventoryRead.model_validate(r) for r in storage.list_inventory()]


@router.get("/low-stock", response_model=list[InventoryRead])
def list_low_stock(storage: Storage = Depends(get_storage)) -> list[InventoryRead]:
    return [InventoryRead.model_validate(r) for r in inventory_service.low_stock(storage)]


@router.get("/barcode/{barcode}", response_model=InventoryRead)
def get_by_barcode(barcode: str, storage: Storage = Depends(get_storage)) -> InventoryRead:
    return InventoryRead.model_validate(inventory_service.get_item_by_barcode(storage, barcode))


@router.get("/{item_id}", response_model=InventoryRead)
def get_inventory_item(item_id: int, storage: Storage = Depends(get_storage)) -> InventoryRead:
    return InventoryRead.model_validate(inventory_service.get_item(storage, item_id))


@router.post("", response_model=InventoryRead, dependencies=[Depends(require_admin("inventory:create"))])
def create_inventory_item(payload: InventoryCreate, storage: Storage = Depends(get_storage)) -> InventoryRead:
    return InventoryRead.model_validate(inventory_service.create_item(storage, payload))


@router.put("/{item_id}", response_model=InventoryRead, dependencies=[Depends(require_admin("inventory:update"))])
def update_inventory_item(
    item_id: int,
    payload: InventoryUpdate,
    storage: Storage = Depends(get_storage),
) -> InventoryRead:
    return InventoryRead.model_validate(inventory_service.update_item(storage, item_id, payload))


@router.delete("/{item_id}", response_model=MessageResponse, dependencies=[Depends(require_admin("inventory:delete"))])
def delete_inventory_item(item_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    inventory_service.delete_item(storage, item_id)
    return MessageResponse(message="Product deleted")


@router.post(
    "/{item_id}/reduce-stock",
    response_model=InventoryRead,
    dependencies=[Depends(require_admin("inventory:reduce-stock"))],
)
def reduce_stock(item_id: int, payload: StockReduction, storage: Storage = Depends(get_storage)) -> InventoryRead:
    return InventoryRead.model_validate(inventory_service.reduce_stock(storage, item_id, payload.quantity))
