from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from carwash.schemas.common import CamelModel, Money


class InventoryBase(CamelModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    barcode: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    min_quantity: int | None = Field(default=None, ge=0)
    price: Decimal = Field(..., ge=0)
    supplier: str | None = None
    category: str | None = None
    is_service: bool = False


class InventoryCreate(InventoryBase):
    active: bool = True


class InventoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    barcode: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    min_quantity: int | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)
    supplier: str | None = None
    category: str | None = None
    is_service: bool | None = None
    active: bool | None = None


class InventoryRead(InventoryBase):
    id: int
    price: Money
    active: bool


class StockReduction(CamelModel):
    quantity: int
