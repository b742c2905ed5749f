from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from carwash.schemas.common import CamelModel, Money


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    duration: int = Field(..., gt=0, description="minutes")
    active: bool = True


class ServiceUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, gt=0)
    active: bool | None = None


class ServiceRead(ServiceCreate):
    id: int
    price: Money
