from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field, model_validator

from carwash.schemas.common import CamelModel, Money


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None


class CustomerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None
    active: bool | None = None


class CustomerRead(CustomerCreate):
    id: int
    total_spent: Money
    last_visit: datetime | None = None
    created_at: datetime | None = None
    active: bool


class PromotionCreate(CamelModel):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    discount: Decimal | None = Field(default=None, ge=0, le=100)
    valid_from: datetime
    valid_until: datetime
    active: bool = True

    @model_validator(mode="after")
    def _check_window(self):
        if self.valid_until < self.valid_from:
            raise ValueError("validUntil must not be before validFrom")
        return self


class PromotionRead(CamelModel):
    id: int
    title: str
    message: str
    discount: Decimal | None = None
    valid_from: datetime
    valid_until: datetime
    active: bool
    created_at: datetime | None = None


class PromotionSendRequest(CamelModel):
    send_to_all: bool = False
    customer_ids: list[int] = Field(default_factory=list)


class PromotionSendRead(CamelModel):
    id: int
    promotion_id: int
    customer_id: int
    sent_at: datetime | None = None
    status: str


class PromotionSendResult(CamelModel):
    success: bool
    sent_count: int
    message: str
