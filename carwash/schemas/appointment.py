from __future__ import annotations

import datetime
from decimal import Decimal

from pydantic import Field

from carwash.schemas.common import CamelModel, Money

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AppointmentCreate(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: str | None = None
    service_name: str = Field(..., min_length=1)
    service_price: Decimal = Field(..., ge=0)
    date: datetime.date
    time: str = Field(..., pattern=TIME_PATTERN)
    status: str = "scheduled"


class AppointmentUpdate(CamelModel):
    customer_name: str | None = Field(default=None, min_length=1)
    customer_phone: str | None = None
    service_name: str | None = Field(default=None, min_length=1)
    service_price: Decimal | None = Field(default=None, ge=0)
    date: datetime.date | None = None
    time: str | None = Field(default=None, pattern=TIME_PATTERN)
    status: str | None = None


class AppointmentRead(CamelModel):
    id: int
    customer_id: int | None = None
    service_id: int | None = None
    customer_name: str
    customer_phone: str | None = None
    service_name: str
    service_price: Money
    date: datetime.date
    time: str
    status: str
    created_at: datetime.datetime | None = None
