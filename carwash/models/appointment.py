from __future__ import annotations

import datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from carwash.db.base import Base


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("customers.id"), nullable=True)
    service_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("services.id"), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(256))
    customer_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    service_name: Mapped[str] = mapped_column(String(256))
    service_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    date: Mapped[datetime.date] = mapped_column(Date, index=True)
    time: Mapped[str] = mapped_column(String(5))  # HH:MM
    status: Mapped[str] = mapped_column(String(16), default="scheduled", index=True)  # scheduled | completed | cancelled
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
