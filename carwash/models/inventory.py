from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from carwash.db.base import Base


class InventoryItem(Base):
    """
    A sellable product or service. Services (``is_service``) are not stock
    tracked: their quantity is null and never decremented.
    """

    __tablename__ = "inventory"
    __table_args__ = (CheckConstraint("quantity IS NULL OR quantity >= 0", name="ck_inventory_quantity_nonneg"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    barcode: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    min_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)  # reorder threshold
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    supplier: Mapped[str | None] = mapped_column(String(256), nullable=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    is_service: Mapped[bool] = mapped_column(Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
