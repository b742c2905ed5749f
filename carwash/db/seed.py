"""
Seed the default wash catalogue and starter inventory into an empty database,
and make sure the invoice counter exists for the configured till prefix.
"""
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from carwash.models.catalog import Service
from carwash.models.inventory import InventoryItem
from carwash.storage.sql import SqlStorage

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


# (name, description, price, duration minutes)
SEED_SERVICES = [
    ("Lavado Básico", "Lavado exterior básico", "80.00", 30),
    ("Lavado Completo", "Lavado exterior e interior", "150.00", 45),
    ("Lavado Premium", "Lavado completo con detalles", "250.00", 60),
    ("Encerado", "Aplicación de cera protectora", "200.00", 30),
    ("Detallado Completo", "Servicio completo de detallado", "400.00", 90),
]

# (name, description, quantity, min quantity, price, supplier, category)
SEED_INVENTORY = [
    ("Champú para Autos", "Champú concentrado para lavado", 25, 5, "45.00", "AutoClean", "Limpieza"),
    ("Cera Automotriz", "Cera protectora premium", 3, 5, "120.00", "CarCare Pro", "Protección"),
    ("Toallas de Microfibra", "Toallas de secado premium", 50, 10, "15.00", "Textiles HN", "Accesorios"),
    ("Desengrasante", "Desengrasante industrial", 8, 3, "85.00", "AutoClean", "Limpieza"),
    ("Llantas", "Limpiador de llantas", 12, 5, "65.00", "CarCare Pro", "Limpieza"),
]


def seed_services_if_empty(session: "Session") -> int:
    from sqlalchemy import func, select

    count = session.execute(select(func.count(Service.id))).scalar()
    if count > 0:
        return 0
    for name, description, price, duration in SEED_SERVICES:
        session.add(Service(name=name, description=description, price=Decimal(price), duration=duration, active=True))
    session.commit()
    return len(SEED_SERVICES)


def seed_inventory_if_empty(session: "Session") -> int:
    from sqlalchemy import func, select

    count = session.execute(select(func.count(InventoryItem.id))).scalar()
    if count > 0:
        return 0
    for name, description, qty, min_qty, price, supplier, category in SEED_INVENTORY:
        session.add(
            InventoryItem(
                name=name,
                description=description,
                quantity=qty,
                min_quantity=min_qty,
                price=Decimal(price),
                supplier=supplier,
                category=category,
                is_service=False,
                active=True,
            )
        )
    session.commit()
    return len(SEED_INVENTORY)


def ensure_invoice_sequence(session: "Session", prefix: str) -> None:
    SqlStorage(session).ensure_invoice_sequence(prefix)
    session.commit()
