from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from carwash.api.deps import partial_changes
from carwash.core.auth import require_admin
from carwash.db.session import get_db
from carwash.models.appointment import Appointment
from carwash.models.catalog import Service
from carwash.models.customer import Customer
from carwash.schemas.appointment import AppointmentCreate, AppointmentRead, AppointmentUpdate
from carwash.schemas.common import MessageResponse

router = APIRouter(prefix="/appointments", tags=["appointments"])

APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled")


def _validate_status(status: str) -> str:
    v = (status or "").strip().lower()
    if v not in APPOINTMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid appointment status.")
    return v


@router.get("", response_model=list[AppointmentRead])
def list_appointments(
    db: Session = Depends(get_db),
    on: date | None = Query(None, alias="date"),
) -> list[AppointmentRead]:
    q = select(Appointment).order_by(Appointment.date, Appointment.time)
    if on:
        q = q.where(Appointment.date == on)
    rows = db.execute(q).scalars().all()
    return [AppointmentRead.model_validate(r) for r in rows]


@router.post("", response_model=AppointmentRead)
def create_appointment(payload: AppointmentCreate, db: Session = Depends(get_db)) -> AppointmentRead:
    name = payload.customer_name.strip()
    phone = (payload.customer_phone or "").strip() or None
    # loose links to the catalogue and CRM; the snapshot fields are what counts
    service = db.execute(
        select(Service).where(Service.name == payload.service_name.strip(), Service.active.is_(True))
    ).scalars().first()
    customer = None
    if phone:
        customer = db.execute(select(Customer).where(Customer.phone == phone)).scalars().first()
    row = Appointment(
        customer_id=customer.id if customer else None,
        service_id=service.id if service else None,
        customer_name=name,
        customer_phone=phone,
        service_name=payload.service_name.strip(),
        service_price=payload.service_price,
        date=payload.date,
        time=payload.time,
        status=_validate_status(payload.status),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return AppointmentRead.model_validate(row)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentRead,
    dependencies=[Depends(require_admin("appointments:update"))],
)
def update_appointment(appointment_id: int, payload: AppointmentUpdate, db: Session = Depends(get_db)) -> AppointmentRead:
    row = db.get(Appointment, appointment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Appointment not found")
    changes = partial_changes(payload, ("customer_name", "service_name", "service_price", "date", "time", "status"))
    if "status" in changes:
        changes["status"] = _validate_status(changes["status"])
    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return AppointmentRead.model_validate(row)


@router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin("appointments:delete"))],
)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)) -> MessageResponse:
    row = db.get(Appointment, appointment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Appointment not found")
    db.delete(row)
    db.commit()
    return MessageResponse(message="Appointment deleted")
