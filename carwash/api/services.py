from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from carwash.api.deps import partial_changes
from carwash.core.auth import require_admin
from carwash.db.session import get_db
from carwash.models.catalog import Service
from carwash.schemas.catalog import ServiceCreate, ServiceRead, ServiceUpdate
from carwash.schemas.common import MessageResponse

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=list[ServiceRead])
def list_services(db: Session = Depends(get_db)) -> list[ServiceRead]:
    rows = db.execute(select(Service).where(Service.active.is_(True)).order_by(Service.id)).scalars().all()
    return [ServiceRead.model_validate(r) for r in rows]


@router.post("", response_model=ServiceRead, dependencies=[Depends(require_admin("services:create"))])
def create_service(payload: ServiceCreate, db: Session = Depends(get_db)) -> ServiceRead:
    row = Service(
        name=payload.name.strip(),
        description=(payload.description or "").strip() or None,
        price=payload.price,
        duration=payload.duration,
        active=payload.active,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return ServiceRead.model_validate(row)


@router.put("/{service_id}", response_model=ServiceRead, dependencies=[Depends(require_admin("services:update"))])
def update_service(service_id: int, payload: ServiceUpdate, db: Session = Depends(get_db)) -> ServiceRead:
    row = db.get(Service, service_id)
    if not row:
        raise HTTPException(status_code=404, detail="Service not found")
    for key, value in partial_changes(payload, ("name", "price", "duration", "active")).items():
        setattr(row, key, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(row)
    return ServiceRead.model_validate(row)


@router.delete("/{service_id}", response_model=MessageResponse, dependencies=[Depends(require_admin("services:delete"))])
def delete_service(service_id: int, db: Session = Depends(get_db)) -> MessageResponse:
    row = db.get(Service, service_id)
    if not row:
        raise HTTPException(status_code=404, detail="Service not found")
    # appointments keep pointing at it, so only hide it from the catalogue
    row.active = False
    db.commit()
    return MessageResponse(message="Service deleted")
