"""Customer directory and promotions."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from carwash.api.deps import partial_changes
from carwash.core.auth import require_admin
from carwash.db.session import get_db
from carwash.models.customer import Customer
from carwash.models.promotion import Promotion, PromotionSend
from carwash.schemas.crm import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    PromotionCreate,
    PromotionRead,
    PromotionSendRead,
    PromotionSendRequest,
    PromotionSendResult,
)

router = APIRouter(prefix="/crm", tags=["crm"])
logger = logging.getLogger(__name__)


@router.get("/customers", response_model=list[CustomerRead])
def list_customers(
    db: Session = Depends(get_db),
    query: str | None = Query(None, description="Matches name, phone or RTN"),
) -> list[CustomerRead]:
    q = select(Customer).where(Customer.active.is_(True)).order_by(Customer.name)
    term = (query or "").strip()
    if term:
        like = f"%{term}%"
        q = q.where(or_(Customer.name.ilike(like), Customer.phone.ilike(like), Customer.tax_id.ilike(like)))
    rows = db.execute(q).scalars().all()
    return [CustomerRead.model_validate(r) for r in rows]


@router.get("/customers/top", response_model=list[CustomerRead])
def top_customers(
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
) -> list[CustomerRead]:
    rows = db.execute(
        select(Customer)
        .where(Customer.active.is_(True))
        .order_by(Customer.total_spent.desc(), Customer.name)
        .limit(limit)
    ).scalars().all()
    return [CustomerRead.model_validate(r) for r in rows]


@router.post("/customers", response_model=CustomerRead, dependencies=[Depends(require_admin("crm:create-customer"))])
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)) -> CustomerRead:
    data = {k: (v.strip() or None) if isinstance(v, str) else v for k, v in payload.model_dump().items()}
    if not data.get("name"):
        raise HTTPException(status_code=400, detail="Customer name is required")
    row = Customer(**data)
    db.add(row)
    db.commit()
    db.refresh(row)
    return CustomerRead.model_validate(row)


@router.put(
    "/customers/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_admin("crm:update-customer"))],
)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)) -> CustomerRead:
    row = db.get(Customer, customer_id)
    if not row:
        raise HTTPException(status_code=404, detail="Customer not found")
    for key, value in partial_changes(payload, ("name", "active")).items():
        setattr(row, key, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(row)
    return CustomerRead.model_validate(row)


@router.get("/promotions", response_model=list[PromotionRead])
def list_promotions(db: Session = Depends(get_db)) -> list[PromotionRead]:
    rows = db.execute(select(Promotion).order_by(Promotion.id.desc())).scalars().all()
    return [PromotionRead.model_validate(r) for r in rows]


@router.post("/promotions", response_model=PromotionRead, dependencies=[Depends(require_admin("crm:create-promotion"))])
def create_promotion(payload: PromotionCreate, db: Session = Depends(get_db)) -> PromotionRead:
    row = Promotion(
        title=payload.title.strip(),
        message=payload.message.strip(),
        discount=payload.discount,
        valid_from=payload.valid_from,
        valid_until=payload.valid_until,
        active=payload.active,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return PromotionRead.model_validate(row)


@router.post(
    "/promotions/{promotion_id}/send",
    response_model=PromotionSendResult,
    dependencies=[Depends(require_admin("crm:send-promotion"))],
)
def send_promotion(
    promotion_id: int,
    payload: PromotionSendRequest,
    db: Session = Depends(get_db),
) -> PromotionSendResult:
    promotion = db.get(Promotion, promotion_id)
    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")
    if not promotion.active:
        raise HTTPException(status_code=400, detail="Promotion is not active")

    if payload.send_to_all:
        customer_ids = list(db.execute(select(Customer.id).where(Customer.active.is_(True))).scalars().all())
    else:
        wanted = list(dict.fromkeys(payload.customer_ids))
        found = set(db.execute(select(Customer.id).where(Customer.id.in_(wanted))).scalars().all()) if wanted else set()
        missing = [cid for cid in wanted if cid not in found]
        if missing:
            raise HTTPException(status_code=404, detail=f"Customer not found: {missing[0]}")
        customer_ids = wanted

    for cid in customer_ids:
        db.add(PromotionSend(promotion_id=promotion.id, customer_id=cid, status="sent"))
    db.commit()
    logger.info("promotion_sent id=%s customers=%s", promotion.id, len(customer_ids))
    return PromotionSendResult(
        success=True,
        sent_count=len(customer_ids),
        message=f"Promotion sent to {len(customer_ids)} customers",
    )


@router.get("/promotions/{promotion_id}/sends", response_model=list[PromotionSendRead])
def list_promotion_sends(promotion_id: int, db: Session = Depends(get_db)) -> list[PromotionSendRead]:
    rows = db.execute(
        select(PromotionSend).where(PromotionSend.promotion_id == promotion_id).order_by(PromotionSend.id)
    ).scalars().all()
    return [PromotionSendRead.model_validate(r) for r in rows]
