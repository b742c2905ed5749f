from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from carwash.api.deps import get_storage
from carwash.core.auth import require_admin
from carwash.core.errors import NotFoundError, ValidationError
from carwash.schemas.invoice import (
    InvoiceCreate,
    InvoiceItemRead,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceWithItems,
)
from carwash.services import invoicing
from carwash.storage.base import InvoiceBundle, Storage

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _to_read(bundle: InvoiceBundle) -> InvoiceWithItems:
    return InvoiceWithItems(
        invoice=InvoiceRead.model_validate(bundle.invoice),
        items=[InvoiceItemRead.model_validate(i) for i in bundle.items],
    )


@router.get("", response_model=list[InvoiceRead])
def list_invoices(
    storage: Storage = Depends(get_storage),
    status: str | None = Query(None),
) -> list[InvoiceRead]:
    rows = storage.list_invoices(status.strip().lower() if status else None)
    return [InvoiceRead.model_validate(r) for r in rows]


@router.get("/{invoice_id}", response_model=InvoiceWithItems)
def get_invoice(invoice_id: int, storage: Storage = Depends(get_storage)) -> InvoiceWithItems:
    bundle = storage.get_invoice(invoice_id)
    if bundle is None:
        raise NotFoundError("Invoice not found")
    return _to_read(bundle)


@router.post("", response_model=InvoiceWithItems)
def create_invoice(payload: InvoiceCreate, storage: Storage = Depends(get_storage)) -> InvoiceWithItems:
    # Counter staff bill without admin rights.
    try:
        bundle = invoicing.create_invoice(storage, payload)
    except NotFoundError as e:
        raise ValidationError(e.message) from e
    return _to_read(bundle)


@router.put(
    "/{invoice_id}/status",
    response_model=InvoiceRead,
    dependencies=[Depends(require_admin("invoices:update-status"))],
)
def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    storage: Storage = Depends(get_storage),
) -> InvoiceRead:
    row = invoicing.update_invoice_status(storage, invoice_id, payload.status)
    return InvoiceRead.model_validate(row)
