from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from carwash.db.session import get_db
from carwash.schemas.report import ReportData
from carwash.services.reporting import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportData)
def period_report(
    db: Session = Depends(get_db),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
) -> ReportData:
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")
    return ReportService(db).period_summary(start_date, end_date)
