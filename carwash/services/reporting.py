from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from carwash.models.appointment import Appointment
from carwash.models.invoice import Invoice
from carwash.schemas.report import ReportData


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def period_summary(self, start: date, end: date) -> ReportData:
        """Billed revenue (cancelled invoices excluded) and completed services in [start, end]."""
        invoices = self.db.execute(
            select(Invoice).where(Invoice.date >= start, Invoice.date <= end, Invoice.status != "cancelled")
        ).scalars().all()
        appointments = self.db.execute(
            select(Appointment).where(
                Appointment.date >= start, Appointment.date <= end, Appointment.status == "completed"
            )
        ).scalars().all()

        revenue = sum((Decimal(inv.total or 0) for inv in invoices), Decimal("0.00"))
        by_service = Counter(a.service_name for a in appointments)
        top = by_service.most_common(1)
        return ReportData(
            total_revenue=revenue,
            total_services=len(appointments),
            total_customers=len({a.customer_name.strip().lower() for a in appointments}),
            top_service=top[0][0] if top else "N/A",
            period=f"{start.isoformat()} - {end.isoformat()}",
        )
