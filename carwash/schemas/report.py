from __future__ import annotations

from carwash.schemas.common import CamelModel, Money


class ReportData(CamelModel):
    total_revenue: Money
    total_services: int
    total_customers: int
    top_service: str
    period: str
