"""
Weekly minutes-consumption report for a company dashboard
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from ..db.base import utcnow
from ..db.models import Booking, BookingStatus, CompanyEmployee, EmployeeStatus, Specialist
from .consumption import DEFAULT_SESSION_MINUTES, minutes_to_deduct
from .entitlement_ledger import EntitlementLedger
from .billing_periods import week_start

logger = logging.getLogger(__name__)


@dataclass
class WeeklyUsage:
    week_start: datetime
    minutes_used: int


@dataclass
class UsageBreakdown:
    company_id: int
    range_start: datetime
    range_end: datetime
    weeks: List[WeeklyUsage] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(w.minutes_used for w in self.weeks)


class UsageReportService:
    """Builds per-week consumption for a company's employees"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = EntitlementLedger(db)

    def _member_user_ids(self, company) -> List[int]:
        rows = self.db.query(CompanyEmployee.user_id).filter(
            CompanyEmployee.company_id == company.id,
            CompanyEmployee.status == EmployeeStatus.ACCEPTED.value,
            CompanyEmployee.user_id.isnot(None),
        ).all()
        member_ids = {row[0] for row in rows}
        if company.admin_user_id:
            member_ids.add(company.admin_user_id)
        return sorted(member_ids)

    def weekly_breakdown(self, company_id: int, now: Optional[datetime] = None, days: int = 30) -> UsageBreakdown:
        """
        Minutes consumed per Monday-aligned week over the last `days` days

        Bookings completed before minutes_deducted was recorded are estimated
        from the specialist's current tier.
        """
        company = self.ledger.get_company(company_id)
        range_end = now or utcnow()
        range_start = range_end - timedelta(days=days)

        buckets: Dict[datetime, int] = {}
        member_ids = self._member_user_ids(company)

        if member_ids:
            session_time = func.coalesce(Booking.confirmed_datetime, Booking.completed_at)
            rows = self.db.query(
                session_time,
                Booking.session_duration,
                Booking.minutes_deducted,
                Specialist.rate_tier,
            ).join(Specialist, Specialist.id == Booking.specialist_id).filter(
                Booking.status == BookingStatus.COMPLETED.value,
                Booking.employee_user_id.in_(member_ids),
                session_time >= range_start,
                session_time <= range_end,
            ).all()

            for happened_at, duration, deducted, rate_tier in rows:
                if happened_at is None:
                    continue
                if deducted is None:
                    deducted = minutes_to_deduct(duration or DEFAULT_SESSION_MINUTES, rate_tier)
                key = week_start(happened_at)
                buckets[key] = buckets.get(key, 0) + deducted

        breakdown = UsageBreakdown(company_id=company.id, range_start=range_start, range_end=range_end)
        week = week_start(range_start)
        last_week = week_start(range_end)
        while week <= last_week:
            breakdown.weeks.append(WeeklyUsage(week_start=week, minutes_used=buckets.get(week, 0)))
            week += timedelta(weeks=1)

        logger.debug(f"Usage breakdown for company {company_id}: {breakdown.total_minutes} minutes over {len(breakdown.weeks)} weeks")
        return breakdown


def get_usage_report_service(db: Session) -> UsageReportService:
    """Get usage report service instance"""
    return UsageReportService(db)
