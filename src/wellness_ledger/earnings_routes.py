"""
Specialist earnings API routes
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import logging

from .db.engine import get_db
from .services.billing_periods import month_bounds, to_naive_utc
from .services.earnings import PeriodEarnings, get_earnings_aggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/specialists", tags=["earnings"])


class EarningsResponse(BaseModel):
    """Earnings for one period"""
    specialist_id: int
    period_start: datetime
    period_end: datetime
    amount: float


class PeriodEarningsResponse(BaseModel):
    period_start: datetime
    period_end: datetime
    amount: float
    session_count: int
    total_minutes: int


class EarningsSummaryResponse(BaseModel):
    """Dashboard earnings for the current week and month"""
    specialist_id: int
    tier: str
    tier_name: str
    hourly_rate: float
    week: PeriodEarningsResponse
    month: PeriodEarningsResponse


def _period_response(earnings: PeriodEarnings) -> PeriodEarningsResponse:
    return PeriodEarningsResponse(
        period_start=earnings.period_start,
        period_end=earnings.period_end,
        amount=float(earnings.amount),
        session_count=earnings.session_count,
        total_minutes=earnings.total_minutes,
    )


@router.get("/{specialist_id}/earnings", response_model=EarningsResponse)
def get_earnings(
    specialist_id: int,
    period_start: Optional[datetime] = Query(None, description="Window start (default: start of current month)"),
    period_end: Optional[datetime] = Query(None, description="Window end (default: end of current month)"),
    db: Session = Depends(get_db)
):
    """
    Get earnings for completed sessions in a window

    Earnings are recomputed from completed bookings on every call, each
    session at the rate recorded when it was completed.
    """
    default_start, default_end = month_bounds()
    start = to_naive_utc(period_start) or default_start
    end = to_naive_utc(period_end) or default_end

    amount = get_earnings_aggregator(db).earnings_for_period(specialist_id, start, end)
    return EarningsResponse(
        specialist_id=specialist_id,
        period_start=start,
        period_end=end,
        amount=float(amount),
    )


@router.get("/{specialist_id}/earnings/summary", response_model=EarningsSummaryResponse)
def get_earnings_summary(specialist_id: int, db: Session = Depends(get_db)):
    """Get this week's and this month's earnings"""
    summary = get_earnings_aggregator(db).earnings_summary(specialist_id)
    return EarningsSummaryResponse(
        specialist_id=summary.specialist_id,
        tier=summary.tier,
        tier_name=summary.tier_name,
        hourly_rate=float(summary.hourly_rate),
        week=_period_response(summary.week),
        month=_period_response(summary.month),
    )
