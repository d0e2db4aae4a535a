"""
Company entitlement API routes
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional, List
from dataclasses import asdict
from datetime import datetime
import logging

from .db.engine import get_db
from .services.billing_periods import to_naive_utc
from .services.entitlement_ledger import get_entitlement_ledger
from .services.usage_report import get_usage_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/companies", tags=["ledger"])


class LedgerResponse(BaseModel):
    """Company minutes entitlement"""
    company_id: int
    plan_type: Optional[str]
    minutes_included: int
    minutes_used: int
    minutes_remaining: int
    usage_percentage: float
    is_low_on_minutes: bool
    is_over_allowance: bool
    period_start: Optional[datetime]
    period_end: Optional[datetime]


class RenewalRequest(BaseModel):
    """Plan purchase or renewal notification from billing"""
    plan_id: str = Field(..., description="Plan id: starter, growth, scale")
    period_start: Optional[datetime] = Field(None, description="New period start (default: next cycle)")
    period_end: Optional[datetime] = Field(None, description="New period end (default: one month after period_start)")


class WeeklyUsageResponse(BaseModel):
    week_start: datetime
    minutes_used: int


class UsageBreakdownResponse(BaseModel):
    """Minutes consumed per week"""
    company_id: int
    range_start: datetime
    range_end: datetime
    total_minutes: int
    weeks: List[WeeklyUsageResponse]


@router.get("/{company_id}/ledger", response_model=LedgerResponse)
def get_ledger(company_id: int, db: Session = Depends(get_db)):
    """Get a company's allowance, usage and remaining minutes"""
    snapshot = get_entitlement_ledger(db).snapshot(company_id)
    return LedgerResponse(**asdict(snapshot))


@router.post("/{company_id}/renewal", response_model=LedgerResponse)
def renew_plan(company_id: int, request: RenewalRequest, db: Session = Depends(get_db)):
    """
    Start a new billing period

    Resets minutes used to zero and sets the allowance from the plan.
    """
    ledger = get_entitlement_ledger(db)
    ledger.reset_for_renewal(
        company_id,
        request.plan_id,
        period_start=to_naive_utc(request.period_start),
        period_end=to_naive_utc(request.period_end),
    )
    return LedgerResponse(**asdict(ledger.snapshot(company_id)))


@router.get("/{company_id}/usage/weekly", response_model=UsageBreakdownResponse)
def get_weekly_usage(
    company_id: int,
    days: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db)
):
    """Minutes consumed per week over the last `days` days"""
    breakdown = get_usage_report_service(db).weekly_breakdown(company_id, days=days)
    return UsageBreakdownResponse(
        company_id=breakdown.company_id,
        range_start=breakdown.range_start,
        range_end=breakdown.range_end,
        total_minutes=breakdown.total_minutes,
        weeks=[WeeklyUsageResponse(week_start=w.week_start, minutes_used=w.minutes_used) for w in breakdown.weeks],
    )
