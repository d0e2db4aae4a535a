"""
Earnings Aggregator - read-only rollup of a specialist's completed sessions

Earnings are proportional to session time (no rounding up, unlike plan
minutes) and always recomputed from the bookings table. Each session is paid
at the rate recorded when it was completed, so a later tier change only
affects sessions completed afterwards.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from ..db.models import Booking, BookingStatus, Specialist
from ..exceptions import ComputationGuardError, NotFoundError
from .billing_periods import month_bounds, week_bounds
from .consumption import DEFAULT_SESSION_MINUTES
from .tier_table import payout_rate_for, rates_for

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
MINUTES_PER_HOUR = Decimal(60)


@dataclass
class PeriodEarnings:
    """Earnings over one window"""
    period_start: datetime
    period_end: datetime
    amount: Decimal
    session_count: int
    total_minutes: int


@dataclass
class EarningsSummary:
    """Current week and month earnings for a specialist dashboard"""
    specialist_id: int
    tier: str
    tier_name: str
    hourly_rate: Decimal
    week: PeriodEarnings
    month: PeriodEarnings


def compute_earnings(durations: Iterable[Optional[int]], hourly_rate: Decimal) -> Decimal:
    """
    Pay for a set of sessions at an hourly rate

    Missing durations count as a default-length session. The total is
    rounded to cents once, after summing.
    """
    return compute_session_earnings(((duration, None) for duration in durations), hourly_rate)


def compute_session_earnings(sessions: Iterable[Tuple[Optional[int], Optional[Decimal]]], fallback_rate: Decimal) -> Decimal:
    """Pay for (duration, hourly rate) pairs; sessions without a recorded rate use fallback_rate"""
    amount = Decimal(0)
    for duration, rate in sessions:
        minutes = duration if duration is not None else DEFAULT_SESSION_MINUTES
        amount += Decimal(minutes) / MINUTES_PER_HOUR * (rate if rate is not None else fallback_rate)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class EarningsAggregator:
    """Service computing specialist earnings from completed bookings"""

    def __init__(self, db: Session):
        self.db = db

    def get_specialist(self, specialist_id: int) -> Specialist:
        specialist = self.db.query(Specialist).filter(Specialist.id == specialist_id).first()
        if not specialist:
            raise NotFoundError(f"Specialist {specialist_id} not found", details={"specialist_id": specialist_id})
        return specialist

    def _completed_sessions(self, specialist_id: int, period_start: datetime, period_end: datetime) -> List[Tuple[Optional[int], Optional[Decimal]]]:
        session_time = func.coalesce(Booking.confirmed_datetime, Booking.completed_at)
        rows = self.db.query(Booking.session_duration, Booking.payout_rate).filter(
            Booking.specialist_id == specialist_id,
            Booking.status == BookingStatus.COMPLETED.value,
            session_time >= period_start,
            session_time <= period_end,
        ).all()
        return [(duration, rate) for duration, rate in rows]

    def _period_earnings(self, specialist: Specialist, period_start: datetime, period_end: datetime) -> PeriodEarnings:
        if period_end < period_start:
            raise ComputationGuardError(
                "Earnings period end must not be before its start",
                details={"period_start": period_start.isoformat(), "period_end": period_end.isoformat()},
            )

        sessions = self._completed_sessions(specialist.id, period_start, period_end)
        amount = compute_session_earnings(sessions, payout_rate_for(specialist.rate_tier))
        return PeriodEarnings(
            period_start=period_start,
            period_end=period_end,
            amount=amount,
            session_count=len(sessions),
            total_minutes=sum(d if d is not None else DEFAULT_SESSION_MINUTES for d, _ in sessions),
        )

    def earnings_for_period(self, specialist_id: int, period_start: datetime, period_end: datetime) -> Decimal:
        """
        Amount earned by a specialist for completed sessions in [period_start, period_end]

        Sessions completed before rates were recorded on bookings are paid at
        the specialist's current tier.
        """
        specialist = self.get_specialist(specialist_id)
        earnings = self._period_earnings(specialist, period_start, period_end)
        logger.debug(
            f"Specialist {specialist_id} earned {earnings.amount} over {earnings.session_count} sessions "
            f"({period_start.isoformat()}..{period_end.isoformat()})"
        )
        return earnings.amount

    def earnings_summary(self, specialist_id: int, now: Optional[datetime] = None) -> EarningsSummary:
        specialist = self.get_specialist(specialist_id)
        rates = rates_for(specialist.rate_tier)
        return EarningsSummary(
            specialist_id=specialist.id,
            tier=rates.tier.value,
            tier_name=rates.name,
            hourly_rate=rates.payout_rate,
            week=self._period_earnings(specialist, *week_bounds(now)),
            month=self._period_earnings(specialist, *month_bounds(now)),
        )


def get_earnings_aggregator(db: Session) -> EarningsAggregator:
    """Get earnings aggregator instance"""
    return EarningsAggregator(db)
