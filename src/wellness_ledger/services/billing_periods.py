"""
Calendar helpers for billing periods and earnings windows (naive UTC)
"""
import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from ..db.base import utcnow


def add_months(moment: datetime, months: int = 1) -> datetime:
    """Shift by whole calendar months, clamping the day to the target month's length"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First and last instant of the calendar month containing `now`"""
    now = now or utcnow()
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_day = calendar.monthrange(now.year, now.month)[1]
    end = now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def week_start(moment: datetime) -> datetime:
    """Monday 00:00 of the week containing `moment`"""
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return day - timedelta(days=day.weekday())


def week_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday-start week containing `now`"""
    now = now or utcnow()
    start = week_start(now)
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def next_billing_cycle(previous_end: Optional[datetime], now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Bounds of the cycle following `previous_end`

    A lapsed or missing previous period restarts the cycle at `now`.
    """
    now = now or utcnow()
    start = previous_end if previous_end and previous_end > now else now
    return start, add_months(start, 1)


def to_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware timestamp to naive UTC; naive values are assumed to be UTC already"""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)
