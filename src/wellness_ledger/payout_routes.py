"""
Payout request API routes
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import logging

from .db.engine import get_db
from .db.models import PayoutRequest, PayoutStatus
from .services.billing_periods import to_naive_utc
from .services.payout_service import get_payout_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/payouts", tags=["payouts"])
specialist_router = APIRouter(prefix="/v1/specialists", tags=["payouts"])


class PayoutCreateRequest(BaseModel):
    """Request a payout of earnings (defaults to the current month)"""
    period_start: Optional[datetime] = Field(None, description="Earnings window start (default: start of current month)")
    period_end: Optional[datetime] = Field(None, description="Earnings window end (default: end of current month)")


class PayoutRejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Why the request was declined")


class PayoutResponse(BaseModel):
    """Payout request"""
    id: int
    specialist_id: int
    amount: float
    period_start: datetime
    period_end: datetime
    status: str
    rejection_reason: Optional[str]
    created_at: datetime
    processed_at: Optional[datetime]


def _to_response(payout: PayoutRequest) -> PayoutResponse:
    return PayoutResponse(
        id=payout.id,
        specialist_id=payout.specialist_id,
        amount=float(payout.amount),
        period_start=payout.period_start,
        period_end=payout.period_end,
        status=payout.status,
        rejection_reason=payout.rejection_reason,
        created_at=payout.created_at,
        processed_at=payout.processed_at,
    )


@specialist_router.post(
    "/{specialist_id}/payouts",
    response_model=PayoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_payout(
    specialist_id: int,
    request: Optional[PayoutCreateRequest] = None,
    db: Session = Depends(get_db)
):
    """
    Request a payout

    The amount is the specialist's earnings for the window at the time of
    the request and does not change afterwards. Only one request may be
    pending at a time; a second one is rejected with 409.
    """
    request = request or PayoutCreateRequest()
    payout = get_payout_service(db).request_payout(
        specialist_id,
        period_start=to_naive_utc(request.period_start),
        period_end=to_naive_utc(request.period_end),
    )
    return _to_response(payout)


@specialist_router.get("/{specialist_id}/payouts/pending", response_model=Optional[PayoutResponse])
def get_pending_payout(specialist_id: int, db: Session = Depends(get_db)):
    """Get the specialist's pending request, or null"""
    service = get_payout_service(db)
    service.earnings.get_specialist(specialist_id)
    payout = service.get_pending(specialist_id)
    return _to_response(payout) if payout else None


@router.get("", response_model=List[PayoutResponse])
def list_payouts(
    status_filter: Optional[PayoutStatus] = Query(None, alias="status"),
    specialist_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """List payout requests, newest first (admin queue)"""
    payouts = get_payout_service(db).list_requests(
        status=status_filter.value if status_filter else None,
        specialist_id=specialist_id,
        limit=limit,
        offset=offset,
    )
    return [_to_response(p) for p in payouts]


@router.post("/{payout_id}/mark-paid", response_model=PayoutResponse)
def mark_payout_paid(payout_id: int, db: Session = Depends(get_db)):
    """Mark a pending request as paid"""
    return _to_response(get_payout_service(db).mark_paid(payout_id))


@router.post("/{payout_id}/reject", response_model=PayoutResponse)
def reject_payout(
    payout_id: int,
    request: Optional[PayoutRejectRequest] = None,
    db: Session = Depends(get_db)
):
    """Decline a pending request; the specialist may request again"""
    reason = request.reason if request else None
    return _to_response(get_payout_service(db).reject(payout_id, reason=reason))
