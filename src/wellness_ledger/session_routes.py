"""
Session completion API routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List
import logging

from .db.engine import get_db
from .services.consumption import DEFAULT_SESSION_MINUTES
from .services.session_completion import get_session_completion_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])


class CompleteSessionRequest(BaseModel):
    """Request to complete an approved booking"""
    session_minutes: int = Field(
        default=DEFAULT_SESSION_MINUTES,
        ge=1,
        le=240,
        description="Actual session length in minutes",
    )


class CompleteSessionResponse(BaseModel):
    """Minutes charged for a completed session"""
    booking_id: int
    minutes_deducted: int
    tier: str
    multiplier: float
    session_minutes: int
    company_id: int
    company_name: str
    total_minutes_used: int
    minutes_included: int
    low_minutes_email_sent: bool


@router.post("/{booking_id}/complete", response_model=CompleteSessionResponse)
def complete_booking(
    booking_id: int,
    request: CompleteSessionRequest,
    db: Session = Depends(get_db)
):
    """
    Complete an approved booking

    Deducts `ceil(session_minutes * tier multiplier)` plan minutes from the
    employee's company. A booking can only be completed once; a repeated
    call is rejected with 409.
    """
    service = get_session_completion_service(db)
    result = service.complete_session(booking_id, session_minutes=request.session_minutes)

    return CompleteSessionResponse(
        booking_id=result.booking_id,
        minutes_deducted=result.minutes_deducted,
        tier=result.tier,
        multiplier=float(result.multiplier),
        session_minutes=result.session_minutes,
        company_id=result.company_id,
        company_name=result.company_name,
        total_minutes_used=result.total_minutes_used,
        minutes_included=result.minutes_included,
        low_minutes_email_sent=result.low_minutes_email_sent,
    )


class DurationOptionResponse(BaseModel):
    session_minutes: int
    minutes_to_deduct: int


class CompletionOptionsResponse(BaseModel):
    """Cost preview shown before a specialist completes a session"""
    booking_id: int
    status: str
    tier: str
    multiplier: float
    options: List[DurationOptionResponse]


@router.get("/{booking_id}/completion-options", response_model=CompletionOptionsResponse)
def get_completion_options(booking_id: int, db: Session = Depends(get_db)):
    """Plan minutes each offered session length would deduct for this booking"""
    preview = get_session_completion_service(db).completion_options(booking_id)
    return CompletionOptionsResponse(
        booking_id=preview.booking_id,
        status=preview.status,
        tier=preview.tier,
        multiplier=float(preview.multiplier),
        options=[
            DurationOptionResponse(session_minutes=minutes, minutes_to_deduct=cost)
            for minutes, cost in preview.options.items()
        ],
    )
