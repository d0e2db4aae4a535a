"""
Session completion - the booking lifecycle step that consumes plan minutes

A booking can be completed once. The approved -> completed flip is a
conditional UPDATE, and it commits in the same transaction as the minutes
deduction, so a retried completion deducts nothing.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional
from sqlalchemy.orm import Session
import logging

from ..db.base import utcnow
from ..db.models import Booking, BookingStatus, Specialist
from ..exceptions import InvalidStateError, NotFoundError
from .consumption import DEFAULT_SESSION_MINUTES, SESSION_DURATION_OPTIONS, minutes_to_deduct, validate_session_minutes
from .entitlement_ledger import EntitlementLedger, crossed_low_minutes_threshold, usage_percentage
from .notification_service import NotificationService, get_notification_service
from .tier_table import multiplier_for, payout_rate_for, resolve_tier

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Outcome of completing a session"""
    booking_id: int
    minutes_deducted: int
    tier: str
    multiplier: Decimal
    session_minutes: int
    company_id: int
    company_name: str
    total_minutes_used: int
    minutes_included: int
    low_minutes_email_sent: bool = False


@dataclass
class CompletionOptions:
    """Minutes that completing a booking would cost, per offered duration"""
    booking_id: int
    status: str
    tier: str
    multiplier: Decimal
    options: Dict[int, int]


class SessionCompletionService:
    """Completes approved bookings and charges the employee's company"""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.ledger = EntitlementLedger(db)
        self.notifications = notifications or get_notification_service()

    def complete_session(self, booking_id: int, session_minutes: int = DEFAULT_SESSION_MINUTES) -> CompletionResult:
        """
        Mark an approved booking completed and deduct plan minutes

        Raises:
            ComputationGuardError: Non-positive session length
            NotFoundError: Booking, specialist or employee's company missing
            InvalidStateError: Booking is not approved (includes already completed)
        """
        validate_session_minutes(session_minutes)

        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found", details={"booking_id": booking_id})

        if booking.status != BookingStatus.APPROVED.value:
            raise InvalidStateError(
                f"Booking cannot be completed. Current status: {booking.status}",
                details={"booking_id": booking_id, "status": booking.status},
            )

        specialist = self._get_specialist(booking)

        company = self.ledger.find_company_for_employee(booking.employee_user_id)

        tier = resolve_tier(specialist.rate_tier)
        multiplier = multiplier_for(tier)
        minutes = minutes_to_deduct(session_minutes, tier)
        logger.info(
            f"Completing booking {booking_id}: tier={tier.value}, multiplier={multiplier}, "
            f"session={session_minutes}min, deducting={minutes}min from company {company.id}"
        )

        now = utcnow()
        try:
            flipped = self.db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.status == BookingStatus.APPROVED.value,
            ).update(
                {
                    Booking.status: BookingStatus.COMPLETED.value,
                    Booking.session_duration: session_minutes,
                    Booking.minutes_deducted: minutes,
                    Booking.payout_rate: payout_rate_for(tier),
                    Booking.completed_at: now,
                    Booking.updated_at: now,
                },
                synchronize_session=False,
            )
            if not flipped:
                # Lost a race with a concurrent completion
                raise InvalidStateError(
                    "Booking was completed by another request",
                    details={"booking_id": booking_id},
                )

            company = self.ledger.deduct(company.id, minutes, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        minutes_used_after = company.minutes_used
        minutes_included = company.minutes_included or 0

        result = CompletionResult(
            booking_id=booking_id,
            minutes_deducted=minutes,
            tier=tier.value,
            multiplier=multiplier,
            session_minutes=session_minutes,
            company_id=company.id,
            company_name=company.name,
            total_minutes_used=minutes_used_after,
            minutes_included=minutes_included,
        )

        if crossed_low_minutes_threshold(minutes_used_after - minutes, minutes_used_after, minutes_included):
            result.low_minutes_email_sent = self._notify_low_minutes(company)

        logger.info(f"Booking {booking_id} completed; company {company.id} used {minutes_used_after}/{minutes_included}")
        return result

    def completion_options(self, booking_id: int) -> CompletionOptions:
        """Plan minutes each offered duration would cost at the booking specialist's tier"""
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found", details={"booking_id": booking_id})

        specialist = self._get_specialist(booking)

        tier = resolve_tier(specialist.rate_tier)
        return CompletionOptions(
            booking_id=booking.id,
            status=booking.status,
            tier=tier.value,
            multiplier=multiplier_for(tier),
            options={minutes: minutes_to_deduct(minutes, tier) for minutes in SESSION_DURATION_OPTIONS},
        )

    def _get_specialist(self, booking: Booking) -> Specialist:
        specialist = self.db.query(Specialist).filter(Specialist.id == booking.specialist_id).first()
        if not specialist:
            raise NotFoundError(
                f"Specialist not found for booking {booking.id}",
                details={"booking_id": booking.id, "specialist_id": booking.specialist_id},
            )
        return specialist

    def _notify_low_minutes(self, company) -> bool:
        admin = company.admin_user
        if not admin or not admin.email:
            logger.warning(f"Company {company.id} crossed the low minutes threshold but has no admin email")
            return False

        logger.info(f"Company {company.id} crossed the low minutes threshold, notifying {admin.email}")
        return self.notifications.send_low_minutes_warning(
            admin_email=admin.email,
            company_name=company.name,
            minutes_used=company.minutes_used,
            minutes_included=company.minutes_included,
            usage_percentage=usage_percentage(company),
        )


def get_session_completion_service(db: Session) -> SessionCompletionService:
    """Get session completion service instance"""
    return SessionCompletionService(db)
