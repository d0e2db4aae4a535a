"""
Payout Request Workflow

States: none -> pending -> paid | rejected. The amount is frozen when the
request is created. One pending request per specialist is checked here and
enforced by a partial unique index, so a concurrent duplicate surfaces as
InvalidStateError rather than a constraint crash.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from ..db.base import utcnow
from ..db.models import PayoutRequest, PayoutStatus
from ..exceptions import InvalidStateError, NotFoundError
from .billing_periods import month_bounds
from .earnings import EarningsAggregator
from .notification_service import NotificationService, get_notification_service

logger = logging.getLogger(__name__)


class PayoutService:
    """Service for specialist payout requests"""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.earnings = EarningsAggregator(db)
        self.notifications = notifications or get_notification_service()

    def get_request(self, payout_id: int) -> PayoutRequest:
        payout = self.db.query(PayoutRequest).filter(PayoutRequest.id == payout_id).first()
        if not payout:
            raise NotFoundError(f"Payout request {payout_id} not found", details={"payout_request_id": payout_id})
        return payout

    def get_pending(self, specialist_id: int) -> Optional[PayoutRequest]:
        """Get the specialist's open request, if any"""
        return self.db.query(PayoutRequest).filter(
            PayoutRequest.specialist_id == specialist_id,
            PayoutRequest.status == PayoutStatus.PENDING.value,
        ).order_by(PayoutRequest.created_at.desc()).first()

    def request_payout(
        self,
        specialist_id: int,
        period_start: Optional[datetime] = None,
        period_end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> PayoutRequest:
        """
        Create a pending payout request for the specialist's earnings

        Args:
            specialist_id: Requesting specialist
            period_start: Start of the earnings window (default: start of current month)
            period_end: End of the earnings window (default: end of current month)
            now: Reference time for the default bounds; each missing bound is
                defaulted on its own

        Raises:
            NotFoundError: Unknown specialist
            InvalidStateError: A request is already pending, or nothing was earned
        """
        specialist = self.earnings.get_specialist(specialist_id)

        default_start, default_end = month_bounds(now)
        period_start = period_start or default_start
        period_end = period_end or default_end

        existing = self.get_pending(specialist_id)
        if existing:
            raise InvalidStateError(
                "A payout request is already pending for this specialist",
                details={"payout_request_id": existing.id, "amount": str(existing.amount)},
            )

        amount = self.earnings.earnings_for_period(specialist_id, period_start, period_end)
        if amount <= 0:
            raise InvalidStateError(
                "No earnings to request for this period",
                details={"specialist_id": specialist_id, "amount": str(amount)},
            )

        payout = PayoutRequest(
            specialist_id=specialist_id,
            amount=amount,
            period_start=period_start,
            period_end=period_end,
            status=PayoutStatus.PENDING.value,
        )
        self.db.add(payout)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Concurrent payout request for specialist {specialist_id} rejected by unique index")
            raise InvalidStateError(
                "A payout request is already pending for this specialist",
                details={"specialist_id": specialist_id},
            ) from e
        self.db.refresh(payout)

        logger.info(f"Created payout request {payout.id} for specialist {specialist_id}, amount: {payout.amount}")

        self.notifications.send_payout_requested(payout, specialist)
        return payout

    def mark_paid(self, payout_id: int) -> PayoutRequest:
        """Settle a pending request (admin action)"""
        return self._close(payout_id, PayoutStatus.PAID)

    def reject(self, payout_id: int, reason: Optional[str] = None) -> PayoutRequest:
        """Decline a pending request (admin action); the specialist may request again"""
        return self._close(payout_id, PayoutStatus.REJECTED, reason)

    def _close(self, payout_id: int, new_status: PayoutStatus, reason: Optional[str] = None) -> PayoutRequest:
        values = {
            PayoutRequest.status: new_status.value,
            PayoutRequest.processed_at: utcnow(),
        }
        if reason:
            values[PayoutRequest.rejection_reason] = reason

        updated = self.db.query(PayoutRequest).filter(
            PayoutRequest.id == payout_id,
            PayoutRequest.status == PayoutStatus.PENDING.value,
        ).update(values, synchronize_session=False)

        if not updated:
            self.db.rollback()
            payout = self.get_request(payout_id)
            raise InvalidStateError(
                f"Payout request {payout_id} is already {payout.status}",
                details={"payout_request_id": payout_id, "status": payout.status},
            )

        self.db.commit()
        payout = self.db.query(PayoutRequest).filter(PayoutRequest.id == payout_id).populate_existing().one()

        logger.info(f"Payout request {payout_id} marked {new_status.value} (amount: {payout.amount})")

        self.notifications.send_payout_processed(payout, payout.specialist)
        return payout

    def list_requests(
        self,
        status: Optional[str] = None,
        specialist_id: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[PayoutRequest]:
        """List payout requests, newest first"""
        query = self.db.query(PayoutRequest)

        if status:
            query = query.filter(PayoutRequest.status == status)
        if specialist_id is not None:
            query = query.filter(PayoutRequest.specialist_id == specialist_id)

        query = query.order_by(PayoutRequest.created_at.desc(), PayoutRequest.id.desc())
        return query.limit(limit).offset(offset).all()


def get_payout_service(db: Session) -> PayoutService:
    """Get payout service instance"""
    return PayoutService(db)
