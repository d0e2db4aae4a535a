"""
Payout request model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
import enum

from ..base import Base, utcnow


class PayoutStatus(str, enum.Enum):
    """Payout request status"""
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"


class PayoutRequest(Base):
    """
    Specialist claim for earnings over a period

    The amount is frozen when the request is created. At most one request
    per specialist may be pending; the partial unique index enforces it.
    """
    __tablename__ = "payout_requests"

    id = Column(Integer, primary_key=True, index=True)
    specialist_id = Column(Integer, ForeignKey("specialists.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False)
    status = Column(String(20), default=PayoutStatus.PENDING.value, nullable=False, index=True)
    rejection_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    processed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index(
            "uq_payout_requests_one_pending_per_specialist",
            "specialist_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    # Relationships
    specialist = relationship("Specialist", back_populates="payout_requests")
