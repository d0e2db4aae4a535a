"""
Booking (session) model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Numeric
from sqlalchemy.orm import relationship
import enum

from ..base import Base, utcnow


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(Base):
    """
    Session between an employee and a specialist

    Accounting fields (session_duration, minutes_deducted, payout_rate,
    completed_at) are written once, when the booking moves from approved to completed.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    specialist_id = Column(Integer, ForeignKey("specialists.id"), nullable=False, index=True)
    employee_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default=BookingStatus.PENDING.value, nullable=False, index=True)

    session_duration = Column(Integer, default=60, nullable=True)  # minutes
    minutes_deducted = Column(Integer, nullable=True)
    payout_rate = Column(Numeric(10, 2), nullable=True)  # USD per session-hour at completion

    proposed_datetime = Column(DateTime, nullable=True)
    confirmed_datetime = Column(DateTime, nullable=True, index=True)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_bookings_specialist_status", "specialist_id", "status"),
    )

    # Relationships
    specialist = relationship("Specialist", back_populates="bookings")
    employee = relationship("User")
