"""
Specialist model
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
import enum

from ..base import Base, utcnow


class SpecialistTier(str, enum.Enum):
    """Specialist service level"""
    STANDARD = "standard"
    ADVANCED = "advanced"
    EXPERT = "expert"
    MASTER = "master"


class Specialist(Base):
    """Specialist delivering wellness sessions"""
    __tablename__ = "specialists"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    rate_tier = Column(String, nullable=True)  # Null behaves as 'standard'
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    bookings = relationship("Booking", back_populates="specialist")
    payout_requests = relationship("PayoutRequest", back_populates="specialist")
