"""
Database models for the Wellness Minutes Ledger
"""
from .company import User, Company, CompanyEmployee, EmployeeStatus
from .specialist import Specialist, SpecialistTier
from .booking import Booking, BookingStatus
from .payout import PayoutRequest, PayoutStatus

__all__ = [
    "User",
    "Company",
    "CompanyEmployee",
    "EmployeeStatus",
    "Specialist",
    "SpecialistTier",
    "Booking",
    "BookingStatus",
    "PayoutRequest",
    "PayoutStatus",
]
