"""
Database module for the Wellness Minutes Ledger
"""
from .engine import engine, SessionLocal, get_db, init_db
from .base import Base
from .models import (
    User,
    Company,
    CompanyEmployee,
    Specialist,
    Booking,
    PayoutRequest,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "Base",
    "User",
    "Company",
    "CompanyEmployee",
    "Specialist",
    "Booking",
    "PayoutRequest",
]
