"""
Company (tenant), User and CompanyEmployee models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from ..base import Base, utcnow


class EmployeeStatus(str, enum.Enum):
    """Company employee invitation status"""
    INVITED = "invited"
    ACCEPTED = "accepted"


class User(Base):
    """Platform user (employee, company admin or platform admin)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Company(Base):
    """
    Paying tenant with a monthly minutes entitlement

    minutes_used may exceed minutes_included; overage is a warning, not a cap.
    """
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email_domain = Column(String, nullable=True, index=True)
    admin_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Entitlement
    plan_type = Column(String, nullable=True)
    minutes_included = Column(Integer, default=0, nullable=False)
    minutes_used = Column(Integer, default=0, nullable=False)
    subscription_period_start = Column(DateTime, nullable=True)
    subscription_period_end = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("minutes_used >= 0", name="ck_companies_minutes_used_non_negative"),
    )

    # Relationships
    admin_user = relationship("User")
    employees = relationship("CompanyEmployee", back_populates="company", cascade="all, delete-orphan")


class CompanyEmployee(Base):
    """Roster entry linking a user to their employer"""
    __tablename__ = "company_employees"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    email = Column(String, nullable=False, index=True)
    status = Column(String, default=EmployeeStatus.INVITED.value, nullable=False)
    invited_at = Column(DateTime, default=utcnow, nullable=False)
    accepted_at = Column(DateTime, nullable=True)

    # Relationships
    company = relationship("Company", back_populates="employees")
    user = relationship("User")
