#!/usr/bin/env python
"""
Database seeding script
Populates the database with a demo company, employees and specialists for development
"""
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wellness_ledger.db import SessionLocal, init_db, User, Company, CompanyEmployee, Specialist
from wellness_ledger.db.models import EmployeeStatus, SpecialistTier
from wellness_ledger.services.billing_periods import next_billing_cycle
from wellness_ledger.services.tier_table import get_plan


def seed_database():
    """Seed database with initial data"""
    init_db()
    db = SessionLocal()

    try:
        existing = db.query(Company).count()
        if existing > 0:
            print(f"Database already contains {existing} companies. Skipping seed.")
            return

        print("Seeding database with initial data...")

        admin = User(email="admin@acme.example", full_name="Acme Admin")
        employee = User(email="jane@acme.example", full_name="Jane Employee")
        db.add_all([admin, employee])
        db.flush()

        plan = get_plan("starter")
        period_start, period_end = next_billing_cycle(None)
        company = Company(
            name="Acme",
            email_domain="acme.example",
            admin_user_id=admin.id,
            plan_type=plan.plan_id,
            minutes_included=plan.minutes,
            minutes_used=0,
            subscription_period_start=period_start,
            subscription_period_end=period_end,
        )
        db.add(company)
        db.flush()

        db.add(CompanyEmployee(
            company_id=company.id,
            user_id=employee.id,
            email=employee.email,
            status=EmployeeStatus.ACCEPTED.value,
            accepted_at=period_start,
        ))

        for tier in SpecialistTier:
            db.add(Specialist(
                full_name=f"{tier.value.title()} Specialist",
                email=f"{tier.value}@specialists.example",
                rate_tier=tier.value,
            ))

        db.commit()
        print(f"Created company '{company.name}' with {plan.minutes} minutes and {len(SpecialistTier)} specialists")

    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
