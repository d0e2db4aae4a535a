"""
Entitlement Ledger - per-company minutes allowance and consumption

deduct() is the only operation that moves minutes_used up, and it does so
with a single atomic UPDATE. reset_for_renewal() is the only operation that
moves it back to zero.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
import logging

from ..config import config
from ..db.base import utcnow
from ..db.models import Company, CompanyEmployee, EmployeeStatus, User
from ..exceptions import ComputationGuardError, NotFoundError
from .billing_periods import add_months, next_billing_cycle
from .tier_table import get_plan

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """Read-only view of a company's entitlement"""
    company_id: int
    plan_type: Optional[str]
    minutes_included: int
    minutes_used: int
    minutes_remaining: int
    usage_percentage: float
    is_low_on_minutes: bool
    is_over_allowance: bool
    period_start: Optional[datetime]
    period_end: Optional[datetime]


def remaining_minutes(company) -> int:
    """Minutes left this period, clamped at zero"""
    return max(0, (company.minutes_included or 0) - (company.minutes_used or 0))


def usage_percentage(company) -> float:
    """Share of the allowance consumed, 0 when there is no allowance"""
    included = company.minutes_included or 0
    if included <= 0:
        return 0.0
    return (company.minutes_used or 0) / included * 100


def is_over_allowance(company) -> bool:
    return (company.minutes_used or 0) > (company.minutes_included or 0)


def is_low_on_minutes(company, threshold: Optional[float] = None) -> bool:
    threshold = config.LOW_MINUTES_THRESHOLD if threshold is None else threshold
    return usage_percentage(company) >= threshold * 100


def crossed_low_minutes_threshold(
    minutes_used_before: int,
    minutes_used_after: int,
    minutes_included: int,
    threshold: Optional[float] = None,
) -> bool:
    """True only for the deduction that moves usage from below the threshold to at/above it"""
    if not minutes_included or minutes_included <= 0:
        return False
    threshold_pct = (config.LOW_MINUTES_THRESHOLD if threshold is None else threshold) * 100
    before_pct = minutes_used_before / minutes_included * 100
    after_pct = minutes_used_after / minutes_included * 100
    return before_pct < threshold_pct <= after_pct


class EntitlementLedger:
    """Service for reading and mutating company minute entitlements"""

    def __init__(self, db: Session):
        self.db = db

    def get_company(self, company_id: int) -> Company:
        company = self.db.query(Company).filter(Company.id == company_id).first()
        if not company:
            raise NotFoundError(f"Company {company_id} not found", details={"company_id": company_id})
        return company

    def find_company_for_employee(self, user_id: int) -> Company:
        """
        Resolve the company an employee belongs to

        Tries an accepted roster entry first, then matches the employee's
        email domain against companies.email_domain.

        Raises:
            NotFoundError: If neither lookup finds a company
        """
        membership = self.db.query(CompanyEmployee).filter(
            CompanyEmployee.user_id == user_id,
            CompanyEmployee.status == EmployeeStatus.ACCEPTED.value,
        ).order_by(CompanyEmployee.accepted_at.desc()).first()

        if membership:
            return self.get_company(membership.company_id)

        logger.info(f"User {user_id} not on a company roster, trying email domain fallback")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user or not user.email or "@" not in user.email:
            raise NotFoundError(f"Employee {user_id} not found", details={"user_id": user_id})

        email_domain = user.email.split("@", 1)[1].lower()
        company = self.db.query(Company).filter(Company.email_domain == email_domain).first()
        if not company:
            raise NotFoundError(
                f"Company for employee {user_id} not found",
                details={"user_id": user_id, "email_domain": email_domain},
            )
        return company

    def deduct(self, company_id: int, minutes: int, commit: bool = True) -> Company:
        """
        Add consumed minutes to a company's usage

        Args:
            company_id: Company to charge
            minutes: Plan minutes to add, positive
            commit: Commit immediately; pass False to join the caller's transaction

        Returns:
            The company with refreshed counters
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ComputationGuardError(
                "Minutes to deduct must be a positive whole number",
                details={"minutes": minutes},
            )

        updated = self.db.query(Company).filter(Company.id == company_id).update(
            {
                Company.minutes_used: Company.minutes_used + minutes,
                Company.updated_at: utcnow(),
            },
            synchronize_session=False,
        )
        if not updated:
            raise NotFoundError(f"Company {company_id} not found", details={"company_id": company_id})

        company = self.db.query(Company).filter(Company.id == company_id).populate_existing().one()

        if commit:
            self.db.commit()

        logger.info(f"Deducted {minutes} minutes from company {company_id} (used: {company.minutes_used}/{company.minutes_included})")
        return company

    def reset_for_renewal(
        self,
        company_id: int,
        plan_id: str,
        period_start: Optional[datetime] = None,
        period_end: Optional[datetime] = None,
    ) -> Company:
        """
        Start a new billing period after a plan purchase, renewal or upgrade

        Usage goes back to zero and the allowance becomes the plan's. Without
        explicit bounds the period advances by one billing cycle; a period with
        only a start runs one month from that start.
        """
        plan = get_plan(plan_id)
        company = self.get_company(company_id)

        if period_start is None:
            period_start, _ = next_billing_cycle(company.subscription_period_end)
        if period_end is None:
            period_end = add_months(period_start, 1)
        if period_end <= period_start:
            raise ComputationGuardError(
                "Billing period end must be after its start",
                details={"period_start": period_start.isoformat(), "period_end": period_end.isoformat()},
            )

        previous_used = company.minutes_used
        company.plan_type = plan.plan_id
        company.minutes_included = plan.minutes
        company.minutes_used = 0
        company.subscription_period_start = period_start
        company.subscription_period_end = period_end

        self.db.commit()
        self.db.refresh(company)

        logger.info(
            f"Reset entitlement for company {company_id}: plan={plan.plan_id}, "
            f"included={plan.minutes}, previous used={previous_used}, "
            f"period={period_start.isoformat()}..{period_end.isoformat()}"
        )
        return company

    def snapshot(self, company_id: int) -> LedgerSnapshot:
        company = self.get_company(company_id)
        return LedgerSnapshot(
            company_id=company.id,
            plan_type=company.plan_type,
            minutes_included=company.minutes_included or 0,
            minutes_used=company.minutes_used or 0,
            minutes_remaining=remaining_minutes(company),
            usage_percentage=round(usage_percentage(company), 2),
            is_low_on_minutes=is_low_on_minutes(company),
            is_over_allowance=is_over_allowance(company),
            period_start=company.subscription_period_start,
            period_end=company.subscription_period_end,
        )


def get_entitlement_ledger(db: Session) -> EntitlementLedger:
    """Get entitlement ledger instance"""
    return EntitlementLedger(db)
