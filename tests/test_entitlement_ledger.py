"""
Tests for the company entitlement ledger
"""
import pytest
from datetime import datetime
from types import SimpleNamespace

from wellness_ledger.db.models import Company, EmployeeStatus
from wellness_ledger.exceptions import ComputationGuardError, NotFoundError
from wellness_ledger.services.entitlement_ledger import (
    EntitlementLedger,
    crossed_low_minutes_threshold,
    is_low_on_minutes,
    is_over_allowance,
    remaining_minutes,
    usage_percentage,
)


def _company(included, used):
    return SimpleNamespace(minutes_included=included, minutes_used=used)


class TestDerivedValues:
    """Test remaining, percentage and warning flags"""

    def test_remaining(self):
        assert remaining_minutes(_company(500, 144)) == 356

    def test_remaining_clamped_at_zero(self):
        """Test overage never produces negative remaining minutes"""
        company = _company(500, 700)
        assert remaining_minutes(company) == 0
        assert is_over_allowance(company) is True

    def test_not_over_at_exact_allowance(self):
        assert is_over_allowance(_company(500, 500)) is False

    def test_usage_percentage(self):
        assert usage_percentage(_company(500, 400)) == 80.0

    def test_usage_percentage_without_allowance(self):
        """Test zero allowance reports 0% instead of dividing by zero"""
        assert usage_percentage(_company(0, 50)) == 0.0
        assert is_low_on_minutes(_company(0, 50)) is False

    def test_low_on_minutes(self):
        assert is_low_on_minutes(_company(500, 400)) is True
        assert is_low_on_minutes(_company(500, 399)) is False
        assert is_low_on_minutes(_company(500, 300), threshold=0.5) is True


class TestThresholdCrossing:
    """Test the low-minutes warning fires only on the crossing deduction"""

    def test_crossing(self):
        assert crossed_low_minutes_threshold(300, 444, 500) is True

    def test_landing_exactly_on_threshold(self):
        assert crossed_low_minutes_threshold(0, 400, 500) is True

    def test_already_over(self):
        assert crossed_low_minutes_threshold(444, 588, 500) is False

    def test_still_below(self):
        assert crossed_low_minutes_threshold(0, 144, 500) is False

    def test_no_allowance(self):
        assert crossed_low_minutes_threshold(0, 60, 0) is False


class TestEntitlementLedger:
    """Test ledger persistence operations"""

    def test_deduct_adds_to_usage(self, db_session, make_company):
        """Test deduction increments minutes_used"""
        company = make_company(minutes_included=500)
        ledger = EntitlementLedger(db_session)

        updated = ledger.deduct(company.id, 144)

        assert updated.minutes_used == 144
        assert remaining_minutes(updated) == 356

    def test_deduct_is_cumulative(self, db_session, make_company):
        company = make_company(minutes_included=500, minutes_used=100)
        ledger = EntitlementLedger(db_session)

        ledger.deduct(company.id, 60)
        ledger.deduct(company.id, 96)

        stored = db_session.query(Company).filter(Company.id == company.id).populate_existing().one()
        assert stored.minutes_used == 256

    def test_deduct_past_allowance(self, db_session, make_company):
        """Test overage is recorded rather than refused"""
        company = make_company(minutes_included=100, minutes_used=90)
        updated = EntitlementLedger(db_session).deduct(company.id, 192)

        assert updated.minutes_used == 282
        assert is_over_allowance(updated) is True
        assert remaining_minutes(updated) == 0

    def test_deduct_unknown_company(self, db_session):
        with pytest.raises(NotFoundError):
            EntitlementLedger(db_session).deduct(9999, 60)

    @pytest.mark.parametrize("minutes", [0, -10, 1.5])
    def test_deduct_guard(self, db_session, make_company, minutes):
        company = make_company()
        with pytest.raises(ComputationGuardError):
            EntitlementLedger(db_session).deduct(company.id, minutes)

    def test_snapshot(self, db_session, make_company):
        company = make_company(minutes_included=500, minutes_used=420)
        snapshot = EntitlementLedger(db_session).snapshot(company.id)

        assert snapshot.minutes_remaining == 80
        assert snapshot.usage_percentage == 84.0
        assert snapshot.is_low_on_minutes is True
        assert snapshot.is_over_allowance is False
        assert snapshot.plan_type == "starter"

    def test_snapshot_unknown_company(self, db_session):
        with pytest.raises(NotFoundError):
            EntitlementLedger(db_session).snapshot(9999)


class TestCompanyLookup:
    """Test resolving an employee's company"""

    def test_accepted_roster_entry(self, db_session, make_company, make_employee):
        company = make_company()
        employee = make_employee(company)

        assert EntitlementLedger(db_session).find_company_for_employee(employee.id).id == company.id

    def test_company_admin_by_email_domain(self, db_session, make_company, make_user):
        """Test users not on a roster are matched by email domain"""
        company = make_company(email_domain="acme.example")
        user = make_user(email="bob@acme.example")

        assert EntitlementLedger(db_session).find_company_for_employee(user.id).id == company.id

    def test_invited_employee_falls_back_to_domain(self, db_session, make_company, make_employee, make_user):
        company = make_company(email_domain="acme.example")
        other = make_company(name="Other")
        user = make_user(email="carol@acme.example")
        make_employee(other, user=user, status=EmployeeStatus.INVITED.value)

        assert EntitlementLedger(db_session).find_company_for_employee(user.id).id == company.id

    def test_no_company(self, db_session, make_user, make_company):
        make_company(email_domain="acme.example")
        user = make_user(email="dave@elsewhere.example")

        with pytest.raises(NotFoundError):
            EntitlementLedger(db_session).find_company_for_employee(user.id)

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            EntitlementLedger(db_session).find_company_for_employee(9999)


class TestRenewal:
    """Test resetting usage at plan purchase or renewal"""

    def test_reset_with_explicit_period(self, db_session, make_company):
        company = make_company(minutes_included=500, minutes_used=480)
        ledger = EntitlementLedger(db_session)

        renewed = ledger.reset_for_renewal(
            company.id,
            "growth",
            period_start=datetime(2026, 4, 1),
            period_end=datetime(2026, 5, 1),
        )

        assert renewed.minutes_used == 0
        assert renewed.minutes_included == 1500
        assert renewed.plan_type == "growth"
        assert renewed.subscription_period_start == datetime(2026, 4, 1)
        assert renewed.subscription_period_end == datetime(2026, 5, 1)

    def test_reset_clears_overage(self, db_session, make_company):
        company = make_company(minutes_included=500, minutes_used=900)
        renewed = EntitlementLedger(db_session).reset_for_renewal(company.id, "starter")

        assert renewed.minutes_used == 0
        assert renewed.minutes_included == 500
        assert renewed.subscription_period_end > renewed.subscription_period_start

    def test_unknown_plan(self, db_session, make_company):
        company = make_company(minutes_used=100)
        with pytest.raises(NotFoundError):
            EntitlementLedger(db_session).reset_for_renewal(company.id, "enterprise")

    def test_inverted_period(self, db_session, make_company):
        company = make_company()
        with pytest.raises(ComputationGuardError):
            EntitlementLedger(db_session).reset_for_renewal(
                company.id,
                "starter",
                period_start=datetime(2026, 5, 1),
                period_end=datetime(2026, 4, 1),
            )

    def test_start_only_runs_one_month(self, db_session, make_company):
        """Test a period with only a start keeps that start"""
        company = make_company()
        renewed = EntitlementLedger(db_session).reset_for_renewal(
            company.id, "scale", period_start=datetime(2026, 1, 31)
        )

        assert renewed.subscription_period_start == datetime(2026, 1, 31)
        assert renewed.subscription_period_end == datetime(2026, 2, 28)

    def test_end_only_keeps_requested_end(self, db_session, make_company):
        company = make_company()
        renewed = EntitlementLedger(db_session).reset_for_renewal(
            company.id, "starter", period_end=datetime(2100, 1, 1)
        )

        assert renewed.subscription_period_end == datetime(2100, 1, 1)
        assert renewed.subscription_period_start < renewed.subscription_period_end
