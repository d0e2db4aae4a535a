"""
API tests for ledger, earnings and payout routes
"""
from datetime import datetime

from wellness_ledger.db.models import BookingStatus


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_request_id_header(self, client):
        """Test request IDs are echoed or generated"""
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert client.get("/health").headers.get("X-Request-ID")


class TestSessionRoutes:
    """Test booking completion endpoint"""

    def test_complete_booking(self, client, employee_setup):
        company, employee, specialist, booking = employee_setup

        response = client.post(f"/v1/bookings/{booking.id}/complete", json={"session_minutes": 60})

        assert response.status_code == 200
        data = response.json()
        assert data["minutes_deducted"] == 144
        assert data["tier"] == "expert"
        assert data["total_minutes_used"] == 144
        assert data["company_id"] == company.id

    def test_default_session_length(self, client, employee_setup):
        company, employee, specialist, booking = employee_setup

        response = client.post(f"/v1/bookings/{booking.id}/complete", json={})

        assert response.status_code == 200
        assert response.json()["session_minutes"] == 60

    def test_double_completion_conflict(self, client, employee_setup):
        company, employee, specialist, booking = employee_setup
        client.post(f"/v1/bookings/{booking.id}/complete", json={})

        response = client.post(f"/v1/bookings/{booking.id}/complete", json={})

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INVALID_STATE"
        assert body["details"]["status"] == BookingStatus.COMPLETED.value
        assert "request_id" in body

    def test_completion_options(self, client, employee_setup):
        company, employee, specialist, booking = employee_setup

        response = client.get(f"/v1/bookings/{booking.id}/completion-options")

        assert response.status_code == 200
        options = {o["session_minutes"]: o["minutes_to_deduct"] for o in response.json()["options"]}
        assert options[60] == 144
        assert options[45] == 108

    def test_unknown_booking(self, client):
        response = client.post("/v1/bookings/9999/complete", json={})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_invalid_session_length(self, client, employee_setup):
        company, employee, specialist, booking = employee_setup
        response = client.post(f"/v1/bookings/{booking.id}/complete", json={"session_minutes": 0})
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestLedgerRoutes:
    """Test company entitlement endpoints"""

    def test_get_ledger(self, client, make_company):
        company = make_company(minutes_included=500, minutes_used=700)

        response = client.get(f"/v1/companies/{company.id}/ledger")

        assert response.status_code == 200
        data = response.json()
        assert data["minutes_remaining"] == 0
        assert data["is_over_allowance"] is True
        assert data["usage_percentage"] == 140.0

    def test_get_ledger_unknown_company(self, client):
        assert client.get("/v1/companies/9999/ledger").status_code == 404

    def test_renewal(self, client, make_company):
        company = make_company(minutes_included=500, minutes_used=480)

        response = client.post(
            f"/v1/companies/{company.id}/renewal",
            json={
                "plan_id": "scale",
                "period_start": "2026-04-01T00:00:00Z",
                "period_end": "2026-05-01T00:00:00Z",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["minutes_used"] == 0
        assert data["minutes_included"] == 3600
        assert data["plan_type"] == "scale"
        assert data["period_start"].startswith("2026-04-01T00:00:00")

    def test_renewal_unknown_plan(self, client, make_company):
        company = make_company()
        response = client.post(f"/v1/companies/{company.id}/renewal", json={"plan_id": "enterprise"})
        assert response.status_code == 404

    def test_renewal_inverted_period(self, client, make_company):
        company = make_company()
        response = client.post(
            f"/v1/companies/{company.id}/renewal",
            json={"plan_id": "starter", "period_start": "2026-05-01T00:00:00", "period_end": "2026-04-01T00:00:00"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "COMPUTATION_GUARD"

    def test_weekly_usage(self, client, make_company):
        company = make_company()
        response = client.get(f"/v1/companies/{company.id}/usage/weekly?days=14")
        assert response.status_code == 200
        data = response.json()
        assert data["total_minutes"] == 0
        assert len(data["weeks"]) >= 2


class TestEarningsAndPayoutRoutes:
    """Test specialist earnings and payout endpoints"""

    def _master_with_sessions(self, make_company, make_employee, make_specialist, make_booking):
        specialist = make_specialist(rate_tier="master")
        employee = make_employee(make_company())
        for day in (3, 10, 17):
            make_booking(
                specialist,
                employee,
                status=BookingStatus.COMPLETED.value,
                confirmed_datetime=datetime(2026, 3, day, 10),
            )
        return specialist

    def test_earnings_for_period(self, client, make_company, make_employee, make_specialist, make_booking):
        specialist = self._master_with_sessions(make_company, make_employee, make_specialist, make_booking)

        response = client.get(
            f"/v1/specialists/{specialist.id}/earnings",
            params={"period_start": "2026-03-01T00:00:00", "period_end": "2026-03-31T23:59:59"},
        )

        assert response.status_code == 200
        assert response.json()["amount"] == 576.0

    def test_earnings_summary(self, client, make_specialist):
        specialist = make_specialist(rate_tier="advanced")

        response = client.get(f"/v1/specialists/{specialist.id}/earnings/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["hourly_rate"] == 96.0
        assert data["week"]["amount"] == 0.0
        assert data["month"]["session_count"] == 0

    def test_earnings_unknown_specialist(self, client):
        assert client.get("/v1/specialists/9999/earnings").status_code == 404

    def test_payout_lifecycle(self, client, make_company, make_employee, make_specialist, make_booking):
        """Test request, duplicate, pay, pay again, request again"""
        specialist = self._master_with_sessions(make_company, make_employee, make_specialist, make_booking)
        window = {"period_start": "2026-03-01T00:00:00", "period_end": "2026-03-31T23:59:59"}

        created = client.post(f"/v1/specialists/{specialist.id}/payouts", json=window)
        assert created.status_code == 201
        payout = created.json()
        assert payout["amount"] == 576.0
        assert payout["status"] == "pending"

        duplicate = client.post(f"/v1/specialists/{specialist.id}/payouts", json=window)
        assert duplicate.status_code == 409

        pending = client.get(f"/v1/specialists/{specialist.id}/payouts/pending")
        assert pending.json()["id"] == payout["id"]

        queue = client.get("/v1/payouts", params={"status": "pending"})
        assert [p["id"] for p in queue.json()] == [payout["id"]]

        paid = client.post(f"/v1/payouts/{payout['id']}/mark-paid")
        assert paid.status_code == 200
        assert paid.json()["status"] == "paid"
        assert paid.json()["processed_at"] is not None

        assert client.post(f"/v1/payouts/{payout['id']}/mark-paid").status_code == 409
        assert client.get(f"/v1/specialists/{specialist.id}/payouts/pending").json() is None

        again = client.post(f"/v1/specialists/{specialist.id}/payouts", json=window)
        assert again.status_code == 201

    def test_payout_with_start_only(self, client, make_company, make_employee, make_specialist, make_booking):
        """Test a start without an end keeps the requested start"""
        specialist = self._master_with_sessions(make_company, make_employee, make_specialist, make_booking)

        response = client.post(f"/v1/specialists/{specialist.id}/payouts", json={"period_start": "2026-03-01T00:00:00"})

        assert response.status_code == 201
        payout = response.json()
        assert payout["period_start"].startswith("2026-03-01T00:00:00")
        assert payout["amount"] == 576.0

    def test_reject_payout(self, client, make_company, make_employee, make_specialist, make_booking):
        specialist = self._master_with_sessions(make_company, make_employee, make_specialist, make_booking)
        window = {"period_start": "2026-03-01T00:00:00", "period_end": "2026-03-31T23:59:59"}
        payout = client.post(f"/v1/specialists/{specialist.id}/payouts", json=window).json()

        response = client.post(f"/v1/payouts/{payout['id']}/reject", json={"reason": "Duplicate claim"})

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Duplicate claim"

    def test_payout_with_no_earnings(self, client, make_specialist):
        specialist = make_specialist()
        response = client.post(
            f"/v1/specialists/{specialist.id}/payouts",
            json={"period_start": "2026-03-01T00:00:00", "period_end": "2026-03-31T23:59:59"},
        )
        assert response.status_code == 409

    def test_unknown_payout(self, client):
        assert client.post("/v1/payouts/9999/mark-paid").status_code == 404
        assert client.post("/v1/payouts/9999/reject").status_code == 404

    def test_invalid_status_filter(self, client):
        assert client.get("/v1/payouts", params={"status": "bogus"}).status_code == 422
