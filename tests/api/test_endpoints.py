"""API endpoint tests.

Exercises the FastAPI routes end to end against in-memory SQLite.
"""

import csv
import io
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _create_timesheet(client: AsyncClient, headers, **overrides):
    body = {"work_date": "2025-03-03", "start_time": "09:00", "end_time": "17:00", "break_time": 0}
    body.update(overrides)
    return await client.post("/api/v1/timesheets", headers=headers, json=body)


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["service"]
        assert data["version"]
        assert Decimal(data["regular_hours_threshold"]) > 0

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestAuthEndpoints:
    """Login and bearer tokens."""

    async def test_login_and_me(self, client: AsyncClient, admin_user):
        response = await client.post("/api/v1/auth/login", json={"username": "admin", "password": "secret123"})
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "admin"
        assert "password_hash" not in data["user"]

        me = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["username"] == "admin"

    async def test_bad_credentials(self, client: AsyncClient, admin_user):
        response = await client.post("/api/v1/auth/login", json={"username": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHENTICATED"

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/timesheets")
        assert response.status_code == 401

    async def test_employee_password_reset(self, client: AsyncClient, employee_user):
        identity = {"employee_code": "emp001", "date_of_birth": "1990-05-17"}
        verify = await client.post("/api/v1/auth/employee-password-reset/verify", json=identity)
        assert verify.status_code == 200
        assert verify.json() == {"verified": True, "username": "nimal"}

        reset = await client.post(
            "/api/v1/auth/employee-password-reset/reset", json={**identity, "new_password": "brandnew1"}
        )
        assert reset.status_code == 200

        login = await client.post("/api/v1/auth/login", json={"username": "nimal", "password": "brandnew1"})
        assert login.status_code == 200

    async def test_token_password_reset(self, client: AsyncClient, employee_user):
        unknown = await client.post("/api/v1/auth/password-reset/request", json={"email": "nobody@example.com"})
        assert unknown.status_code == 200
        assert unknown.json()["reset_token"] is None

        issued = await client.post("/api/v1/auth/password-reset/request", json={"email": "nimal@example.com"})
        assert issued.status_code == 200
        token = issued.json()["reset_token"]
        assert issued.json()["expires_at"] is not None

        verify = await client.post("/api/v1/auth/password-reset/verify", json={"token": token})
        assert verify.status_code == 200
        assert verify.json()["valid"] is True
        assert verify.json()["user"]["username"] == "nimal"

        reset = await client.post(
            "/api/v1/auth/password-reset/reset", json={"token": token, "new_password": "brandnew1"}
        )
        assert reset.status_code == 200

        reused = await client.post(
            "/api/v1/auth/password-reset/reset", json={"token": token, "new_password": "another1"}
        )
        assert reused.status_code == 400
        assert reused.json()["code"] == "VALIDATION_ERROR"

        login = await client.post("/api/v1/auth/login", json={"username": "nimal", "password": "brandnew1"})
        assert login.status_code == 200


class TestTimesheetEndpoints:
    """Timesheet CRUD and lifecycle over HTTP."""

    async def test_create_defaults_to_own_employee_and_ignores_derived_hours(
        self, client: AsyncClient, employee, employee_headers
    ):
        response = await _create_timesheet(
            client, employee_headers, total_hours_worked=20, ot_hours=12
        )
        assert response.status_code == 201

        data = response.json()
        assert data["employee_id"] == str(employee.employee_id)
        assert data["status"] == "draft"
        assert Decimal(data["total_hours_worked"]) == Decimal("8")
        assert Decimal(data["ot_hours"]) == Decimal("0")

    async def test_invalid_time_format(self, client: AsyncClient, employee_headers):
        response = await _create_timesheet(client, employee_headers, start_time="9am")
        assert response.status_code == 400

        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert any(e["field"] == "start_time" for e in data["errors"])

    async def test_duplicate_date(self, client: AsyncClient, employee_headers):
        assert (await _create_timesheet(client, employee_headers)).status_code == 201

        response = await _create_timesheet(client, employee_headers, start_time="10:00")
        assert response.status_code == 409

    async def test_cross_employee_read_is_denied(
        self, client: AsyncClient, employee_headers, other_employee_headers
    ):
        created = (await _create_timesheet(client, employee_headers)).json()

        response = await client.get(
            f"/api/v1/timesheets/{created['timesheet_id']}", headers=other_employee_headers
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

        # A missing id looks the same to an employee
        missing = await client.get(f"/api/v1/timesheets/{uuid4()}", headers=other_employee_headers)
        assert missing.status_code == 403

    async def test_review_flow(self, client: AsyncClient, employee_headers, manager_headers):
        entry_id = (await _create_timesheet(client, employee_headers)).json()["timesheet_id"]

        submitted = await client.put(f"/api/v1/timesheets/{entry_id}/submit", headers=employee_headers)
        assert submitted.json()["status"] == "submitted"

        rejected = await client.put(
            f"/api/v1/timesheets/{entry_id}", headers=manager_headers, json={"status": "rejected"}
        )
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "rejected"

        approved = await client.put(f"/api/v1/timesheets/{entry_id}/approve", headers=manager_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

    async def test_approve_draft_is_invalid(self, client: AsyncClient, employee_headers, admin_headers):
        entry_id = (await _create_timesheet(client, employee_headers)).json()["timesheet_id"]

        response = await client.put(f"/api/v1/timesheets/{entry_id}/approve", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TRANSITION"

    async def test_list_and_delete(self, client: AsyncClient, employee, employee_headers, manager_headers):
        entry_id = (await _create_timesheet(client, employee_headers)).json()["timesheet_id"]

        listed = await client.get(
            f"/api/v1/timesheets/employee/{employee.employee_id}", headers=manager_headers
        )
        assert listed.status_code == 200
        assert listed.json()["total"] == 1

        deleted = await client.delete(f"/api/v1/timesheets/{entry_id}", headers=employee_headers)
        assert deleted.status_code == 204

        own = await client.get("/api/v1/timesheets", headers=employee_headers)
        assert own.json()["total"] == 0

    async def test_null_flag_is_rejected(self, client: AsyncClient, employee_headers):
        entry_id = (await _create_timesheet(client, employee_headers)).json()["timesheet_id"]

        response = await client.put(
            f"/api/v1/timesheets/{entry_id}", headers=employee_headers, json={"is_vacation_work": None}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert [e["field"] for e in body["errors"]] == ["is_vacation_work"]


class TestExpenseEndpoints:
    """Expense lifecycle over HTTP."""

    async def test_submit_reject_approve(self, client: AsyncClient, employee_headers, manager_headers):
        created = await client.post(
            "/api/v1/expenses",
            headers=employee_headers,
            json={
                "expense_date": "2025-03-05",
                "category": "meals",
                "description": "Team lunch",
                "amount": "4500.00",
                "currency": "lkr",
            },
        )
        assert created.status_code == 201
        expense_id = created.json()["expense_id"]
        assert created.json()["currency"] == "LKR"

        await client.put(f"/api/v1/expenses/{expense_id}/submit", headers=employee_headers)
        rejected = await client.put(
            f"/api/v1/expenses/{expense_id}/reject",
            headers=manager_headers,
            json={"rejection_reason": "Not a business expense"},
        )
        assert rejected.json()["status"] == "rejected"
        assert rejected.json()["rejection_reason"] == "Not a business expense"

        approved = await client.put(f"/api/v1/expenses/{expense_id}/approve", headers=manager_headers)
        assert approved.json()["status"] == "approved"
        assert approved.json()["approved_by"] is not None

    async def test_unknown_category(self, client: AsyncClient, employee_headers):
        response = await client.post(
            "/api/v1/expenses",
            headers=employee_headers,
            json={"expense_date": "2025-03-05", "category": "travel", "description": "x", "amount": 1},
        )
        assert response.status_code == 400

    async def test_null_date_is_rejected(self, client: AsyncClient, employee_headers):
        created = await client.post(
            "/api/v1/expenses",
            headers=employee_headers,
            json={"expense_date": "2025-03-05", "category": "meals", "description": "Lunch", "amount": "800"},
        )
        expense_id = created.json()["expense_id"]

        response = await client.put(
            f"/api/v1/expenses/{expense_id}", headers=employee_headers, json={"expense_date": None}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert [e["field"] for e in body["errors"]] == ["expense_date"]


class TestReportEndpoints:
    """Generation, lookup, finalize and export."""

    async def test_generate_lookup_finalize_export(
        self, client: AsyncClient, employee, other_employee, employee_headers, manager_headers
    ):
        await _create_timesheet(client, employee_headers)

        generated = await client.post("/api/v1/reports/generate/2025/3", headers=manager_headers)
        assert generated.status_code == 200
        assert generated.json()["generated"] == 2

        own = await client.get(
            f"/api/v1/reports/monthly/{employee.employee_id}/2025/3", headers=employee_headers
        )
        assert own.status_code == 200
        summary = own.json()
        assert Decimal(summary["total_payable_amount"]) == Decimal("200.00")

        other = await client.get(
            f"/api/v1/reports/monthly/{other_employee.employee_id}/2025/3", headers=employee_headers
        )
        assert other.status_code == 403

        finalized = await client.put(
            f"/api/v1/reports/monthly/{summary['summary_id']}/finalize", headers=manager_headers
        )
        assert finalized.json()["status"] == "finalized"
        again = await client.put(
            f"/api/v1/reports/monthly/{summary['summary_id']}/finalize", headers=manager_headers
        )
        assert again.status_code == 400

        export = await client.get("/api/v1/reports/export/2025/3", headers=manager_headers)
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert "monthly-report-2025-3.csv" in export.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(export.text)))
        assert rows[0][0] == "Employee ID"
        assert len(rows) == 3

    async def test_employee_cannot_generate(self, client: AsyncClient, employee_headers):
        response = await client.post("/api/v1/reports/generate/2025/3", headers=employee_headers)
        assert response.status_code == 403

    async def test_invalid_period(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/reports/generate/2025/13", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "month"


class TestEmployeeAndUserEndpoints:
    """Employee and account management."""

    async def test_only_admin_creates_employees(self, client: AsyncClient, admin_headers, manager_headers):
        body = {
            "employee_code": "emp300",
            "name": "Ruwan Jayasuriya",
            "position": "Clerk",
            "pay_rate": "15",
            "ot_rate": "22.5",
            "vacation_pay_rate": "15",
        }
        denied = await client.post("/api/v1/employees", headers=manager_headers, json=body)
        assert denied.status_code == 403

        created = await client.post("/api/v1/employees", headers=admin_headers, json=body)
        assert created.status_code == 201
        assert created.json()["employee_code"] == "EMP300"

    async def test_manager_deactivates_employee(self, client: AsyncClient, employee, manager_headers):
        response = await client.put(
            f"/api/v1/employees/{employee.employee_id}/deactivate", headers=manager_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "inactive"

    async def test_missing_employee(self, client: AsyncClient, admin_headers):
        response = await client.get(f"/api/v1/employees/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_user_admin(self, client: AsyncClient, manager_user, admin_headers, manager_headers):
        listed = await client.get("/api/v1/users", headers=admin_headers)
        assert listed.status_code == 200
        assert listed.json()["total"] == 2

        assert (await client.get("/api/v1/users", headers=manager_headers)).status_code == 403

        toggled = await client.put(
            f"/api/v1/users/{manager_user.user_id}/toggle-status", headers=admin_headers
        )
        assert toggled.json()["is_active"] is False

        # A deactivated account's token stops working
        assert (await client.get("/api/v1/auth/me", headers=manager_headers)).status_code == 401

    async def test_null_break_duration_is_rejected(self, client: AsyncClient, employee, admin_headers):
        response = await client.put(
            f"/api/v1/employees/{employee.employee_id}", headers=admin_headers, json={"break_duration": None}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert [e["field"] for e in body["errors"]] == ["break_duration"]

    async def test_delete_removes_entries_and_login(
        self, client: AsyncClient, employee, employee_headers, admin_headers
    ):
        assert (await _create_timesheet(client, employee_headers)).status_code == 201

        deleted = await client.delete(f"/api/v1/employees/{employee.employee_id}", headers=admin_headers)
        assert deleted.status_code == 204

        timesheets = await client.get("/api/v1/timesheets", headers=admin_headers)
        assert timesheets.json()["total"] == 0

        assert (await client.get("/api/v1/auth/me", headers=employee_headers)).status_code == 401
        login = await client.post("/api/v1/auth/login", json={"username": "nimal", "password": "secret123"})
        assert login.status_code == 401
