from __future__ import annotations

from typing import Optional

import pytest

from src.hr_management.hr_management.attendance.strategies.base import CheckInDecision
from src.hr_management.hr_management.container import Container
from src.hr_management.hr_management.core.enums import CheckInVerdict, Role
from src.hr_management.hr_management.core.exceptions import BusinessRuleError
from src.hr_management.hr_management.integrations import controller as integrations_controller
from src.hr_management.hr_management.main import create_app
from src.hr_management.hr_management.users.model import User
from src.hr_management.hr_management.users.service import TokenService, UserService


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_email = {u.email: u for u in users}

    def get_by_email(self, email: str) -> Optional[User]:
        return self._by_email.get(email)


class StubAttendance:
    def __init__(self):
        self.calls = []

    def check_in(self, email, *, check_in_time_ms=None):
        self.calls.append((email, check_in_time_ms))
        if email == "boom@example.com":
            raise RuntimeError("db exploded")
        return CheckInDecision(verdict=CheckInVerdict.LATE, late_by="0h 30m")


class StubOrders:
    def change_status(self, order_id, status):
        raise BusinessRuleError("Order is locked. Extend the deadline or restore it first.")


ADMIN = User(user_id=1, email="admin@example.com", username="admin", role=Role.ADMIN)
STAFF = User(user_id=2, email="staff@example.com", username="staff", role=Role.EMPLOYEE)
BOOM = User(user_id=3, email="boom@example.com", username="boom", role=Role.EMPLOYEE)


@pytest.fixture()
def api(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    tokens = TokenService("api-test-secret")
    attendance = StubAttendance()
    container = Container(
        token_service=tokens,
        user_service=UserService(InMemoryUsers(ADMIN, STAFF, BOOM)),
        employee_service=None,
        shift_service=None,
        attendance_service=attendance,
        ledger_service=None,
        client_service=None,
        order_service=StubOrders(),
        leave_service=None,
        notification_service=None,
        notice_service=None,
        loan_service=None,
    )
    app = create_app(container=container)
    return app, app.test_client(), tokens, attendance


def _auth(tokens: TokenService, email: str) -> dict:
    return {"Authorization": f"Bearer {tokens.issue(email)}"}


def test_jwt_issue_requires_email(api):
    _, client, tokens, _ = api

    missing = client.post("/jwt", json={})
    assert missing.status_code == 400
    assert missing.get_json() == {"success": False, "message": "Email is required"}

    issued = client.post("/jwt", json={"email": "Admin@Example.com"})
    assert issued.status_code == 200
    assert tokens.decode(issued.get_json()["token"])["email"] == "admin@example.com"


def test_missing_header_is_401_and_bad_token_is_403(api):
    _, client, _, _ = api

    assert client.get("/users/role?userEmail=a@example.com").status_code == 401
    empty = client.get("/users/role", headers={"Authorization": "Bearer"})
    assert empty.status_code == 401
    assert empty.get_json()["message"] == "No authorization"

    forged = TokenService("someone-else").issue("admin@example.com")
    bad = client.get("/users/role", headers={"Authorization": f"Bearer {forged}"})
    assert bad.status_code == 403


def test_user_email_must_match_token(api):
    _, client, tokens, _ = api
    headers = _auth(tokens, "staff@example.com")

    mismatch = client.get("/users/role?userEmail=admin@example.com", headers=headers)
    assert mismatch.status_code == 401
    assert mismatch.get_json()["message"] == "Forbidden Access"

    own = client.get("/users/role?userEmail=Staff@Example.com", headers=headers)
    assert own.status_code == 200
    assert own.get_json() == {"success": True, "role": "employee"}


def test_role_guard_rejects_plain_employee(api):
    _, client, tokens, _ = api
    response = client.put("/orders/1/status", json={"orderStatus": "Hold"}, headers=_auth(tokens, "staff@example.com"))
    assert response.status_code == 403


def test_business_rule_rejection_is_200_with_success_false(api):
    _, client, tokens, _ = api
    response = client.put("/orders/1/status", json={"orderStatus": "Hold"}, headers=_auth(tokens, "admin@example.com"))
    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is False
    assert "locked" in body["message"]


def test_check_in_reports_lateness_and_punches_only_for_self(api):
    _, client, tokens, attendance = api
    headers = _auth(tokens, "staff@example.com")

    late = client.post("/attendance/check-in", json={"email": "staff@example.com", "checkInTime": "1754280000000"}, headers=headers)
    assert late.status_code == 200
    assert late.get_json()["lateCheckIn"] == "0h 30m"
    assert attendance.calls == [("staff@example.com", 1754280000000)]

    other = client.post("/attendance/check-in", json={"email": "admin@example.com"}, headers=headers)
    assert other.status_code == 403

    bad_ms = client.post("/attendance/check-in", json={"checkInTime": "soon"}, headers=headers)
    assert bad_ms.status_code == 400


def test_unexpected_errors_are_500_without_details(api):
    _, client, tokens, _ = api
    response = client.post("/attendance/check-in", json={}, headers=_auth(tokens, "boom@example.com"))
    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Internal server error"}


def test_unknown_route_is_json_404(api):
    _, client, _, _ = api
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_iprn_route_needs_token_and_reports_missing_otp(api, monkeypatch):
    app, client, tokens, _ = api
    headers = _auth(tokens, "admin@example.com")

    assert client.get("/integrations/iprn-otp?phone=8801", headers=headers).status_code == 400

    app.config["IPRN_TOKEN"] = "iprn-token"
    monkeypatch.setattr(integrations_controller, "fetch_otp_from_iprn", lambda phone, token: None)
    assert client.get("/integrations/iprn-otp?phone=8801", headers=headers).status_code == 404

    monkeypatch.setattr(integrations_controller, "fetch_otp_from_iprn", lambda phone, token: "12345")
    found = client.get("/integrations/iprn-otp?phone=8801", headers=headers)
    assert found.get_json() == {"success": True, "otp": "12345"}
