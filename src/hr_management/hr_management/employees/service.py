from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from markupsafe import escape
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.mailer import Mailer
from ..common.validators import normalize_email, require_amount, require_fields
from ..core.constants import ACTIVATION_TOKEN_LIFETIME
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from ..users.service import TokenService
from .model import PROFILE_FIELDS, Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_PIN = re.compile(r"^\d{4,6}$")

ACTIVATION_SUBJECT = "Complete Your Web Briks Account Setup"
ACTIVATION_HTML = """
<div style="font-family:sans-serif;">
    <h2>Welcome to Web Briks!</h2>
    <p>You've been added as a new {role}. Click below to complete your account setup:</p>
    <a href="{link}" target="_blank"
        style="display:inline-block;padding:10px 18px;background:#009999;color:#fff;text-decoration:none;border-radius:6px;margin-top:12px;">
        Complete My Account
    </a>
    <p style="margin-top:20px;color:#7F00FF;">This link will expire in 7 days.</p>
</div>
"""


def username_from_email(email: str) -> str:
    if "@" not in email:
        return ""
    return re.sub(r"[^a-zA-Z0-9]", "", email.split("@")[0]).lower()


class EmployeeService:
    """Use cases: onboarding, activation, profile and status management.

    Employees are never hard-deleted; HR moves them to ``De-activate`` instead.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        users: UserRepository,
        tokens: TokenService,
        mailer: Mailer,
        *,
        frontend_url: str = "",
    ):
        self._employees = employees
        self._users = users
        self._tokens = tokens
        self._mailer = mailer
        self._frontend_url = frontend_url.rstrip("/")

    def add_employee(
        self,
        *,
        email: str,
        eid: str,
        salary,
        role: str,
        branch: Optional[str] = None,
    ) -> dict:
        require_fields({"email": email, "eid": eid, "salary": salary, "role": role}, "email", "eid", "salary", "role")
        email = normalize_email(email)
        eid = str(eid).strip()
        parsed_role = Role.parse(role)
        if parsed_role is None:
            raise ValidationError(f"Unknown role: {role}")
        salary = require_amount(salary, "salary")

        if self._employees.get_by_email(email):
            raise ConflictError("Employee already exists with this email.")
        if self._employees.get_by_eid(eid):
            raise ConflictError(f"Employee with EID {eid} already exists.")

        token = self._tokens.issue(email, lifetime=ACTIVATION_TOKEN_LIFETIME)
        link = f"{self._frontend_url}/create-account?token={token}"

        user_id = None
        if not self._users.get_by_email(email):
            user_id = self._users.create_user(
                email=email,
                username=username_from_email(email),
                role=parsed_role,
                branch=branch,
            )

        employee_id = self._employees.create(
            email=email,
            eid=eid,
            salary=salary,
            role=parsed_role.value,
            branch=branch,
            activation_token=token,
        )

        # Sent synchronously: a mail failure surfaces as a 500 after the rows exist.
        self._mailer.send(
            to=email,
            subject=ACTIVATION_SUBJECT,
            html=ACTIVATION_HTML.format(role=escape(parsed_role.value), link=escape(link)),
        )
        logger.info("Employee %s (%s) added, activation mail sent", email, eid)
        return {"employee_id": employee_id, "user_id": user_id}

    def activate_user(self, *, email: str, firebase_uid: Optional[str]) -> None:
        email = normalize_email(email)
        user_found = self._users.activate(email)
        self._employees.activate(email, firebase_uid=firebase_uid)
        if not user_found:
            raise NotFoundError("User not found")

    def complete_profile(self, *, email: str, profile: dict) -> None:
        email = normalize_email(email)
        if not self._employees.get_by_email(email):
            raise NotFoundError("Employee not found.")
        fields = {k: v for k, v in profile.items() if k in PROFILE_FIELDS}
        if not fields:
            raise ValidationError("No profile fields supplied")
        self._employees.update_profile(email, fields)

    def set_status(self, *, email: str, status: str) -> EmployeeStatus:
        email = normalize_email(email)
        try:
            new_status = EmployeeStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown employee status: {status}")
        if not self._employees.get_by_email(email):
            raise NotFoundError("Employee not found.")
        self._employees.set_status(email, new_status)
        return new_status

    def set_salary_pin(self, *, email: str, pin: str) -> None:
        if not pin or not _PIN.match(str(pin)):
            raise ValidationError("PIN must be 4 to 6 digits")
        employee = self.get_employee(email)
        self._employees.set_salary_pin_hash(employee.email, generate_password_hash(str(pin)))

    def verify_salary_pin(self, *, email: str, pin: str) -> bool:
        employee = self.get_employee(email)
        if not employee.salary_pin_hash:
            raise ValidationError("Salary PIN is not set")
        return check_password_hash(employee.salary_pin_hash, str(pin or ""))

    def get_employee(self, email: str) -> Employee:
        employee = self._employees.get_by_email(normalize_email(email))
        if not employee:
            raise NotFoundError("Employee not found.")
        return employee

    def list_employees(self, *, status: Optional[str] = None) -> Sequence[Employee]:
        parsed = None
        if status:
            try:
                parsed = EmployeeStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown employee status: {status}")
        return self._employees.list(status=parsed)
