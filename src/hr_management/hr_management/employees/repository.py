from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_eid(self, eid: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        email: str,
        eid: str,
        salary: float,
        role: str,
        branch: Optional[str],
        activation_token: str,
    ) -> int:
        raise NotImplementedError

    def activate(self, email: str, *, firebase_uid: Optional[str]) -> bool:
        raise NotImplementedError

    def update_profile(self, email: str, fields: dict) -> bool:
        raise NotImplementedError

    def set_status(self, email: str, status: EmployeeStatus) -> bool:
        raise NotImplementedError

    def set_salary_pin_hash(self, email: str, pin_hash: str) -> bool:
        raise NotImplementedError

    def list(self, *, status: Optional[EmployeeStatus] = None) -> Sequence[Employee]:
        raise NotImplementedError

    def list_emails(self) -> Sequence[str]:
        raise NotImplementedError
