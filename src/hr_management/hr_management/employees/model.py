from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EmployeeStatus

PROFILE_FIELDS = (
    "full_name",
    "phone",
    "designation",
    "address",
    "photo_url",
    "dob",
    "gender",
    "blood_group",
    "emergency_contact",
)


@dataclass(frozen=True)
class Employee:
    employee_id: int
    email: str
    eid: str
    salary: float
    role: str
    branch: Optional[str]
    status: EmployeeStatus
    full_name: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    address: Optional[str] = None
    photo_url: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    emergency_contact: Optional[str] = None
    firebase_uid: Optional[str] = None
    salary_pin_hash: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        data = asdict(self)
        data.pop("salary_pin_hash", None)
        data["status"] = self.status.value
        data["has_salary_pin"] = bool(self.salary_pin_hash)
        return data
