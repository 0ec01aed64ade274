from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks."""

    ADMIN = "admin"
    HR_ADMIN = "hr-admin"
    DEVELOPER = "developer"
    TEAM_LEADER = "teamLeader"
    EMPLOYEE = "employee"

    @classmethod
    def parse(cls, value: str | None) -> "Role | None":
        """Case-insensitive lookup; returns None for unknown roles."""
        if not value:
            return None
        wanted = value.strip().lower()
        for role in cls:
            if role.value.lower() == wanted:
                return role
        return None


MANAGEMENT_ROLES = frozenset({Role.ADMIN, Role.HR_ADMIN, Role.DEVELOPER})


class EmployeeStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    DEACTIVATED = "De-activate"


class ShiftName(str, Enum):
    MORNING = "Morning"
    EVENING = "Evening"
    NIGHT = "Night"
    GENERAL = "General"
    OT_LIST = "OT list"


class PunchKind(str, Enum):
    """Kinds of attendance punches; one record per (email, date, kind)."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    OT_START = "ot_start"
    OT_STOP = "ot_stop"


class CheckInVerdict(str, Enum):
    ON_TIME = "ON_TIME"
    LATE = "LATE"
    INELIGIBLE = "INELIGIBLE"


class EarningStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"


class TransactionType(str, Enum):
    EXPENSE = "Expense"
    CREDIT = "Credit"
    EARNING = "Earning"
    IN = "In"
    OUT = "Out"
    ADJUSTMENT_PLUS = "Adjustment (+)"
    ADJUSTMENT_MINUS = "Adjustment (-)"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    REVIEWING = "Reviewing"
    IN_PROGRESS = "In-progress"
    READY_TO_QC = "Ready to QC"
    READY_TO_UPLOAD = "Ready to Upload"
    COMPLETED = "Completed"
    DELIVERED = "Delivered"
    HOLD = "Hold"
    CANCEL = "Cancel"


LOCKING_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCEL})


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DECLINED = "Declined"


class LeaveType(str, Enum):
    CASUAL = "casual"
    SICK = "sick"


class LoanType(str, Enum):
    BORROW = "borrow"
    RETURN = "return"
