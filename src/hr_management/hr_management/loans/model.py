from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LoanType


@dataclass(frozen=True)
class LoanPerson:
    person_id: int
    name: str
    phone: str
    address: str = ""
    description: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Loan:
    loan_id: int
    name: str
    phone: str
    address: str
    amount: float
    type: LoanType
    loan_date: datetime
    created_at: Optional[datetime] = None

    @property
    def signed_amount(self) -> float:
        """Effect on the loan balance: borrowing adds, a return subtracts."""
        return self.amount if self.type == LoanType.BORROW else -self.amount


@dataclass(frozen=True)
class LoanStats:
    borrowed: float = 0.0
    returned: float = 0.0

    @property
    def net(self) -> float:
        return self.borrowed - self.returned


@dataclass(frozen=True)
class LoanBalance:
    total: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
