from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from ..core.enums import EarningStatus, TransactionType


@dataclass(frozen=True)
class Expense:
    expense_id: int
    user_name: Optional[str]
    expense_date: date
    expense_name: str
    expense_category: Optional[str]
    expense_amount: float
    expense_status: Optional[str] = None
    expense_note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Earning:
    earning_id: int
    client_id: str
    month: str
    year: int
    usd_amount: float
    charge: float
    receivable: float
    rate: float
    converted_bdt: float
    status: EarningStatus
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def paid_contribution(self) -> float:
        """What this earning puts into the main balance."""
        return self.converted_bdt if self.status == EarningStatus.PAID else 0.0

    @property
    def unpaid_contribution(self) -> float:
        return self.converted_bdt if self.status == EarningStatus.UNPAID else 0.0


@dataclass(frozen=True)
class ProfitShare:
    name: str
    amount: float
    note: Optional[str] = None
    shared_at: Optional[datetime] = None


@dataclass(frozen=True)
class MonthlyProfit:
    month: str
    year: int
    earnings: float = 0.0
    expense: float = 0.0
    profit: float = 0.0
    remaining: float = 0.0
    shared: Tuple[ProfitShare, ...] = ()


@dataclass(frozen=True)
class LedgerTransaction:
    transaction_id: int
    account: str
    type: TransactionType
    amount: float
    note: Optional[str] = None
    reference: Optional[str] = None
    txn_date: Optional[datetime] = None


@dataclass(frozen=True)
class BucketDelta:
    month: str
    year: int
    earnings: float = 0.0
    expense: float = 0.0

    @property
    def profit(self) -> float:
        return self.earnings - self.expense

    @property
    def amount(self) -> float:
        return abs(self.earnings) + abs(self.expense)


@dataclass(frozen=True)
class LedgerEntry:
    account: str
    type: TransactionType
    amount: float
    note: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class ClientPayment:
    client_id: str
    month: str
    year: int
    amount: float
    earning_id: Optional[int] = None


@dataclass
class LedgerPosting:
    """Everything one financial event changes, applied by the repository in one transaction.

    ``main_floor`` is the amount the main balance must hold before the posting
    is applied; the repository re-checks it under a row lock.
    """

    balances: Dict[str, float] = field(default_factory=dict)
    buckets: List[BucketDelta] = field(default_factory=list)
    unpaid: Dict[Tuple[str, int], float] = field(default_factory=dict)
    entries: List[LedgerEntry] = field(default_factory=list)
    client_payment: Optional[ClientPayment] = None
    main_floor: Optional[float] = None

    def balance(self, name: str, delta: float) -> "LedgerPosting":
        if delta:
            self.balances[name] = self.balances.get(name, 0.0) + delta
        return self

    def bucket(self, month: str, year: int, *, earnings: float = 0.0, expense: float = 0.0) -> "LedgerPosting":
        if earnings or expense:
            self.buckets.append(BucketDelta(month=month, year=int(year), earnings=earnings, expense=expense))
        return self

    def unpaid_delta(self, month: str, year: int, delta: float) -> "LedgerPosting":
        if delta:
            key = (month, int(year))
            total = self.unpaid.get(key, 0.0) + delta
            if total:
                self.unpaid[key] = total
            else:
                self.unpaid.pop(key, None)
        return self

    def log(
        self,
        account: str,
        txn_type: TransactionType,
        amount: float,
        note: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> "LedgerPosting":
        self.entries.append(LedgerEntry(account=account, type=txn_type, amount=amount, note=note, reference=reference))
        return self

    def require_main(self, amount: float) -> "LedgerPosting":
        self.main_floor = max(self.main_floor or 0.0, amount)
        return self
