from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Tuple

from .model import Loan, LoanBalance, LoanPerson, LoanStats


class LoanRepository(Protocol):
    def person_exists(self, *, name: str, phone: str) -> bool:
        raise NotImplementedError

    def create_person(self, *, name: str, phone: str, address: str, description: str) -> int:
        raise NotImplementedError

    def search_persons(self, query: str, *, limit: int = 10) -> Sequence[LoanPerson]:
        raise NotImplementedError

    def create_loan(self, fields: dict, *, balance_delta: float) -> int:
        """Insert the loan and move the loan balance in one transaction."""
        raise NotImplementedError

    def get_loan(self, loan_id: int) -> Optional[Loan]:
        raise NotImplementedError

    def update_loan(self, loan_id: int, fields: dict, *, balance_delta: float) -> None:
        raise NotImplementedError

    def delete_loan(self, loan_id: int, *, balance_delta: float) -> None:
        raise NotImplementedError

    def list_loans(
        self, *, search: Optional[str], on_date: Optional[date], offset: int, limit: int
    ) -> Tuple[Sequence[Loan], int]:
        """One page of loans (newest first) and the total count matching the filter."""
        raise NotImplementedError

    def loan_stats(self, *, search: Optional[str] = None, on_date: Optional[date] = None) -> LoanStats:
        raise NotImplementedError

    def get_loan_balance(self) -> Optional[LoanBalance]:
        raise NotImplementedError
