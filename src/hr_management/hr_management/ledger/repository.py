from __future__ import annotations

from typing import Callable, Dict, Optional, Protocol, Sequence

from .model import Earning, Expense, LedgerPosting, LedgerTransaction, MonthlyProfit, ProfitShare


class LedgerRepository(Protocol):
    """Balances, monthly buckets, expenses, earnings and the transaction log.

    Every method taking a ``posting`` writes the row and the posting in one
    transaction, and raises BusinessRuleError when ``posting.main_floor`` is
    not covered by the main balance. A missing (month, year) profit bucket is
    only opened when the main balance, read before the posting, covers the
    bucket delta; otherwise that delta is dropped.

    The update methods lock the row, hand it to ``build_posting`` and apply the
    result with the row change, raising NotFoundError for an unknown id. They
    return the row as it was before the update.
    """

    def get_balances(self) -> Dict[str, float]:
        raise NotImplementedError

    def apply(self, posting: LedgerPosting) -> None:
        raise NotImplementedError

    def create_expense(self, fields: dict, posting: LedgerPosting) -> int:
        raise NotImplementedError

    def update_expense(
        self, expense_id: int, fields: dict, build_posting: Callable[[Expense], LedgerPosting]
    ) -> Expense:
        raise NotImplementedError

    def list_expenses(self) -> Sequence[Expense]:
        raise NotImplementedError

    def list_categories(self) -> Sequence[str]:
        raise NotImplementedError

    def create_earning(self, fields: dict, posting: LedgerPosting) -> int:
        raise NotImplementedError

    def update_earning(
        self, earning_id: int, fields: dict, build_posting: Callable[[Earning], LedgerPosting]
    ) -> Earning:
        raise NotImplementedError

    def list_earnings(
        self, *, month: Optional[str] = None, year: Optional[int] = None, client_id: Optional[str] = None
    ) -> Sequence[Earning]:
        raise NotImplementedError

    def get_monthly_profit(self, month: str, year: int) -> Optional[MonthlyProfit]:
        raise NotImplementedError

    def list_monthly_profits(self, *, year: Optional[int] = None) -> Sequence[MonthlyProfit]:
        raise NotImplementedError

    def apply_profit_shares(self, month: str, year: int, shares: Sequence[ProfitShare]) -> None:
        """Decrement ``remaining`` by the shares' total and record them; BusinessRuleError if not covered."""
        raise NotImplementedError

    def get_unpaid(self, month: str, year: int) -> float:
        raise NotImplementedError

    def list_transactions(self, *, limit: int) -> Sequence[LedgerTransaction]:
        raise NotImplementedError
