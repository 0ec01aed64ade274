from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.hr_management.hr_management.core.enums import EarningStatus, TransactionType
from src.hr_management.hr_management.core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from src.hr_management.hr_management.ledger.model import Earning, Expense, LedgerPosting, MonthlyProfit
from src.hr_management.hr_management.ledger.service import LedgerService, adjustment_posting


class InMemoryLedger:
    """Applies postings the way the MySQL repository does, minus the row locks."""

    def __init__(self, main: float = 0.0):
        self.balances = {"main": main}
        self.buckets: dict[tuple[str, int], dict] = {}
        self.unpaid: dict[tuple[str, int], float] = {}
        self.transactions = []
        self.payments = []
        self.shares: dict[tuple[str, int], list] = {}
        self.expenses: dict[int, Expense] = {}
        self.earnings: dict[int, Earning] = {}
        self._id = 0

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def get_balances(self):
        return dict(self.balances)

    def apply(self, posting: LedgerPosting) -> None:
        main = self.balances.get("main", 0.0)
        if posting.main_floor is not None and main < posting.main_floor:
            raise BusinessRuleError("Insufficient balance")
        for name, delta in posting.balances.items():
            self.balances[name] = self.balances.get(name, 0.0) + delta
        for b in posting.buckets:
            key = (b.month, b.year)
            if key not in self.buckets:
                if main < b.amount:
                    continue
                self.buckets[key] = {"earnings": 0.0, "expense": 0.0, "profit": 0.0, "remaining": 0.0}
            row = self.buckets[key]
            row["earnings"] += b.earnings
            row["expense"] += b.expense
            row["profit"] += b.profit
            row["remaining"] += b.profit
        for key, delta in posting.unpaid.items():
            self.unpaid[key] = self.unpaid.get(key, 0.0) + delta
        self.transactions.extend(posting.entries)
        if posting.client_payment:
            self.payments.append(posting.client_payment)

    def create_expense(self, fields: dict, posting: LedgerPosting) -> int:
        self.apply(posting)
        expense_id = self._next_id()
        self.expenses[expense_id] = Expense(expense_id=expense_id, **fields)
        return expense_id

    def update_expense(self, expense_id: int, fields: dict, build_posting) -> Expense:
        old = self.expenses.get(int(expense_id))
        if old is None:
            raise NotFoundError("Expense not found")
        self.apply(build_posting(old))
        self.expenses[old.expense_id] = replace(old, **fields)
        return old

    def list_expenses(self):
        return list(self.expenses.values())

    def list_categories(self):
        return sorted({e.expense_category for e in self.expenses.values() if e.expense_category})

    def create_earning(self, fields: dict, posting: LedgerPosting) -> int:
        self.apply(posting)
        earning_id = self._next_id()
        self.earnings[earning_id] = Earning(earning_id=earning_id, **fields)
        return earning_id

    def update_earning(self, earning_id: int, fields: dict, build_posting) -> Earning:
        old = self.earnings.get(int(earning_id))
        if old is None:
            raise NotFoundError("Earning not found")
        self.apply(build_posting(old))
        self.earnings[old.earning_id] = replace(old, **fields)
        return old

    def list_earnings(self, *, month=None, year=None, client_id=None):
        return [
            e
            for e in self.earnings.values()
            if (month is None or e.month == month)
            and (year is None or e.year == year)
            and (client_id is None or e.client_id == client_id)
        ]

    def get_monthly_profit(self, month: str, year: int) -> Optional[MonthlyProfit]:
        row = self.buckets.get((month, year))
        if row is None:
            return None
        return MonthlyProfit(month=month, year=year, shared=tuple(self.shares.get((month, year), [])), **row)

    def list_monthly_profits(self, *, year=None):
        return [self.get_monthly_profit(m, y) for (m, y) in self.buckets if year is None or y == year]

    def apply_profit_shares(self, month: str, year: int, shares) -> None:
        total = sum(s.amount for s in shares)
        row = self.buckets[(month, year)]
        if row["remaining"] < total:
            raise BusinessRuleError("Not enough remaining profit to share")
        row["remaining"] -= total
        self.shares.setdefault((month, year), []).extend(shares)

    def get_unpaid(self, month: str, year: int) -> float:
        return self.unpaid.get((month, year), 0.0)

    def list_transactions(self, *, limit: int):
        return list(reversed(self.transactions))[:limit]


def _unpaid_from_earnings(ledger: InMemoryLedger) -> dict:
    totals: dict[tuple[str, int], float] = {}
    for e in ledger.earnings.values():
        if e.status == EarningStatus.UNPAID:
            totals[(e.month, e.year)] = totals.get((e.month, e.year), 0.0) + e.converted_bdt
    return totals


def _assert_unpaid_matches(ledger: InMemoryLedger) -> None:
    expected = _unpaid_from_earnings(ledger)
    for key in set(expected) | set(ledger.unpaid):
        assert ledger.unpaid.get(key, 0.0) == pytest.approx(expected.get(key, 0.0))


def _earning(svc: LedgerService, *, month="august", year=2025, bdt=5000, status="Unpaid", client="C-1") -> int:
    return svc.add_earning(client_id=client, month=month, year=year, converted_bdt=bdt, status=status)


def test_expense_reduces_main_balance_and_logs_expense():
    ledger = InMemoryLedger(main=10_000)
    svc = LedgerService(ledger)

    svc.add_expense(
        user_name="hr",
        expense_date="2025-08-04",
        expense_name="Internet bill",
        expense_category="Utilities",
        expense_amount=1500,
    )

    assert ledger.balances["main"] == pytest.approx(8500)
    assert ledger.transactions[-1].type == TransactionType.EXPENSE
    assert ledger.transactions[-1].amount == pytest.approx(1500)
    assert ledger.buckets[("august", 2025)]["expense"] == pytest.approx(1500)
    assert ledger.buckets[("august", 2025)]["profit"] == pytest.approx(-1500)


def test_expense_above_main_balance_is_rejected_without_side_effects():
    ledger = InMemoryLedger(main=100)
    svc = LedgerService(ledger)

    with pytest.raises(BusinessRuleError, match="Insufficient balance"):
        svc.add_expense(
            user_name="hr",
            expense_date="2025-08-04",
            expense_name="Laptop",
            expense_category="Equipment",
            expense_amount=500,
        )

    assert ledger.balances["main"] == 100
    assert ledger.expenses == {}
    assert ledger.transactions == []


def test_expense_requires_name_amount_and_date():
    svc = LedgerService(InMemoryLedger(main=100))
    with pytest.raises(ValidationError):
        svc.add_expense(
            user_name="hr",
            expense_date=None,
            expense_name="",
            expense_category=None,
            expense_amount=10,
        )


def test_edit_expense_moves_bucket_and_adjusts_main():
    ledger = InMemoryLedger(main=1000)
    svc = LedgerService(ledger)
    expense_id = svc.add_expense(
        user_name="hr",
        expense_date="2025-08-04",
        expense_name="Snacks",
        expense_category="Food",
        expense_amount=200,
    )

    svc.edit_expense(expense_id, {"expense_amount": 300, "expense_date": "2025-09-01"})

    assert ledger.balances["main"] == pytest.approx(700)
    assert ledger.buckets[("august", 2025)]["expense"] == pytest.approx(0)
    assert ledger.buckets[("september", 2025)]["expense"] == pytest.approx(300)
    assert ledger.transactions[-1].type == TransactionType.ADJUSTMENT_MINUS
    assert ledger.transactions[-1].amount == pytest.approx(100)


def test_edit_missing_expense_is_not_found():
    with pytest.raises(NotFoundError):
        LedgerService(InMemoryLedger()).edit_expense(99, {"expense_amount": 1})


def test_unpaid_earning_then_paid_moves_money_into_main():
    ledger = InMemoryLedger(main=10_000)
    svc = LedgerService(ledger)

    earning_id = _earning(svc, bdt=5000, status="Unpaid")
    assert ledger.get_unpaid("august", 2025) == pytest.approx(5000)
    assert ledger.balances["main"] == 10_000
    assert ledger.transactions == []

    svc.change_earning_status(earning_id, "Paid")

    assert ledger.get_unpaid("august", 2025) == pytest.approx(0)
    assert ledger.balances["main"] == pytest.approx(15_000)
    adjustments = [t for t in ledger.transactions if t.type == TransactionType.ADJUSTMENT_PLUS]
    assert len(adjustments) == 1
    assert adjustments[0].amount == pytest.approx(5000)
    assert ledger.payments[-1].earning_id == earning_id
    assert ledger.buckets[("august", 2025)]["earnings"] == pytest.approx(5000)


def test_same_status_change_is_a_no_op():
    ledger = InMemoryLedger()
    svc = LedgerService(ledger)
    earning_id = _earning(svc, status="Paid")
    before = list(ledger.transactions)

    svc.change_earning_status(earning_id, "paid")

    assert ledger.transactions == before
    assert ledger.balances["main"] == pytest.approx(5000)


def test_paid_earning_credits_main_and_records_client_payment():
    ledger = InMemoryLedger()
    svc = LedgerService(ledger)

    _earning(svc, bdt=1200, status="Paid", client="C-9")

    assert ledger.balances["main"] == pytest.approx(1200)
    assert ledger.transactions[-1].type == TransactionType.EARNING
    assert ledger.payments[-1].client_id == "C-9"
    assert ledger.unpaid == {}


def test_unpaid_buckets_track_earnings_through_edits_and_moves():
    ledger = InMemoryLedger(main=10_000)
    svc = LedgerService(ledger)

    a = _earning(svc, month="july", bdt=1000)
    b = _earning(svc, month="july", bdt=2500)
    c = _earning(svc, month="august", bdt=700, status="Paid")
    _assert_unpaid_matches(ledger)

    svc.update_earning(a, {"converted_bdt": 1500})
    _assert_unpaid_matches(ledger)

    svc.update_earning(b, {"month": "August"})
    _assert_unpaid_matches(ledger)
    assert ledger.buckets[("july", 2025)]["earnings"] == pytest.approx(1500)
    assert ledger.buckets[("august", 2025)]["earnings"] == pytest.approx(3200)

    svc.change_earning_status(c, "Unpaid")
    _assert_unpaid_matches(ledger)
    assert ledger.balances["main"] == pytest.approx(10_000)
    assert ledger.transactions[-1].type == TransactionType.ADJUSTMENT_MINUS

    svc.update_earning(b, {"status": "Paid", "converted_bdt": 3000, "year": 2026})
    _assert_unpaid_matches(ledger)
    assert ledger.balances["main"] == pytest.approx(13_000)
    assert ledger.buckets[("august", 2025)]["earnings"] == pytest.approx(700)


def test_adjustment_posting_with_no_change_is_empty():
    e = Earning(
        earning_id=1, client_id="C", month="may", year=2025, usd_amount=0, charge=0,
        receivable=0, rate=0, converted_bdt=10, status=EarningStatus.UNPAID,
    )
    posting = adjustment_posting(e, e)
    assert posting.unpaid == {}
    assert posting.balances == {}
    assert posting.entries == []
    assert posting.buckets == []


def test_hr_transfer_needs_main_funds():
    ledger = InMemoryLedger(main=300)
    svc = LedgerService(ledger)

    svc.add_hr_balance(amount=200)
    assert ledger.balances == {"main": pytest.approx(100), "hr": pytest.approx(200)}
    assert [t.type for t in ledger.transactions] == [TransactionType.OUT, TransactionType.IN]

    with pytest.raises(BusinessRuleError):
        svc.add_hr_balance(amount=150)


def test_balances_default_to_zero():
    assert LedgerService(InMemoryLedger()).get_balances() == {"main": 0.0, "hr": 0.0, "loan": 0.0}


def test_share_profit_draws_from_remaining():
    ledger = InMemoryLedger(main=10_000)
    svc = LedgerService(ledger)
    _earning(svc, bdt=1000, status="Paid")

    total = svc.share_profit(month="August", year="2025", shares=[{"name": "A", "amount": 300}, {"name": "B", "amount": 200}])

    assert total == pytest.approx(500)
    profit = svc.get_monthly_profit("august", 2025)
    assert profit.remaining == pytest.approx(500)
    assert [s.name for s in profit.shared] == ["A", "B"]

    with pytest.raises(BusinessRuleError):
        svc.share_profit(month="august", year=2025, shares=[{"name": "C", "amount": 600}])


def test_monthly_profit_missing_is_not_found():
    with pytest.raises(NotFoundError):
        LedgerService(InMemoryLedger()).get_monthly_profit("march", 2024)


def test_expense_summary_totals():
    ledger = InMemoryLedger(main=10_000)
    svc = LedgerService(ledger)
    for when, cat, amount in [
        ("2025-08-04", "Food", 100),
        ("2025-08-01", "Food", 50),
        ("2025-08-02", "Rent", 400),
        ("2025-02-10", "Rent", 400),
        ("2024-12-31", "Misc", 25),
    ]:
        svc.add_expense(user_name="hr", expense_date=when, expense_name="x", expense_category=cat, expense_amount=amount)

    summary = svc.expense_summary(now=datetime(2025, 8, 4, 12, 0))

    assert summary["daily"] == pytest.approx(100)
    assert summary["monthly"] == pytest.approx(550)
    assert summary["yearly"] == pytest.approx(950)
    assert summary["chart"][7] == {"month": "Aug", "total": pytest.approx(550)}
    assert summary["topCategoriesThisMonth"][0]["category"] == "Rent"
    assert {c["category"] for c in summary["topCategories"]} == {"Food", "Rent", "Misc"}


def test_invalid_earning_status_is_rejected():
    with pytest.raises(ValidationError):
        _earning(LedgerService(InMemoryLedger()), status="Maybe")


def test_list_expenses_includes_categories():
    ledger = InMemoryLedger(main=100)
    svc = LedgerService(ledger)
    svc.add_expense(user_name=None, expense_date=date(2025, 1, 2), expense_name="Pens", expense_category="Office", expense_amount=5)
    result = svc.list_expenses()
    assert result["categories"] == ["Office"]
    assert len(result["expenses"]) == 1


@pytest.mark.parametrize("amount", ["nan", "inf", "-inf", float("nan")])
def test_non_finite_amounts_are_rejected(amount):
    ledger = InMemoryLedger()
    svc = LedgerService(ledger)

    with pytest.raises(ValidationError, match="finite"):
        svc.add_expense(
            user_name="hr",
            expense_date="2025-08-04",
            expense_name="Mystery",
            expense_category=None,
            expense_amount=amount,
        )
    with pytest.raises(ValidationError, match="finite"):
        svc.add_main_balance(amount=amount)
    with pytest.raises(ValidationError, match="finite"):
        _earning(svc, bdt=amount)

    assert ledger.balances == {"main": 0.0}
    assert ledger.transactions == []


def test_missing_bucket_opens_only_when_main_covers_it():
    ledger = InMemoryLedger(main=0)
    svc = LedgerService(ledger)

    _earning(svc, bdt=5000, status="Unpaid")

    assert ledger.buckets == {}
    assert ledger.get_unpaid("august", 2025) == pytest.approx(5000)

    svc.add_main_balance(amount=6000)
    _earning(svc, bdt=5000, status="Unpaid", month="september")

    assert ledger.buckets[("september", 2025)]["earnings"] == pytest.approx(5000)


def test_existing_bucket_keeps_accumulating_after_main_drops():
    ledger = InMemoryLedger(main=1000)
    svc = LedgerService(ledger)
    svc.add_expense(user_name="hr", expense_date="2025-08-02", expense_name="Rent", expense_category="Rent", expense_amount=1000)

    _earning(svc, bdt=4000, status="Unpaid")

    assert ledger.balances["main"] == pytest.approx(0)
    assert ledger.buckets[("august", 2025)]["earnings"] == pytest.approx(4000)
    assert ledger.buckets[("august", 2025)]["profit"] == pytest.approx(3000)


class ConcurrentPaidLedger(InMemoryLedger):
    """Another request flips the earning to Paid between the caller's intent and the row lock."""

    def update_earning(self, earning_id, fields, build_posting):
        if not getattr(self, "_raced", False):
            self._raced = True
            super().update_earning(
                earning_id,
                {"status": EarningStatus.PAID},
                lambda row: adjustment_posting(row, replace(row, status=EarningStatus.PAID)),
            )
        return super().update_earning(earning_id, fields, build_posting)


def test_status_flip_is_computed_from_the_locked_row():
    ledger = ConcurrentPaidLedger(main=10_000)
    svc = LedgerService(ledger)
    earning_id = _earning(svc, bdt=5000, status="Unpaid")

    svc.change_earning_status(earning_id, "Paid")

    assert ledger.balances["main"] == pytest.approx(15_000)
    assert len([t for t in ledger.transactions if t.type == TransactionType.ADJUSTMENT_PLUS]) == 1
    assert len(ledger.payments) == 1
    _assert_unpaid_matches(ledger)


def test_updating_missing_earning_is_not_found():
    svc = LedgerService(InMemoryLedger())
    with pytest.raises(NotFoundError):
        svc.change_earning_status(7, "Paid")
    with pytest.raises(NotFoundError):
        svc.update_earning(7, {"converted_bdt": 10})
