from __future__ import annotations

import calendar
import logging
from collections import Counter, defaultdict
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, Optional, Sequence

from ..common.datetime_utils import month_name, normalize_month, now_local, parse_iso_date
from ..common.validators import require_amount, require_fields, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_TIMEZONE, HR_BALANCE, LOAN_BALANCE, MAIN_BALANCE
from ..core.enums import EarningStatus, TransactionType
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from .model import (
    ClientPayment,
    Earning,
    Expense,
    LedgerPosting,
    LedgerTransaction,
    MonthlyProfit,
    ProfitShare,
)
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

EXPENSE_FIELDS = (
    "user_name",
    "expense_date",
    "expense_name",
    "expense_category",
    "expense_amount",
    "expense_status",
    "expense_note",
)
EARNING_FIELDS = (
    "client_id",
    "month",
    "year",
    "usd_amount",
    "charge",
    "receivable",
    "rate",
    "converted_bdt",
    "status",
    "note",
)
TOP_CATEGORIES = 4


def _parse_status(value) -> EarningStatus:
    if isinstance(value, EarningStatus):
        return value
    try:
        return EarningStatus(str(value).strip().capitalize())
    except ValueError:
        raise ValidationError("status must be Paid or Unpaid")


def _parse_year(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("year must be a number")


def _as_date(value) -> date:
    return value if isinstance(value, date) else parse_iso_date(value)


def _money(value: float) -> float:
    return round(float(value), 2)


def adjustment_posting(old: Earning, new: Earning) -> LedgerPosting:
    """Posting that moves the books from ``old`` to ``new`` for one earning.

    Contribution to the main balance is the amount when Paid, else 0; unpaid
    and profit buckets follow the earning even when its (month, year) changes.
    """
    posting = LedgerPosting()

    posting.unpaid_delta(old.month, old.year, -old.unpaid_contribution)
    posting.unpaid_delta(new.month, new.year, new.unpaid_contribution)

    if (old.month, old.year) == (new.month, new.year):
        posting.bucket(new.month, new.year, earnings=new.converted_bdt - old.converted_bdt)
    else:
        posting.bucket(old.month, old.year, earnings=-old.converted_bdt)
        posting.bucket(new.month, new.year, earnings=new.converted_bdt)

    delta = new.paid_contribution - old.paid_contribution
    posting.balance(MAIN_BALANCE, delta)
    if delta > 0:
        posting.log(MAIN_BALANCE, TransactionType.ADJUSTMENT_PLUS, delta, f"Earning #{new.earning_id} adjusted", new.client_id)
    elif delta < 0:
        posting.log(MAIN_BALANCE, TransactionType.ADJUSTMENT_MINUS, -delta, f"Earning #{new.earning_id} adjusted", new.client_id)

    if new.status == EarningStatus.PAID and old.status != EarningStatus.PAID:
        posting.client_payment = ClientPayment(
            client_id=new.client_id,
            month=new.month,
            year=new.year,
            amount=new.converted_bdt,
            earning_id=new.earning_id,
        )
    return posting


def expense_edit_posting(old: Expense, new: Expense) -> LedgerPosting:
    """Posting that moves main balance and profit buckets from ``old`` to ``new``."""
    delta = new.expense_amount - old.expense_amount
    posting = LedgerPosting()
    if delta > 0:
        posting.require_main(delta)
    posting.balance(MAIN_BALANCE, -delta)
    if delta:
        posting.log(
            MAIN_BALANCE,
            TransactionType.ADJUSTMENT_MINUS if delta > 0 else TransactionType.ADJUSTMENT_PLUS,
            abs(delta),
            f"Expense #{old.expense_id} edited",
            new.expense_category,
        )
    old_key = (month_name(old.expense_date), old.expense_date.year)
    new_key = (month_name(new.expense_date), new.expense_date.year)
    if old_key == new_key:
        posting.bucket(*new_key, expense=delta)
    else:
        posting.bucket(*old_key, expense=-old.expense_amount)
        posting.bucket(*new_key, expense=new.expense_amount)
    return posting


class LedgerService:
    """Expenses, balance top-ups, earnings and profit sharing.

    Every financial event is turned into a single LedgerPosting so the balance
    rows, monthly buckets, unpaid buckets and transaction log move together.
    """

    def __init__(self, ledger: LedgerRepository, *, timezone: str = DEFAULT_TIMEZONE):
        self._ledger = ledger
        self._timezone = timezone

    # ------------------------------------------------------------------ balances

    def get_balances(self) -> Dict[str, float]:
        balances = {MAIN_BALANCE: 0.0, HR_BALANCE: 0.0, LOAN_BALANCE: 0.0}
        balances.update(self._ledger.get_balances())
        return balances

    def add_main_balance(self, *, amount, note: Optional[str] = None) -> float:
        amount = require_amount(amount)
        posting = (
            LedgerPosting()
            .balance(MAIN_BALANCE, amount)
            .log(MAIN_BALANCE, TransactionType.CREDIT, amount, note or "Main balance top-up")
        )
        self._ledger.apply(posting)
        logger.info("Main balance credited %.2f", amount)
        return amount

    def add_hr_balance(self, *, amount, note: Optional[str] = None) -> float:
        amount = require_amount(amount)
        posting = (
            LedgerPosting()
            .require_main(amount)
            .balance(MAIN_BALANCE, -amount)
            .balance(HR_BALANCE, amount)
            .log(MAIN_BALANCE, TransactionType.OUT, amount, note or "Transferred to HR balance")
            .log(HR_BALANCE, TransactionType.IN, amount, note or "Received from main balance")
        )
        self._ledger.apply(posting)
        logger.info("Moved %.2f from main to HR balance", amount)
        return amount

    # ------------------------------------------------------------------ expenses

    def add_expense(
        self,
        *,
        user_name: Optional[str],
        expense_date,
        expense_name: str,
        expense_category: Optional[str],
        expense_amount,
        expense_status: Optional[str] = None,
        expense_note: Optional[str] = None,
    ) -> int:
        require_fields(
            {"expenseName": expense_name, "expenseAmount": expense_amount, "expenseDate": expense_date},
            "expenseName",
            "expenseAmount",
            "expenseDate",
        )
        amount = require_amount(expense_amount, "expenseAmount")
        when = _as_date(expense_date)
        category = (expense_category or "").strip() or None

        posting = (
            LedgerPosting()
            .require_main(amount)
            .balance(MAIN_BALANCE, -amount)
            .log(MAIN_BALANCE, TransactionType.EXPENSE, amount, expense_note or expense_name, category)
            .bucket(month_name(when), when.year, expense=amount)
        )
        expense_id = self._ledger.create_expense(
            {
                "user_name": user_name,
                "expense_date": when,
                "expense_name": expense_name.strip(),
                "expense_category": category,
                "expense_amount": amount,
                "expense_status": expense_status,
                "expense_note": expense_note,
            },
            posting,
        )
        logger.info("Expense #%s %.2f (%s) posted", expense_id, amount, category)
        return expense_id

    def edit_expense(self, expense_id: int, fields: dict) -> Expense:
        changes = {k: v for k, v in fields.items() if k in EXPENSE_FIELDS}
        if "expense_amount" in changes:
            changes["expense_amount"] = require_amount(changes["expense_amount"], "expenseAmount")
        if "expense_date" in changes:
            changes["expense_date"] = _as_date(changes["expense_date"])

        old = self._ledger.update_expense(
            expense_id, changes, lambda row: expense_edit_posting(row, replace(row, **changes))
        )
        new = replace(old, **changes)
        logger.info("Expense #%s edited (delta %.2f)", expense_id, new.expense_amount - old.expense_amount)
        return new

    def list_expenses(self) -> dict:
        return {"expenses": self._ledger.list_expenses(), "categories": self._ledger.list_categories()}

    def expense_summary(self, *, now: datetime | None = None) -> dict:
        today = (now or now_local(self._timezone)).date()
        expenses = self._ledger.list_expenses()

        def total(items: Iterable[Expense]) -> float:
            return _money(sum(e.expense_amount for e in items))

        this_year = [e for e in expenses if e.expense_date.year == today.year]
        this_month = [e for e in this_year if e.expense_date.month == today.month]

        by_month: Dict[int, float] = defaultdict(float)
        for e in this_year:
            by_month[e.expense_date.month] += e.expense_amount

        by_amount: Dict[str, float] = defaultdict(float)
        for e in this_month:
            if e.expense_category:
                by_amount[e.expense_category] += e.expense_amount

        usage = Counter(e.expense_category for e in expenses if e.expense_category)
        return {
            "daily": total(e for e in expenses if e.expense_date == today),
            "monthly": total(this_month),
            "yearly": total(this_year),
            "chart": [{"month": calendar.month_abbr[m], "total": _money(by_month[m])} for m in range(1, 13)],
            "topCategories": [{"category": c, "count": n} for c, n in usage.most_common(TOP_CATEGORIES)],
            "topCategoriesThisMonth": [
                {"category": c, "total": _money(v)}
                for c, v in sorted(by_amount.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CATEGORIES]
            ],
        }

    # ------------------------------------------------------------------ earnings

    def _earning_fields(self, payload: dict) -> dict:
        fields = {k: v for k, v in payload.items() if k in EARNING_FIELDS}
        if "client_id" in fields:
            fields["client_id"] = require_non_empty(fields["client_id"], "clientId")
        if "month" in fields:
            fields["month"] = normalize_month(fields["month"])
        if "year" in fields:
            fields["year"] = _parse_year(fields["year"])
        for name in ("usd_amount", "charge", "receivable", "rate"):
            if name in fields:
                fields[name] = require_amount(fields[name] or 0, name, allow_zero=True)
        if "converted_bdt" in fields:
            fields["converted_bdt"] = require_amount(fields["converted_bdt"], "convertedBdt")
        if "status" in fields:
            fields["status"] = _parse_status(fields["status"])
        return fields

    def add_earning(
        self,
        *,
        client_id: str,
        month: str,
        year,
        usd_amount=0,
        charge=0,
        receivable=0,
        rate=0,
        converted_bdt,
        status,
        note: Optional[str] = None,
    ) -> int:
        require_fields(
            {"clientId": client_id, "month": month, "year": year, "convertedBdt": converted_bdt, "status": status},
            "clientId",
            "month",
            "year",
            "convertedBdt",
            "status",
        )
        fields = self._earning_fields(
            {
                "client_id": client_id,
                "month": month,
                "year": year,
                "usd_amount": usd_amount,
                "charge": charge,
                "receivable": receivable,
                "rate": rate,
                "converted_bdt": converted_bdt,
                "status": status,
                "note": note,
            }
        )
        m, y, bdt = fields["month"], fields["year"], fields["converted_bdt"]

        posting = LedgerPosting().bucket(m, y, earnings=bdt)
        if fields["status"] == EarningStatus.UNPAID:
            posting.unpaid_delta(m, y, bdt)
        else:
            posting.balance(MAIN_BALANCE, bdt)
            posting.log(MAIN_BALANCE, TransactionType.EARNING, bdt, note or f"Earning from {fields['client_id']}", fields["client_id"])
            posting.client_payment = ClientPayment(client_id=fields["client_id"], month=m, year=y, amount=bdt)

        earning_id = self._ledger.create_earning(fields, posting)
        logger.info("Earning #%s %.2f BDT (%s %s %s) posted", earning_id, bdt, fields["status"].value, m, y)
        return earning_id

    def change_earning_status(self, earning_id: int, status) -> Earning:
        target = _parse_status(status)
        old = self._ledger.update_earning(
            earning_id, {"status": target}, lambda row: adjustment_posting(row, replace(row, status=target))
        )
        if old.status != target:
            logger.info("Earning #%s status %s -> %s", earning_id, old.status.value, target.value)
        return replace(old, status=target)

    def update_earning(self, earning_id: int, fields: dict) -> Earning:
        changes = self._earning_fields(fields)
        if not changes:
            raise ValidationError("Nothing to update")
        old = self._ledger.update_earning(
            earning_id, changes, lambda row: adjustment_posting(row, replace(row, **changes))
        )
        logger.info("Earning #%s updated", earning_id)
        return replace(old, **changes)

    def list_earnings(
        self, *, month: Optional[str] = None, year=None, client_id: Optional[str] = None
    ) -> Sequence[Earning]:
        return self._ledger.list_earnings(
            month=normalize_month(month) if month else None,
            year=_parse_year(year) if year else None,
            client_id=client_id or None,
        )

    # ------------------------------------------------------------------ profit

    def get_monthly_profit(self, month: str, year) -> MonthlyProfit:
        bucket = self._ledger.get_monthly_profit(normalize_month(month), _parse_year(year))
        if not bucket:
            raise NotFoundError("Monthly profit not found")
        return bucket

    def list_monthly_profits(self, *, year=None) -> Sequence[MonthlyProfit]:
        return self._ledger.list_monthly_profits(year=_parse_year(year) if year else None)

    def share_profit(self, *, month: str, year, shares: Sequence[dict], note: Optional[str] = None) -> float:
        if not shares:
            raise ValidationError("shares are required")
        parsed = [
            ProfitShare(
                name=require_non_empty(s.get("name"), "name"),
                amount=require_amount(s.get("amount")),
                note=note,
            )
            for s in shares
        ]
        bucket = self.get_monthly_profit(month, year)
        total = sum(s.amount for s in parsed)
        if total > bucket.remaining:
            raise BusinessRuleError("Not enough remaining profit to share")

        self._ledger.apply_profit_shares(bucket.month, bucket.year, parsed)
        logger.info("Shared %.2f of %s %s profit among %d", total, bucket.month, bucket.year, len(parsed))
        return total

    def get_unpaid(self, month: str, year) -> float:
        return self._ledger.get_unpaid(normalize_month(month), _parse_year(year))

    def list_transactions(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[LedgerTransaction]:
        return self._ledger.list_transactions(limit=limit)
