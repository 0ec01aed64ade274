from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_amount, require_fields, require_non_empty
from ..core.enums import LoanType
from ..core.exceptions import NotFoundError, ValidationError
from .model import Loan, LoanBalance, LoanPerson
from .repository import LoanRepository

logger = logging.getLogger(__name__)

PERSON_SEARCH_LIMIT = 10


def _parse_type(value) -> LoanType:
    try:
        return LoanType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("type must be borrow or return")


def _parse_when(value) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("date must be an ISO date or datetime")


class LoanService:
    """Personal loan book: people, borrow/return entries and the running loan balance."""

    def __init__(self, loans: LoanRepository):
        self._loans = loans

    def add_person(self, *, name: str, phone: str, address: Optional[str] = None, description: Optional[str] = None) -> int:
        if not (name or "").strip() or not (phone or "").strip():
            raise ValidationError("Missing required fields: name and phone are required.")
        name, phone = name.strip(), phone.strip()
        if self._loans.person_exists(name=name, phone=phone):
            raise ValidationError("A user with the same name or phone already exists.")
        return self._loans.create_person(
            name=name,
            phone=phone,
            address=(address or "").strip(),
            description=(description or "").strip(),
        )

    def search_person(self, query: str) -> Sequence[LoanPerson]:
        query = require_non_empty(query, "query")
        people = self._loans.search_persons(query, limit=PERSON_SEARCH_LIMIT)
        if not people:
            raise NotFoundError("No matching person found.")
        return people

    def add_loan(self, *, name: str, phone: str, address: Optional[str] = None, amount, type, date) -> int:
        require_fields(
            {"name": name, "phone": phone, "amount": amount, "type": type, "date": date},
            "name",
            "phone",
            "amount",
            "type",
            "date",
        )
        fields = {
            "name": name,
            "phone": phone,
            "address": address or "",
            "amount": require_amount(amount),
            "type": _parse_type(type),
            "loan_date": _parse_when(date),
        }
        delta = fields["amount"] if fields["type"] == LoanType.BORROW else -fields["amount"]
        loan_id = self._loans.create_loan(fields, balance_delta=delta)
        logger.info("Loan #%s %s %.2f for %s", loan_id, fields["type"].value, fields["amount"], name)
        return loan_id

    def _require(self, loan_id: int) -> Loan:
        loan = self._loans.get_loan(loan_id)
        if not loan:
            raise NotFoundError("Transaction not found")
        return loan

    def update_loan(self, loan_id: int, *, name=None, phone=None, address=None, amount=None, type=None, date=None) -> Loan:
        old = self._require(loan_id)
        fields: dict = {"address": address or "", "loan_date": _parse_when(date) if date else datetime.now()}
        if name is not None:
            fields["name"] = name
        if phone is not None:
            fields["phone"] = phone
        if amount is not None:
            fields["amount"] = require_amount(amount)
        if type is not None:
            fields["type"] = _parse_type(type)

        new = replace(old, **fields)
        delta = new.signed_amount - old.signed_amount
        self._loans.update_loan(loan_id, fields, balance_delta=delta)
        logger.info("Loan #%s updated (balance change %.2f)", loan_id, delta)
        return new

    def delete_loan(self, loan_id: int) -> None:
        loan = self._require(loan_id)
        self._loans.delete_loan(loan_id, balance_delta=-loan.signed_amount)
        logger.info("Loan #%s deleted", loan_id)

    def list_loans(self, *, search: str = "", page=1, limit=10, on_date=None) -> dict:
        try:
            current_page = max(int(page or 1), 1)
            per_page = max(int(limit or 10), 1)
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be numbers")
        day: Optional[date] = parse_iso_date(on_date) if on_date else None
        search = (search or "").strip() or None

        items, total = self._loans.list_loans(
            search=search, on_date=day, offset=(current_page - 1) * per_page, limit=per_page
        )
        filtered = self._loans.loan_stats(search=search, on_date=day)
        overall = self._loans.loan_stats()
        return {
            "loans": items,
            "filteredStats": {
                "totalBorrowed": filtered.borrowed,
                "totalReturned": filtered.returned,
                "netBalance": filtered.net,
            },
            "overallStats": {
                "overallBorrowed": overall.borrowed,
                "overallReturned": overall.returned,
                "overallNetBalance": overall.net,
            },
            "pagination": {
                "total": total,
                "page": current_page,
                "limit": per_page,
                "totalPages": math.ceil(total / per_page),
            },
        }

    def get_loan_balance(self) -> LoanBalance:
        balance = self._loans.get_loan_balance()
        if not balance:
            raise NotFoundError("No loan balance record found")
        return balance
