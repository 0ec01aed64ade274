from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import Guards, self_match
from ..common.http import json_body, ok
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import MANAGEMENT_ROLES
from ..core.exceptions import ValidationError
from ..container import Container

EXPENSE_KEYS = {
    "userName": "user_name",
    "expenseDate": "expense_date",
    "expenseName": "expense_name",
    "expenseCategory": "expense_category",
    "expenseAmount": "expense_amount",
    "expenseStatus": "expense_status",
    "expenseNote": "expense_note",
}
EARNING_KEYS = {
    "clientId": "client_id",
    "month": "month",
    "year": "year",
    "usdAmount": "usd_amount",
    "charge": "charge",
    "receivable": "receivable",
    "rate": "rate",
    "convertedBdt": "converted_bdt",
    "status": "status",
    "note": "note",
}


def _translate(data: dict, keys: dict) -> dict:
    return {keys[k]: v for k, v in data.items() if k in keys}


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.ledger_service
    management = guards.roles_required(*MANAGEMENT_ROLES)

    @app.route("/balances", methods=["GET"], endpoint="get_balances")
    @management
    def get_balances():
        self_match(request.args.get("userEmail"))
        return ok(data=service.get_balances())

    @app.route("/balances/main", methods=["POST"], endpoint="add_main_balance")
    @management
    def add_main_balance():
        data = json_body()
        amount = service.add_main_balance(amount=data.get("amount"), note=data.get("note"))
        return ok(f"Main balance credited with {amount:.2f}")

    @app.route("/balances/hr", methods=["POST"], endpoint="add_hr_balance")
    @management
    def add_hr_balance():
        data = json_body()
        amount = service.add_hr_balance(amount=data.get("amount"), note=data.get("note"))
        return ok(f"{amount:.2f} moved to HR balance")

    @app.route("/expenses", methods=["POST"], endpoint="add_expense")
    @management
    def add_expense():
        fields = _translate(json_body(), EXPENSE_KEYS)
        fields.setdefault("user_name", g.user_email)
        for name in ("expense_date", "expense_name", "expense_category", "expense_amount"):
            fields.setdefault(name, None)
        expense_id = service.add_expense(**fields)
        return ok("Expense added", status=201, expense_id=expense_id)

    @app.route("/expenses/<int:expense_id>", methods=["PUT"], endpoint="edit_expense")
    @management
    def edit_expense(expense_id: int):
        expense = service.edit_expense(expense_id, _translate(json_body(), EXPENSE_KEYS))
        return ok("Expense updated", data=expense)

    @app.route("/expenses", methods=["GET"], endpoint="list_expenses")
    @management
    def list_expenses():
        self_match(request.args.get("userEmail"))
        return ok(**service.list_expenses())

    @app.route("/expenses/summary", methods=["GET"], endpoint="expense_summary")
    @management
    def expense_summary():
        self_match(request.args.get("userEmail"))
        return ok(data=service.expense_summary())

    @app.route("/earnings", methods=["POST"], endpoint="add_earning")
    @management
    def add_earning():
        fields = _translate(json_body(), EARNING_KEYS)
        for name in ("client_id", "month", "year", "converted_bdt", "status"):
            fields.setdefault(name, None)
        earning_id = service.add_earning(**fields)
        return ok("Earning added", status=201, earning_id=earning_id)

    @app.route("/earnings/<int:earning_id>/status", methods=["PATCH"], endpoint="change_earning_status")
    @management
    def change_earning_status(earning_id: int):
        earning = service.change_earning_status(earning_id, json_body().get("status"))
        return ok(f"Earning marked {earning.status.value}", data=earning)

    @app.route("/earnings/<int:earning_id>", methods=["PUT"], endpoint="update_earning")
    @management
    def update_earning(earning_id: int):
        earning = service.update_earning(earning_id, _translate(json_body(), EARNING_KEYS))
        return ok("Earning updated", data=earning)

    @app.route("/earnings", methods=["GET"], endpoint="list_earnings")
    @management
    def list_earnings():
        self_match(request.args.get("userEmail"))
        rows = service.list_earnings(
            month=request.args.get("month"),
            year=request.args.get("year"),
            client_id=request.args.get("clientId"),
        )
        return ok(data=rows)

    @app.route("/monthly-profit", methods=["GET"], endpoint="get_monthly_profit")
    @management
    def get_monthly_profit():
        self_match(request.args.get("userEmail"))
        return ok(data=service.get_monthly_profit(request.args.get("month"), request.args.get("year")))

    @app.route("/monthly-profits", methods=["GET"], endpoint="list_monthly_profits")
    @management
    def list_monthly_profits():
        self_match(request.args.get("userEmail"))
        return ok(data=service.list_monthly_profits(year=request.args.get("year")))

    @app.route("/monthly-profit/share", methods=["POST"], endpoint="share_profit")
    @management
    def share_profit():
        data = json_body()
        shares = data.get("shares")
        if not isinstance(shares, list):
            raise ValidationError("shares must be a list")
        total = service.share_profit(month=data.get("month"), year=data.get("year"), shares=shares, note=data.get("note"))
        return ok(f"Shared {total:.2f}")

    @app.route("/unpaid", methods=["GET"], endpoint="get_unpaid")
    @management
    def get_unpaid():
        self_match(request.args.get("userEmail"))
        total = service.get_unpaid(request.args.get("month"), request.args.get("year"))
        return ok(totalConvertedBdt=total)

    @app.route("/transactions", methods=["GET"], endpoint="list_transactions")
    @management
    def list_transactions():
        self_match(request.args.get("userEmail"))
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int)
        return ok(data=service.list_transactions(limit=limit))
