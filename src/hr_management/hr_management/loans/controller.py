from __future__ import annotations

from flask import Flask, request

from ..common.auth import Guards
from ..common.http import json_body, ok
from ..core.enums import MANAGEMENT_ROLES
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.token_service, container.user_service)
    service = container.loan_service
    management = guards.roles_required(*MANAGEMENT_ROLES)

    @app.route("/loans/new-person", methods=["POST"], endpoint="add_loan_person")
    @management
    def add_loan_person():
        data = json_body()
        service.add_person(
            name=data.get("name"),
            phone=data.get("phone"),
            address=data.get("address"),
            description=data.get("description"),
        )
        return ok("Person added successfully.", status=201)

    @app.route("/loans/get-person", methods=["GET"], endpoint="search_loan_person")
    @management
    def search_loan_person():
        return ok(data=service.search_person(request.args.get("query")))

    @app.route("/loans/new-loan", methods=["POST"], endpoint="add_loan")
    @management
    def add_loan():
        data = json_body()
        loan_id = service.add_loan(
            name=data.get("name"),
            phone=data.get("phone"),
            address=data.get("address"),
            amount=data.get("amount"),
            type=data.get("type"),
            date=data.get("date"),
        )
        return ok("Loan record added successfully.", status=201, loan_id=loan_id)

    @app.route("/loans/get-loans", methods=["GET"], endpoint="list_loans")
    @management
    def list_loans():
        data = service.list_loans(
            search=request.args.get("search", ""),
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 10),
            on_date=request.args.get("date"),
        )
        return ok("Loans fetched successfully", data=data)

    @app.route("/loans/update-loan/<int:loan_id>", methods=["PUT"], endpoint="update_loan")
    @management
    def update_loan(loan_id: int):
        data = json_body()
        service.update_loan(
            loan_id,
            name=data.get("name"),
            phone=data.get("phone"),
            address=data.get("address"),
            amount=data.get("amount"),
            type=data.get("type"),
            date=data.get("date"),
        )
        return ok("Loan updated successfully")

    @app.route("/loans/delete-loan/<int:loan_id>", methods=["DELETE"], endpoint="delete_loan")
    @management
    def delete_loan(loan_id: int):
        service.delete_loan(loan_id)
        return ok("Loan deleted successfully")

    @app.route("/loans/get-loan-balance", methods=["GET"], endpoint="get_loan_balance")
    @management
    def get_loan_balance():
        return ok(data=service.get_loan_balance())
