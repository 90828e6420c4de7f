# expense_api/expenses.py

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .responses import success
from .validators import (
    validate_expense_create,
    validate_expense_id,
    validate_expense_query,
    validate_expense_update,
)

bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


def _store():
    return current_app.extensions["expense_store"]


@bp.before_request
@jwt_required()
def require_login():
    """Every expense route needs a valid bearer token."""


@bp.route("", methods=["GET"])
def list_expenses():
    query = validate_expense_query(request.args)
    page = _store().list(get_jwt_identity(), query)

    return success("Expenses retrieved successfully", {
        "expenses": [e.to_dict() for e in page.expenses],
        "pagination": page.pagination(),
        "summary": {
            "totalExpenses": page.total,
            "totalAmount": page.total_amount,
        },
    })


@bp.route("", methods=["POST"])
def create_expense():
    fields = validate_expense_create(request.get_json(silent=True))
    expense = _store().create(get_jwt_identity(), **fields)
    return success("Expense created successfully", expense.to_dict(), 201)


@bp.route("/<expense_id>", methods=["GET"])
def get_expense(expense_id):
    expense = _store().get(get_jwt_identity(), validate_expense_id(expense_id))
    return success("Expense retrieved successfully", expense.to_dict())


@bp.route("/<expense_id>", methods=["PUT"])
def update_expense(expense_id):
    expense_id = validate_expense_id(expense_id)
    patch = validate_expense_update(request.get_json(silent=True))
    expense = _store().update(get_jwt_identity(), expense_id, patch)
    return success("Expense updated successfully", expense.to_dict())


@bp.route("/<expense_id>", methods=["DELETE"])
def delete_expense(expense_id):
    expense = _store().delete(get_jwt_identity(), validate_expense_id(expense_id))
    return success("Expense deleted successfully", {"deletedExpense": expense.to_dict()})
