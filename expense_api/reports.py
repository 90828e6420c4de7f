# expense_api/reports.py
import logging

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .responses import success
from .validators import validate_category_params, validate_date_range, validate_monthly_params

logger = logging.getLogger("expense-api")

bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _engine():
    return current_app.extensions["report_engine"]


@bp.before_request
@jwt_required()
def require_login():
    """Reports are always scoped to the caller."""


@bp.route("/monthly", methods=["GET"])
def monthly_report():
    month, year = validate_monthly_params(request.args)
    report = _engine().monthly_report(get_jwt_identity(), month, year)
    return success("Monthly report generated successfully", report)


@bp.route("/category", methods=["GET"])
def category_report():
    category, start, end = validate_category_params(request.args)
    user_id = get_jwt_identity()
    logger.info(f"Category report request - User: {user_id}, Category: {category.value}")

    report = _engine().category_report(user_id, category, start, end)
    return success(f"Category report for {category.value} generated successfully", report)


@bp.route("/stats", methods=["GET"])
def overall_stats():
    start, end = validate_date_range(request.args)
    report = _engine().overall_stats(get_jwt_identity(), start, end)
    return success("Overall statistics generated successfully", report)
