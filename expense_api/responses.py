# expense_api/responses.py
from flask import jsonify


def success(message, data=None, status=200):
    """Uniform success envelope."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def failure(message, status, error=None, errors=None):
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if errors is not None:
        body["errors"] = errors
    return jsonify(body), status
