# expense_api/validators.py
"""Request parsing. Every function returns typed values or raises ValidationError."""

import math
import re
from datetime import datetime, time, timezone

from .errors import ValidationError, field_error
from .models import Category, ExpensePatch, ExpenseQuery, PaymentMethod

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
EXPENSE_ID_RE = re.compile(r"^[0-9a-f]{32}$")
DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

TITLE_MAX = 200
NOTES_MAX = 500
DISPLAY_NAME_MAX = 100
AMOUNT_MAX = 1e12

# accepted range for stored and queried timestamps (UTC year)
MIN_YEAR = 1900
MAX_YEAR = 2200

# query value -> column
SORT_FIELDS = {
    "date": "date",
    "amount": "amount",
    "title": "title",
    "category": "category",
    "paymentMethod": "payment_method",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def _raise_if(errors):
    if errors:
        raise ValidationError(errors)


def require_json_object(body):
    if not isinstance(body, dict):
        raise ValidationError([field_error("body", "Request body must be a JSON object")])
    return body


def parse_timestamp(value, end_of_day=False):
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Naive values are taken as UTC. A bare YYYY-MM-DD means the start of that
    day, or its last instant when `end_of_day` is set. The UTC year must lie
    in MIN_YEAR..MAX_YEAR.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if DATE_ONLY_RE.match(text):
            day = datetime.strptime(text, "%Y-%m-%d").date()
            parsed = datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
        else:
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"not a date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError as exc:
            raise ValueError(f"date out of range: {value!r}") from exc

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise ValueError(f"year out of range: {value!r}")
    return parsed


def _parse_amount(value):
    if isinstance(value, bool):
        raise ValueError("boolean amount")
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str) and value.strip():
        amount = float(value.strip())
    else:
        raise ValueError(f"not a number: {value!r}")
    if not math.isfinite(amount) or amount <= 0:
        raise ValueError(f"not a positive amount: {value!r}")
    if amount > AMOUNT_MAX:
        raise OverflowError(f"amount too large: {value!r}")
    return amount


def _parse_positive_int(value):
    number = int(str(value).strip())
    if number < 1:
        raise ValueError(f"not positive: {value!r}")
    return number


# ---------------- Auth ----------------

def validate_register(body):
    body = require_json_object(body)
    errors = []

    email = body.get("email")
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        errors.append(field_error("email", "Please provide a valid email address", email))

    password = body.get("password")
    if not isinstance(password, str) or len(password) < 6:
        errors.append(field_error("password", "Password must be at least 6 characters long"))
    elif not PASSWORD_RE.match(password):
        errors.append(field_error(
            "password",
            "Password must contain at least one uppercase letter, one lowercase letter, and one number",
        ))

    display_name = body.get("displayName")
    if display_name is not None:
        if not isinstance(display_name, str):
            errors.append(field_error("displayName", "Display name must be a string", display_name))
        elif len(display_name.strip()) > DISPLAY_NAME_MAX:
            errors.append(field_error(
                "displayName", f"Display name cannot exceed {DISPLAY_NAME_MAX} characters", display_name
            ))
        else:
            display_name = display_name.strip() or None

    _raise_if(errors)
    return email.strip().lower(), password, display_name


def validate_login(body):
    body = require_json_object(body)
    errors = []

    email = body.get("email")
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        errors.append(field_error("email", "Please provide a valid email address", email))

    password = body.get("password")
    if not isinstance(password, str) or not password:
        errors.append(field_error("password", "Password is required"))

    _raise_if(errors)
    return email.strip().lower(), password


# ---------------- Expenses ----------------

def _check_title(value, errors, required):
    if not isinstance(value, str) or not value.strip():
        message = "Expense title is required" if required else "Title cannot be empty"
        errors.append(field_error("title", message, value))
        return None
    title = value.strip()
    if len(title) > TITLE_MAX:
        errors.append(field_error("title", f"Title cannot exceed {TITLE_MAX} characters", value))
        return None
    return title


def _check_amount(value, errors):
    if value is None or value == "":
        errors.append(field_error("amount", "Amount is required", value))
        return None
    try:
        return _parse_amount(value)
    except OverflowError:
        errors.append(field_error("amount", f"Amount cannot exceed {AMOUNT_MAX:,.0f}", value))
        return None
    except (TypeError, ValueError):
        errors.append(field_error("amount", "Amount must be a positive number greater than 0", value))
        return None


def _check_category(value, errors):
    if value is None or value == "":
        errors.append(field_error("category", "Category is required", value))
        return None
    try:
        return Category(value)
    except ValueError:
        errors.append(field_error("category", "Invalid category", value))
        return None


def _check_date(value, errors):
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError, OverflowError):
        errors.append(field_error(
            "date", f"Date must be a valid ISO 8601 date between {MIN_YEAR} and {MAX_YEAR}", value
        ))
        return None


def _check_notes(value, errors):
    if value is None:
        return ""
    if not isinstance(value, str):
        errors.append(field_error("notes", "Notes must be a string", value))
        return None
    notes = value.strip()
    if len(notes) > NOTES_MAX:
        errors.append(field_error("notes", f"Notes cannot exceed {NOTES_MAX} characters", value))
        return None
    return notes


def _check_payment_method(value, errors):
    try:
        return PaymentMethod(value)
    except ValueError:
        errors.append(field_error("paymentMethod", "Invalid payment method", value))
        return None


def validate_expense_create(body):
    body = require_json_object(body)
    errors = []

    fields = {
        "title": _check_title(body.get("title"), errors, required=True),
        "amount": _check_amount(body.get("amount"), errors),
        "category": _check_category(body.get("category"), errors),
        "date": None,
        "notes": _check_notes(body.get("notes"), errors),
        "payment_method": None,
    }
    if body.get("date") not in (None, ""):
        fields["date"] = _check_date(body["date"], errors)
    if body.get("paymentMethod") not in (None, ""):
        fields["payment_method"] = _check_payment_method(body["paymentMethod"], errors)

    _raise_if(errors)
    return fields


def validate_expense_update(body):
    """Only allow-listed keys become part of the patch; anything else is ignored."""
    body = require_json_object(body)
    errors = []
    patch = ExpensePatch()

    if "title" in body:
        patch.title = _check_title(body["title"], errors, required=False)
    if "amount" in body:
        patch.amount = _check_amount(body["amount"], errors)
    if "category" in body:
        patch.category = _check_category(body["category"], errors)
    if "date" in body:
        patch.date = _check_date(body["date"], errors)
    if "notes" in body:
        patch.notes = _check_notes(body["notes"], errors)
    if "paymentMethod" in body:
        patch.payment_method = _check_payment_method(body["paymentMethod"], errors)

    _raise_if(errors)
    return patch


def validate_expense_id(value):
    if not isinstance(value, str) or not EXPENSE_ID_RE.match(value):
        raise ValidationError([field_error("id", "Invalid expense ID", value)])
    return value


def validate_date_range(args, errors=None):
    own_errors = errors is None
    errors = [] if own_errors else errors
    start = end = None

    raw_start = args.get("startDate")
    if raw_start:
        try:
            start = parse_timestamp(raw_start)
        except (TypeError, ValueError, OverflowError):
            errors.append(field_error("startDate", "startDate must be a valid ISO 8601 date", raw_start))

    raw_end = args.get("endDate")
    if raw_end:
        try:
            end = parse_timestamp(raw_end, end_of_day=True)
        except (TypeError, ValueError, OverflowError):
            errors.append(field_error("endDate", "endDate must be a valid ISO 8601 date", raw_end))

    if start and end and end < start:
        errors.append(field_error("endDate", "endDate cannot be earlier than startDate", raw_end))

    if own_errors:
        _raise_if(errors)
    return start, end


def validate_expense_query(args):
    errors = []
    query = ExpenseQuery()

    raw_category = args.get("category")
    if raw_category:
        query.category = _check_category(raw_category, errors)

    query.start, query.end = validate_date_range(args, errors)

    sort_by = args.get("sortBy") or "date"
    if sort_by not in SORT_FIELDS:
        errors.append(field_error("sortBy", f"sortBy must be one of: {', '.join(SORT_FIELDS)}", sort_by))
    query.sort_by = sort_by

    order = (args.get("order") or "desc").lower()
    if order not in ("asc", "desc"):
        errors.append(field_error("order", "order must be 'asc' or 'desc'", args.get("order")))
    query.order = order

    raw_limit = args.get("limit")
    if raw_limit not in (None, ""):
        try:
            query.limit = _parse_positive_int(raw_limit)
        except ValueError:
            errors.append(field_error("limit", "limit must be a positive integer", raw_limit))

    raw_page = args.get("page")
    if raw_page not in (None, ""):
        try:
            query.page = _parse_positive_int(raw_page)
        except ValueError:
            errors.append(field_error("page", "page must be a positive integer", raw_page))

    _raise_if(errors)
    return query


# ---------------- Reports ----------------

def _check_bounded_int(args, name, low, high, message, errors):
    raw = args.get(name)
    if raw in (None, ""):
        errors.append(field_error(name, f"{name.capitalize()} is required", raw))
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        errors.append(field_error(name, message, raw))
        return None
    if not low <= value <= high:
        errors.append(field_error(name, message, raw))
        return None
    return value


def validate_monthly_params(args):
    errors = []
    month = _check_bounded_int(args, "month", 1, 12, "Month must be a number between 1 and 12", errors)
    year = _check_bounded_int(args, "year", 2000, 2100, "Year must be a valid year between 2000 and 2100", errors)
    _raise_if(errors)
    return month, year


def validate_category_params(args):
    errors = []
    category = _check_category(args.get("category"), errors)
    start, end = validate_date_range(args, errors)
    _raise_if(errors)
    return category, start, end
