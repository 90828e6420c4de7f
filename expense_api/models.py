# expense_api/models.py
# lightweight model classes (not DB-bound ORM)
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    PERSONAL = "Personal"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    UPI = "UPI"
    NET_BANKING = "Net Banking"
    OTHER = "Other"


def utcnow():
    return datetime.now(timezone.utc)


def to_storage(value):
    """Aware or naive datetime -> naive-UTC text that sorts chronologically."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    # %Y is not zero-padded below year 1000 on every platform
    return f"{value.year:04d}" + value.strftime(STORAGE_FORMAT[2:])


def from_storage(value):
    if not value:
        return None
    return datetime.strptime(value, STORAGE_FORMAT).replace(tzinfo=timezone.utc)


def format_timestamp(value):
    """ISO-8601 UTC with milliseconds and a trailing Z."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


class User:
    def __init__(self, uid, email, display_name=None, password_hash=None, email_verified=False,
                 is_active=True, token_version=0, tokens_valid_after=None, last_login=None,
                 created_at=None, updated_at=None):
        self.uid = uid
        self.email = email
        self.display_name = display_name
        self.password_hash = password_hash
        self.email_verified = email_verified
        self.is_active = is_active
        self.token_version = token_version
        self.tokens_valid_after = tokens_valid_after
        self.last_login = last_login
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row):
        return cls(
            uid=row["uid"],
            email=row["email"],
            display_name=row["display_name"],
            password_hash=row["password_hash"],
            email_verified=bool(row["email_verified"]),
            is_active=bool(row["is_active"]),
            token_version=row["token_version"],
            tokens_valid_after=from_storage(row["tokens_valid_after"]),
            last_login=from_storage(row["last_login"]),
            created_at=from_storage(row["created_at"]),
            updated_at=from_storage(row["updated_at"]),
        )


class Expense:
    def __init__(self, id, user_id, title, amount, category, date, notes="",
                 payment_method=PaymentMethod.OTHER, created_at=None, updated_at=None):
        self.id = id
        self.user_id = user_id
        self.title = title
        self.amount = amount
        self.category = category
        self.date = date
        self.notes = notes
        self.payment_method = payment_method
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            amount=float(row["amount"]),
            category=Category(row["category"]),
            date=from_storage(row["date"]),
            notes=row["notes"] or "",
            payment_method=PaymentMethod(row["payment_method"]),
            created_at=from_storage(row["created_at"]),
            updated_at=from_storage(row["updated_at"]),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "amount": self.amount,
            "category": self.category.value,
            "date": format_timestamp(self.date),
            "notes": self.notes,
            "paymentMethod": self.payment_method.value,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    def to_summary(self):
        """Compact shape used in the monthly report listing."""
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "category": self.category.value,
            "date": format_timestamp(self.date),
            "paymentMethod": self.payment_method.value,
        }


UNSET: Any = object()

# patch attribute -> column
PATCH_COLUMNS = {
    "title": "title",
    "amount": "amount",
    "category": "category",
    "date": "date",
    "notes": "notes",
    "payment_method": "payment_method",
}


@dataclass
class ExpensePatch:
    """Partial update; a field takes part only when it is not UNSET."""

    title: Any = UNSET
    amount: Any = UNSET
    category: Any = UNSET
    date: Any = UNSET
    notes: Any = UNSET
    payment_method: Any = UNSET

    def is_set(self, name):
        return getattr(self, name) is not UNSET

    def changes(self):
        """Set fields as {column: storage value}."""
        values = {}
        for name, column in PATCH_COLUMNS.items():
            if not self.is_set(name):
                continue
            value = getattr(self, name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, datetime):
                value = to_storage(value)
            values[column] = value
        return values


@dataclass
class ExpenseQuery:
    category: Any = None
    start: Any = None
    end: Any = None
    sort_by: str = "date"
    order: str = "desc"
    limit: Any = None
    page: int = 1


@dataclass
class ExpensePage:
    expenses: list = field(default_factory=list)
    total: int = 0
    total_amount: float = 0.0
    limit: Any = None
    page: int = 1

    def pagination(self):
        if not self.limit:
            return None
        return {
            "currentPage": self.page,
            "totalPages": -(-self.total // self.limit),
            "totalExpenses": self.total,
            "expensesPerPage": self.limit,
        }
