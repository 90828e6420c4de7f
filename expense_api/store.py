# expense_api/store.py
import logging
import uuid

from .errors import NotFoundError
from .models import Expense, ExpensePage, PaymentMethod, to_storage, utcnow
from .validators import SORT_FIELDS

logger = logging.getLogger("expense-api")

NOT_FOUND_MESSAGE = "Expense not found or unauthorized"


def _scope(user_id, category=None, start=None, end=None):
    """WHERE clause restricted to one owner plus the optional filters."""
    clauses = ["user_id = ?"]
    args = [user_id]
    if category is not None:
        clauses.append("category = ?")
        args.append(category.value)
    if start is not None:
        clauses.append("date >= ?")
        args.append(to_storage(start))
    if end is not None:
        clauses.append("date <= ?")
        args.append(to_storage(end))
    return " AND ".join(clauses), args


class ExpenseStore:
    """Owner-scoped CRUD over the expenses table."""

    def __init__(self, database):
        self.db = database

    def list(self, user_id, query):
        where, args = _scope(user_id, query.category, query.start, query.end)
        direction = "ASC" if query.order == "asc" else "DESC"
        sql = (
            f"SELECT * FROM expenses WHERE {where} "
            f"ORDER BY {SORT_FIELDS[query.sort_by]} {direction}, id {direction}"
        )
        page_args = list(args)
        if query.limit:
            sql += " LIMIT ? OFFSET ?"
            page_args += [query.limit, (query.page - 1) * query.limit]

        rows = self.db.query(sql, page_args)
        totals = self.db.query(
            f"SELECT COUNT(*) AS count, COALESCE(SUM(amount), 0) AS total FROM expenses WHERE {where}",
            args,
            one=True,
        )
        return ExpensePage(
            expenses=[Expense.from_row(r) for r in rows],
            total=totals["count"],
            total_amount=round(float(totals["total"]), 2),
            limit=query.limit,
            page=query.page,
        )

    def find(self, user_id, category=None, start=None, end=None):
        """Matching expenses, newest first."""
        where, args = _scope(user_id, category, start, end)
        rows = self.db.query(f"SELECT * FROM expenses WHERE {where} ORDER BY date DESC, id DESC", args)
        return [Expense.from_row(r) for r in rows]

    def get(self, user_id, expense_id):
        row = self.db.query(
            "SELECT * FROM expenses WHERE id = ? AND user_id = ?", (expense_id, user_id), one=True
        )
        if row is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return Expense.from_row(row)

    def create(self, user_id, title, amount, category, date=None, notes=None, payment_method=None):
        now = utcnow()
        expense = Expense(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            amount=amount,
            category=category,
            date=date or now,
            notes=notes or "",
            payment_method=payment_method or PaymentMethod.OTHER,
            created_at=now,
            updated_at=now,
        )
        self.db.execute(
            "INSERT INTO expenses (id, user_id, title, amount, category, date, notes, payment_method, "
            "created_at, updated_at) VALUES (?,?,?,?,?,?,?,?,?,?)",
            (
                expense.id, expense.user_id, expense.title, expense.amount, expense.category.value,
                to_storage(expense.date), expense.notes, expense.payment_method.value,
                to_storage(now), to_storage(now),
            ),
        )
        logger.info(f"Expense {expense.id} created for user {user_id}")
        return self.get(user_id, expense.id)

    def update(self, user_id, expense_id, patch):
        self.get(user_id, expense_id)

        changes = patch.changes()
        changes["updated_at"] = to_storage(utcnow())
        assignments = ", ".join(f"{column} = ?" for column in changes)
        self.db.execute(
            f"UPDATE expenses SET {assignments} WHERE id = ? AND user_id = ?",
            (*changes.values(), expense_id, user_id),
        )
        logger.info(f"Expense {expense_id} updated for user {user_id}: {sorted(changes)}")
        return self.get(user_id, expense_id)

    def delete(self, user_id, expense_id):
        expense = self.get(user_id, expense_id)
        deleted = self.db.execute("DELETE FROM expenses WHERE id = ? AND user_id = ?", (expense_id, user_id))
        if not deleted:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        logger.info(f"Expense {expense_id} deleted for user {user_id}")
        return expense
