# expense_api/analytics.py
"""
Report engine.

Each report is two steps: fetch the owner's matching rows from the store,
then fold them in pandas (group by key, sum/count/mean/min/max). Nothing
here writes to the database.

Money values are rounded to 2 decimals on output only; percentages are
computed from the unrounded sums. When the total is zero every percentage
is 0.
"""

import calendar
import logging
from datetime import datetime, time, timezone

import pandas as pd

logger = logging.getLogger("expense-api")

FRAME_COLUMNS = ["id", "amount", "category", "payment_method", "month"]


def round2(value):
    return round(float(value), 2)


def percentage(part, total):
    return round2(part / total * 100) if total else 0


def month_window(month, year):
    """First and last instant of a calendar month, plus its number of days."""
    days = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime.combine(datetime(year, month, days).date(), time.max, tzinfo=timezone.utc)
    return start, end, days


def to_frame(expenses):
    frame = pd.DataFrame(
        [
            {
                "id": e.id,
                "amount": float(e.amount),
                "category": e.category.value,
                "payment_method": e.payment_method.value,
                "month": month_label(e.date),
            }
            for e in expenses
        ],
        columns=FRAME_COLUMNS,
    )
    frame["amount"] = frame["amount"].astype(float)
    return frame


def month_label(value):
    """YYYY-MM of the UTC date, taken from the Python datetime (no ns bounds)."""
    value = value.astimezone(timezone.utc)
    return f"{value.year:04d}-{value.month:02d}"


def summarize(frame):
    """count / total / mean / max / min over the whole frame (zeros when empty)."""
    if frame.empty:
        return {"count": 0, "total": 0.0, "average": 0.0, "max": 0.0, "min": 0.0}
    amounts = frame["amount"]
    return {
        "count": int(amounts.count()),
        "total": float(amounts.sum()),
        "average": float(amounts.mean()),
        "max": float(amounts.max()),
        "min": float(amounts.min()),
    }


def breakdown(frame, key, label, amount_field="total", total=None):
    """
    Group `frame` by `key` into [{label, amount_field, count, percentage}],
    largest sum first.
    """
    if frame.empty:
        return []
    if total is None:
        total = float(frame["amount"].sum())

    grouped = frame.groupby(key)["amount"].agg(["sum", "count"])
    grouped = grouped.sort_values("sum", ascending=False, kind="mergesort")
    return [
        {
            label: name,
            amount_field: round2(row["sum"]),
            "count": int(row["count"]),
            "percentage": percentage(row["sum"], total),
        }
        for name, row in grouped.iterrows()
    ]


def monthly_trend(frame):
    """Per calendar month (YYYY-MM) totals, oldest month first."""
    if frame.empty:
        return []
    grouped = frame.groupby("month")["amount"].agg(["sum", "count"]).sort_index()
    return [
        {
            "month": month,
            "total": round2(row["sum"]),
            "count": int(row["count"]),
            "average": round2(row["sum"] / row["count"]),
        }
        for month, row in grouped.iterrows()
    ]


class ReportEngine:
    def __init__(self, store):
        self.store = store

    def monthly_report(self, user_id, month, year):
        start, end, days_in_month = month_window(month, year)
        expenses = self.store.find(user_id, start=start, end=end)
        frame = to_frame(expenses)

        stats = summarize(frame)
        total = stats["total"]
        logger.info(f"Monthly report {year}-{month:02d} for user {user_id}: {stats['count']} expenses")

        return {
            "summary": {
                "month": month,
                "year": year,
                "totalExpenses": round2(total),
                "totalTransactions": stats["count"],
                "categoryBreakdown": breakdown(frame, "category", "category", amount_field="amount", total=total),
                "dailyAverage": round2(total / days_in_month),
                "daysInMonth": days_in_month,
            },
            "expenses": [e.to_summary() for e in expenses],
        }

    def category_report(self, user_id, category, start=None, end=None):
        expenses = self.store.find(user_id, category=category, start=start, end=end)
        frame = to_frame(expenses)
        stats = summarize(frame)

        return {
            "category": category.value,
            "statistics": {
                "totalExpenses": stats["count"],
                "totalAmount": round2(stats["total"]),
                "averageAmount": round2(stats["average"]),
                "maxExpense": round2(stats["max"]),
                "minExpense": round2(stats["min"]),
            },
            "monthlyTrend": monthly_trend(frame),
            "expenses": [e.to_dict() for e in expenses],
        }

    def overall_stats(self, user_id, start=None, end=None):
        frame = to_frame(self.store.find(user_id, start=start, end=end))
        stats = summarize(frame)
        total = stats["total"]

        return {
            "overall": {
                "totalExpenses": stats["count"],
                "totalAmount": round2(total),
                "averageAmount": round2(stats["average"]),
                "maxAmount": round2(stats["max"]),
                "minAmount": round2(stats["min"]),
            },
            "categoryBreakdown": breakdown(frame, "category", "category", total=total),
            "paymentMethodBreakdown": breakdown(frame, "payment_method", "paymentMethod", total=total),
        }
