"""Unit tests for the report engine, without HTTP or a database."""

from datetime import datetime, timezone

import pytest

from expense_api.analytics import (
    ReportEngine,
    breakdown,
    month_window,
    monthly_trend,
    percentage,
    summarize,
    to_frame,
)
from expense_api.models import Category, Expense, PaymentMethod


def _expense(n, amount, category, when, method=PaymentMethod.OTHER):
    return Expense(
        id=f"{n:032x}",
        user_id="u1",
        title=f"expense {n}",
        amount=amount,
        category=category,
        date=when,
        payment_method=method,
    )


def _at(year, month, day):
    return datetime(year, month, day, 12, tzinfo=timezone.utc)


class FakeStore:
    """Applies the same filters the real store does, over a list."""

    def __init__(self, expenses):
        self.expenses = expenses
        self.calls = []

    def find(self, user_id, category=None, start=None, end=None):
        self.calls.append((user_id, category, start, end))
        rows = [
            e for e in self.expenses
            if e.user_id == user_id
            and (category is None or e.category == category)
            and (start is None or e.date >= start)
            and (end is None or e.date <= end)
        ]
        return sorted(rows, key=lambda e: e.date, reverse=True)


# ── Helpers ──


def test_month_window_handles_leap_years():
    start, end, days = month_window(2, 2024)
    assert days == 29
    assert start == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert (end.year, end.month, end.day, end.hour, end.minute, end.second) == (2024, 2, 29, 23, 59, 59)

    assert month_window(2, 2023)[2] == 28
    assert month_window(12, 2025)[2] == 31


def test_percentage_of_zero_total_is_zero():
    assert percentage(10, 0) == 0
    assert percentage(1, 3) == 33.33


def test_summarize_empty_frame():
    assert summarize(to_frame([])) == {"count": 0, "total": 0.0, "average": 0.0, "max": 0.0, "min": 0.0}


def test_breakdown_orders_by_sum_then_name():
    frame = to_frame([
        _expense(1, 20, Category.TRAVEL, _at(2025, 1, 1)),
        _expense(2, 20, Category.BILLS, _at(2025, 1, 2)),
        _expense(3, 50, Category.FOOD, _at(2025, 1, 3)),
    ])
    rows = breakdown(frame, "category", "category")

    assert [r["category"] for r in rows] == ["Food", "Bills", "Travel"]
    assert rows[0] == {"category": "Food", "total": 50, "count": 1, "percentage": 55.56}


def test_monthly_trend_groups_by_calendar_month():
    frame = to_frame([
        _expense(1, 10, Category.FOOD, _at(2024, 12, 30)),
        _expense(2, 30, Category.FOOD, _at(2025, 1, 2)),
        _expense(3, 20, Category.FOOD, _at(2025, 1, 28)),
    ])

    assert monthly_trend(frame) == [
        {"month": "2024-12", "total": 10, "count": 1, "average": 10},
        {"month": "2025-01", "total": 50, "count": 2, "average": 25},
    ]


# ── Engine ──


@pytest.fixture
def engine():
    store = FakeStore([
        _expense(1, 100, Category.FOOD, _at(2025, 1, 5), PaymentMethod.UPI),
        _expense(2, 50, Category.FOOD, _at(2025, 1, 20), PaymentMethod.CASH),
        _expense(3, 30, Category.TRANSPORTATION, _at(2025, 1, 10), PaymentMethod.UPI),
    ])
    return ReportEngine(store)


def test_monthly_report_queries_the_whole_month(engine):
    report = engine.monthly_report("u1", 1, 2025)

    _, category, start, end = engine.store.calls[-1]
    assert category is None
    assert start == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert end.day == 31
    assert report["summary"]["totalExpenses"] == 180
    assert report["summary"]["dailyAverage"] == 5.81


def test_category_report_statistics(engine):
    report = engine.category_report("u1", Category.FOOD)

    assert report["statistics"]["averageAmount"] == 75
    assert report["monthlyTrend"] == [{"month": "2025-01", "total": 150, "count": 2, "average": 75}]


def test_overall_stats_payment_methods(engine):
    report = engine.overall_stats("u1")

    assert report["paymentMethodBreakdown"] == [
        {"paymentMethod": "UPI", "total": 130, "count": 2, "percentage": 72.22},
        {"paymentMethod": "Cash", "total": 50, "count": 1, "percentage": 27.78},
    ]


def test_reports_for_another_user_are_empty(engine):
    report = engine.overall_stats("someone-else")

    assert report["overall"]["totalExpenses"] == 0
    assert report["categoryBreakdown"] == []


def test_reports_handle_dates_beyond_nanosecond_timestamps():
    store = FakeStore([
        _expense(1, 10, Category.FOOD, _at(1500, 3, 1)),
        _expense(2, 20, Category.FOOD, _at(2300, 1, 1)),
    ])
    engine = ReportEngine(store)

    trend = engine.category_report("u1", Category.FOOD)["monthlyTrend"]
    assert [t["month"] for t in trend] == ["1500-03", "2300-01"]
    assert engine.overall_stats("u1")["overall"]["totalAmount"] == 30
