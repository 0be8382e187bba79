from __future__ import annotations

from datetime import date

import pytest

from household_budget.aggregation import GroupKey, aggregate_weekly
from household_budget.data_processing import TransactionRecord

TODAY = date(2025, 1, 10)


def _row(week, amount, category="Food", description="Groceries", when=None, initialiser=False, key=None):
    return TransactionRecord(
        week_key=key or str(week),
        week_number=week,
        amount=amount,
        category=category,
        description=description,
        date=when,
        is_initialiser=initialiser,
    )


RECORDS = [
    _row(1, 500.0, description="Initialise", initialiser=True),
    _row(1, 20.0, when=date(2025, 1, 2)),
    _row(2, 30.0, when=date(2025, 1, 9)),
    _row(2, 12.0, category="Fuel", when=date(2025, 1, 8)),
    _row(3, 40.0, when=date(2025, 1, 14)),
]


def test_initialisers_never_counted() -> None:
    spend = aggregate_weekly(RECORDS)
    assert spend.get(1) == 20.0
    assert spend.total == pytest.approx(102.0)
    assert spend.matched == 4


def test_future_rows_only_excluded_when_requested() -> None:
    assert aggregate_weekly(RECORDS).get(3) == 40.0
    filtered = aggregate_weekly(RECORDS, exclude_future=True, today=TODAY)
    assert filtered.get(3) == 0.0
    assert 3 not in filtered.buckets


def test_undated_rows_are_not_future() -> None:
    spend = aggregate_weekly([_row(4, 9.0)], exclude_future=True, today=TODAY)
    assert spend.get(4) == 9.0


def test_category_and_week_filters() -> None:
    food = aggregate_weekly(RECORDS, category="Food")
    assert food.buckets == {1: 20.0, 2: 30.0, 3: 40.0}
    week_two = aggregate_weekly(RECORDS, week=2)
    assert week_two.buckets == {2: 42.0}
    assert aggregate_weekly(RECORDS, category="Rent").matched == 0


def test_week_category_keys() -> None:
    spend = aggregate_weekly(RECORDS, key=GroupKey.WEEK_CATEGORY)
    assert spend.get((2, "Food")) == 30.0
    assert spend.get((2, "Fuel")) == 12.0
    assert spend.get((0, "Food")) == 0.0


def test_week_key_buckets_keep_raw_labels() -> None:
    records = [_row(7, 5.0, key="2025-W07"), _row(7, 6.0, key="2025-W07")]
    spend = aggregate_weekly(records, key=GroupKey.WEEK_KEY)
    assert spend.buckets == {"2025-W07": 11.0}


def test_dense_series_fills_missing_weeks() -> None:
    series = aggregate_weekly(RECORDS, category="Food").series()
    assert len(series) == 52
    assert series.loc[1] == 20.0
    assert series.loc[4] == 0.0


def test_dense_series_requires_week_buckets() -> None:
    with pytest.raises(ValueError):
        aggregate_weekly(RECORDS, key=GroupKey.WEEK_CATEGORY).series()


def test_empty_input() -> None:
    spend = aggregate_weekly([])
    assert spend.buckets == {}
    assert spend.total == 0.0
    assert spend.series().sum() == 0.0
