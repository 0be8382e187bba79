"""Tests for the cumulative, period and scorecard report builders."""

from __future__ import annotations

import pytest

from household_budget.aggregation import GroupKey, WeeklySpend
from household_budget.reports import (
    bar_width,
    build_cumulative,
    build_period,
    build_scorecard,
    chart_scale,
    week_sort_key,
)


def test_cumulative_food_scenario() -> None:
    spend = WeeklySpend(buckets={1: 20.0, 2: 30.0}, total=50.0, matched=2)
    report = build_cumulative(spend, 50.0, current_week=2, category="Food")

    assert len(report.points) == 52
    first, second = report.points[0], report.points[1]
    assert (first.week, first.cumulative_spend, first.cumulative_budget) == (1, 20.0, 50.0)
    assert (second.week, second.cumulative_spend, second.cumulative_budget) == (2, 50.0, 100.0)
    assert report.points[-1].cumulative_spend == 50.0
    assert report.points[-1].cumulative_budget == 2600.0

    assert report.total_spend_to_date == 50.0
    assert report.total_budget_to_date == 100.0
    assert report.delta == -50.0
    assert report.average_weekly_spend == 25.0
    assert report.weekly_delta == -25.0


def test_cumulative_spend_to_date_stops_at_current_week() -> None:
    spend = WeeklySpend(buckets={1: 10.0, 3: 15.0, 5: 100.0}, total=125.0, matched=3)
    report = build_cumulative(spend, 20.0, current_week=3)
    assert report.total_spend_to_date == 25.0
    assert report.total_budget_to_date == 60.0


def test_cumulative_to_date_matches_running_total() -> None:
    spend = WeeklySpend(buckets={0: 5.0, 1: 20.0, 2: 30.0})
    report = build_cumulative(spend, 50.0, current_week=2)
    assert report.points[1].cumulative_spend == 50.0
    assert report.total_spend_to_date == 50.0
    assert report.delta == -50.0


def test_cumulative_to_date_past_week_52() -> None:
    spend = WeeklySpend(buckets={1: 10.0, 53: 4.0})
    report = build_cumulative(spend, 1.0, current_week=53)
    assert len(report.points) == 52
    assert report.points[-1].cumulative_spend == 10.0
    assert report.total_spend_to_date == 14.0
    assert report.total_budget_to_date == 53.0


def test_cumulative_is_monotonic_for_non_negative_spend() -> None:
    spend = WeeklySpend(buckets={2: 5.0, 9: 0.0, 30: 12.5, 52: 1.0})
    totals = [point.cumulative_spend for point in build_cumulative(spend, 10.0, 52).points]
    assert all(later >= earlier for earlier, later in zip(totals, totals[1:]))


def test_cumulative_refund_lowers_running_total() -> None:
    spend = WeeklySpend(buckets={1: 40.0, 2: -15.0})
    report = build_cumulative(spend, 10.0, current_week=2)
    assert report.points[1].cumulative_spend == 25.0
    assert report.points[1].cumulative_spend < report.points[0].cumulative_spend


def test_cumulative_week_zero_has_no_average() -> None:
    report = build_cumulative(WeeklySpend(buckets={1: 5.0}), 10.0, current_week=0)
    assert report.average_weekly_spend == 0.0
    assert report.weekly_delta == -10.0


def test_cumulative_point_flags() -> None:
    report = build_cumulative(WeeklySpend(buckets={1: 60.0}), 50.0, current_week=1)
    assert report.points[0].label == "W1"
    assert report.points[0].over_budget
    assert not report.points[1].over_budget


@pytest.mark.parametrize(
    "label, expected",
    [("2025-W07", 202507), ("2024-W52", 202452), ("12", 12), ("3 (partial)", 3), ("none", 0)],
)
def test_week_sort_key(label: str, expected: int) -> None:
    assert week_sort_key(label) == expected


def test_period_sorts_year_week_labels() -> None:
    spend = WeeklySpend(
        buckets={"2025-W10": 3.0, "2024-W52": 1.0, "2025-W02": 2.0},
        key=GroupKey.WEEK_KEY,
    )
    report = build_period(spend, 25.0)
    assert [point.label for point in report.points] == ["2024-W52", "2025-W02", "2025-W10"]
    assert [point.amount for point in report.points] == [1.0, 2.0, 3.0]
    assert {point.budget for point in report.points} == {25.0}
    assert report.series_name == "Total Spending"


def test_period_sorts_week_numbers_numerically() -> None:
    spend = WeeklySpend(buckets={10: 4.0, 2: 6.0})
    report = build_period(spend, 0.0, category="Food")
    assert [point.label for point in report.points] == ["2", "10"]
    assert report.series_name == "Food Spending"


def test_period_only_reports_weeks_with_spending() -> None:
    report = build_period(WeeklySpend(key=GroupKey.WEEK_KEY), 10.0, week=4)
    assert report.points == ()
    assert report.week == 4


@pytest.mark.parametrize("max_percent, expected", [(0, 100), (95, 100), (100, 100), (101, 120), (120, 120), (150, 160)])
def test_chart_scale(max_percent: float, expected: int) -> None:
    assert chart_scale(max_percent) == expected


def test_bar_width_is_clamped() -> None:
    assert bar_width(60, 120) == pytest.approx(50.0)
    assert bar_width(300, 120) == 100.0
    assert bar_width(-10, 100) == 0.0
    assert bar_width(10, 0) == 0.0


def _scorecard_spend(buckets):
    return WeeklySpend(buckets=dict(buckets), key=GroupKey.WEEK_CATEGORY)


def test_scorecard_percent_and_scale() -> None:
    spend = _scorecard_spend({(5, "Food"): 120.0, (5, "Fuel"): 10.0, (4, "Food"): 80.0, (4, "Fuel"): 20.0})
    scorecard = build_scorecard(spend, {"Food": 100.0, "Fuel": 50.0, "Fun": 0.0}, week=5)

    assert [score.category for score in scorecard.categories] == ["Food", "Fuel"]
    food, fuel = scorecard.categories
    assert food.percent_used == pytest.approx(120.0)
    assert not food.on_track
    assert fuel.percent_used == pytest.approx(20.0)
    assert fuel.on_track

    assert scorecard.chart_scale == 120
    assert scorecard.total_this_week == 130.0
    assert scorecard.total_last_week == 100.0
    assert scorecard.total_budget == 150.0
    assert scorecard.difference == 30.0
    assert scorecard.percent_change == pytest.approx(30.0)
    assert scorecard.on_track == 1
    assert scorecard.category_count == 2


def test_scorecard_under_budget_keeps_scale_at_100() -> None:
    spend = _scorecard_spend({(3, "Food"): 95.0})
    scorecard = build_scorecard(spend, {"Food": 100.0}, week=3)
    assert scorecard.chart_scale == 100


def test_scorecard_week_one_has_no_last_week() -> None:
    spend = _scorecard_spend({(1, "Food"): 10.0})
    scorecard = build_scorecard(spend, {"Food": 50.0}, week=1)
    assert scorecard.total_last_week == 0.0
    assert scorecard.percent_change == 0.0


def test_scorecard_ties_keep_budget_order() -> None:
    scorecard = build_scorecard(_scorecard_spend({}), {"Petrol": 40.0, "Gifts": 20.0, "Others": 10.0}, week=8)
    assert [score.category for score in scorecard.categories] == ["Petrol", "Gifts", "Others"]
    assert scorecard.on_track == 3


def test_scorecard_without_budgets_is_empty() -> None:
    scorecard = build_scorecard(_scorecard_spend({(2, "Food"): 5.0}), {"Food": 0.0}, week=2)
    assert scorecard.categories == ()
    assert scorecard.category_count == 0
    assert scorecard.chart_scale == 100
