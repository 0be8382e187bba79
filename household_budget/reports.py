"""Report builders projecting the weekly aggregation into report shapes.

Every builder is a pure function of the aggregated spend, the resolved budget
and a reference week.  None of them fail on well-formed input; malformed
tables are rejected earlier by the parser.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .aggregation import GroupKey, WeeklySpend
from .budgets import aggregate_budget, qualifying_budgets
from .config import ALL_CATEGORIES, WEEKS_PER_YEAR

_YEAR_WEEK = re.compile(r"(\d{4})-W(\d+)")
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


# ---------------------------------------------------------------------------
# Cumulative tracker
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CumulativePoint:
    week: int
    cumulative_spend: float
    cumulative_budget: float

    @property
    def label(self) -> str:
        return f"W{self.week}"

    @property
    def over_budget(self) -> bool:
        return self.cumulative_spend > self.cumulative_budget


@dataclass(frozen=True)
class CumulativeReport:
    category: str
    points: Tuple[CumulativePoint, ...]
    current_week: int
    weekly_budget: float
    total_spend_to_date: float
    total_budget_to_date: float
    delta: float
    average_weekly_spend: float
    weekly_delta: float


def build_cumulative(
    spend: WeeklySpend,
    weekly_budget: float,
    current_week: int,
    category: str = ALL_CATEGORIES,
    weeks: int = WEEKS_PER_YEAR,
) -> CumulativeReport:
    """Running spend against a linear budget projection for weeks 1..52.

    Spend to date is the running spend at ``current_week``, so buckets
    before week 1 (e.g. a ``WeekNum`` of 0) never count.  Negative
    amounts (refunds) make the running spend go down; that is expected.
    """
    running = spend.series(1, max(weeks, current_week)).cumsum()
    points = tuple(
        CumulativePoint(
            week=int(week),
            cumulative_spend=float(total),
            cumulative_budget=weekly_budget * int(week),
        )
        for week, total in running.loc[:weeks].items()
    )

    total_spend = float(running.loc[current_week]) if current_week >= 1 else 0.0
    total_budget = weekly_budget * current_week
    average = total_spend / current_week if current_week > 0 else 0.0
    return CumulativeReport(
        category=category,
        points=points,
        current_week=current_week,
        weekly_budget=weekly_budget,
        total_spend_to_date=total_spend,
        total_budget_to_date=total_budget,
        delta=total_spend - total_budget,
        average_weekly_spend=average,
        weekly_delta=average - weekly_budget,
    )


# ---------------------------------------------------------------------------
# Period chart
# ---------------------------------------------------------------------------


def week_sort_key(label: str) -> int:
    """Numeric order of a week token: ``year * 100 + week`` for ``YYYY-Www``."""
    match = _YEAR_WEEK.search(label)
    if match:
        return int(match.group(1)) * 100 + int(match.group(2))
    leading = _LEADING_INT.match(label)
    return int(leading.group(0)) if leading else 0


@dataclass(frozen=True)
class PeriodPoint:
    label: str
    amount: float
    budget: float


@dataclass(frozen=True)
class PeriodReport:
    category: str
    week: Optional[int]
    weekly_budget: float
    points: Tuple[PeriodPoint, ...]

    @property
    def series_name(self) -> str:
        return "Total Spending" if self.category == ALL_CATEGORIES else f"{self.category} Spending"


def build_period(
    spend: WeeklySpend,
    weekly_budget: float,
    category: str = ALL_CATEGORIES,
    week: Optional[int] = None,
) -> PeriodReport:
    """Weeks that have spending, ascending, each paired with the flat budget."""
    labels = sorted((str(label) for label in spend.buckets), key=week_sort_key)
    if spend.key is GroupKey.WEEK:
        lookup = {str(label): amount for label, amount in spend.buckets.items()}
    else:
        lookup = dict(spend.buckets)
    points = tuple(PeriodPoint(label=label, amount=float(lookup[label]), budget=weekly_budget) for label in labels)
    return PeriodReport(category=category, week=week, weekly_budget=weekly_budget, points=points)


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------


def chart_scale(max_percent: float) -> int:
    """Smallest multiple of 20, at least 100, covering ``max_percent``."""
    return max(100, int(math.ceil(max_percent / 20.0)) * 20)


def bar_width(percent: float, scale: float) -> float:
    """Percentage of the track a bar should fill for a given chart scale."""
    if scale <= 0:
        return 0.0
    return max(0.0, min(percent / scale * 100.0, 100.0))


@dataclass(frozen=True)
class CategoryScore:
    category: str
    this_week: float
    last_week: float
    budget: float
    percent_used: float

    @property
    def on_track(self) -> bool:
        return self.this_week <= self.budget


@dataclass(frozen=True)
class Scorecard:
    week: int
    categories: Tuple[CategoryScore, ...]
    total_this_week: float
    total_last_week: float
    total_budget: float
    difference: float
    percent_change: float
    on_track: int
    category_count: int
    chart_scale: int


def build_scorecard(spend: WeeklySpend, budgets: Dict[str, float], week: int) -> Scorecard:
    """This week against last week and the budget, per qualifying category.

    ``spend`` must be keyed by ``(week, category)``.  Categories are ordered by
    percent used, highest first; ties keep encounter order.
    """
    scores = []
    for category, budget in qualifying_budgets(budgets).items():
        this_week = spend.get((week, category))
        last_week = spend.get((week - 1, category))
        scores.append(
            CategoryScore(
                category=category,
                this_week=this_week,
                last_week=last_week,
                budget=budget,
                percent_used=this_week / budget * 100.0,
            )
        )
    scores.sort(key=lambda score: score.percent_used, reverse=True)

    total_this_week = sum(score.this_week for score in scores)
    total_last_week = sum(score.last_week for score in scores)
    difference = total_this_week - total_last_week
    max_percent = max((score.percent_used for score in scores), default=0.0)
    return Scorecard(
        week=week,
        categories=tuple(scores),
        total_this_week=total_this_week,
        total_last_week=total_last_week,
        total_budget=aggregate_budget(budgets),
        difference=difference,
        percent_change=(difference / total_last_week * 100.0) if total_last_week else 0.0,
        on_track=sum(1 for score in scores if score.on_track),
        category_count=len(scores),
        chart_scale=chart_scale(max_percent),
    )
