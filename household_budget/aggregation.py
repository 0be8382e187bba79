"""Weekly spend aggregation shared by every report.

One pass over the parsed records produces the week buckets that the
cumulative tracker, the period chart and the scorecard project from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Sequence

import pandas as pd

from .config import ALL_CATEGORIES, WEEKS_PER_YEAR
from .data_processing import TransactionRecord, records_frame


class GroupKey(str, Enum):
    WEEK = "week"
    WEEK_KEY = "week_key"
    WEEK_CATEGORY = "week_category"


_GROUP_COLUMNS = {
    GroupKey.WEEK: ["week_number"],
    GroupKey.WEEK_KEY: ["week_key"],
    GroupKey.WEEK_CATEGORY: ["week_number", "category"],
}


@dataclass(frozen=True)
class WeeklySpend:
    """Summed amounts per bucket plus the running total over all buckets."""

    buckets: Dict[Hashable, float] = field(default_factory=dict)
    total: float = 0.0
    matched: int = 0
    key: GroupKey = GroupKey.WEEK

    def get(self, bucket: Hashable) -> float:
        return float(self.buckets.get(bucket, 0.0))

    def series(self, first: int = 1, last: int = WEEKS_PER_YEAR) -> pd.Series:
        """Dense per-week series, zero for weeks without spending."""
        if self.key is not GroupKey.WEEK:
            raise ValueError("A dense week series needs buckets keyed by week number.")
        weeks = pd.RangeIndex(first, last + 1, name="week")
        sparse = pd.Series(self.buckets, dtype=float)
        return sparse.reindex(weeks, fill_value=0.0)


def aggregate_weekly(
    records: Sequence[TransactionRecord],
    category: str = ALL_CATEGORIES,
    week: Optional[int] = None,
    exclude_future: bool = False,
    today: Optional[date] = None,
    key: GroupKey = GroupKey.WEEK,
) -> WeeklySpend:
    """Sum non-initialiser amounts into week buckets.

    Args:
        records: Parsed analytics records.
        category: ``"All"`` or a single category name.
        week: Only keep records with this week number.
        exclude_future: Skip records dated after ``today``.
        today: Reference date for ``exclude_future`` (defaults to today).
        key: How buckets are keyed.

    Returns:
        WeeklySpend with sparse buckets; weeks without matching records are
        absent rather than zero.
    """
    frame = records_frame(records)
    if frame.empty:
        return WeeklySpend(key=key)

    mask = ~frame["is_initialiser"].astype(bool)
    if exclude_future:
        cutoff = today or date.today()
        mask &= ~frame["date"].map(lambda value: isinstance(value, date) and value > cutoff).astype(bool)
    if category != ALL_CATEGORIES:
        mask &= frame["category"] == category
    if week is not None:
        mask &= frame["week_number"] == int(week)

    scoped = frame[mask]
    if scoped.empty:
        return WeeklySpend(key=key)

    grouped = scoped.groupby(_GROUP_COLUMNS[key], sort=False)["amount"].sum()
    buckets: Dict[Any, float] = {}
    for bucket, amount in grouped.items():
        if isinstance(bucket, tuple) and len(bucket) == 1:
            bucket = bucket[0]
        if key is GroupKey.WEEK:
            bucket = int(bucket)
        elif key is GroupKey.WEEK_CATEGORY:
            bucket = (int(bucket[0]), bucket[1])
        buckets[bucket] = float(amount)

    return WeeklySpend(
        buckets=buckets,
        total=float(scoped["amount"].sum()),
        matched=int(len(scoped)),
        key=key,
    )
