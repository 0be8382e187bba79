"""Calendar date to week number mapping.

Two conventions coexist in the budget workbook and both are supported as
explicit strategies:

* ``ISO`` - the ISO-8601 week, i.e. the week holding the date's Thursday.
  Dates in early January can belong to week 52 or 53 of the previous year.
* ``MONDAY_ANCHORED`` - week 1 runs from 1 January up to the first Monday
  (or is the first full Monday-Sunday span when 1 January is a Monday);
  every Monday after that starts the next week.  Never leaves the calendar
  year, so 31 December can be week 53 or 54.

Callers pick one convention and use it for both the reference week and the
comparison against stored ``WeekNum`` keys.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


class WeekConvention(str, Enum):
    ISO = "iso"
    MONDAY_ANCHORED = "monday"

    @classmethod
    def parse(cls, value: Union[str, "WeekConvention"]) -> "WeekConvention":
        """Resolve a convention from its config spelling."""
        if isinstance(value, WeekConvention):
            return value
        key = str(value).strip().lower().replace("-", "_")
        aliases = {
            "iso": cls.ISO,
            "iso8601": cls.ISO,
            "monday": cls.MONDAY_ANCHORED,
            "monday_anchored": cls.MONDAY_ANCHORED,
        }
        if key not in aliases:
            raise ValueError(f"Unknown week convention '{value}'.")
        return aliases[key]


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def iso_week_number(day: date) -> int:
    """ISO-8601 week number of ``day``."""
    return _as_date(day).isocalendar()[1]


def monday_anchored_week_number(day: date) -> int:
    """Week number counting from 1 January with weeks starting on Monday."""
    day = _as_date(day)
    days_since_year_start = (day - date(day.year, 1, 1)).days
    # 7 when 1 January is itself a Monday, so week 1 is a full week
    days_to_first_monday = 7 - date(day.year, 1, 1).weekday()
    if days_since_year_start < days_to_first_monday:
        return 1
    return (days_since_year_start - days_to_first_monday) // 7 + 2


def week_number(day: Union[date, datetime], convention: WeekConvention = WeekConvention.MONDAY_ANCHORED) -> int:
    """Map ``day`` to a positive week number under ``convention``."""
    convention = WeekConvention.parse(convention)
    if convention is WeekConvention.ISO:
        return iso_week_number(day)
    return monday_anchored_week_number(day)


def current_week(
    convention: WeekConvention = WeekConvention.MONDAY_ANCHORED,
    today: Optional[date] = None,
) -> int:
    """Week number of ``today`` (defaults to the local calendar date)."""
    return week_number(today or date.today(), convention)
