"""Weekly budget resolution from "Initialise" rows.

Budgets are declared in the analytics table by rows whose description is
``Initialise``.  Two resolution policies are in use:

* a named category resolves with ``LAST_WRITE_WINS``: a later initialiser
  row for the same category replaces the earlier value;
* the ``"All"`` pseudo-category resolves ``ADDITIVE``ly: every initialiser
  row with a positive budget is added, whichever category it names.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable

from .config import ALL_CATEGORIES
from .data_processing import TransactionRecord


class BudgetMode(str, Enum):
    LAST_WRITE_WINS = "last_write_wins"
    ADDITIVE = "additive"


def mode_for(category: str) -> BudgetMode:
    return BudgetMode.ADDITIVE if category == ALL_CATEGORIES else BudgetMode.LAST_WRITE_WINS


def resolve_budget(records: Iterable[TransactionRecord], category: str = ALL_CATEGORIES) -> float:
    """Weekly budget for ``category`` (or the aggregate for ``"All"``).

    Only initialiser rows with a positive budget take part.

    Example:
        >>> rows = [TransactionRecord("1", 1, 0.0, "Food", "Initialise", budget=50.0, is_initialiser=True),
        ...         TransactionRecord("1", 1, 0.0, "Fuel", "Initialise", budget=30.0, is_initialiser=True)]
        >>> resolve_budget(rows, "All")
        80.0
    """
    mode = mode_for(category)
    weekly_budget = 0.0
    for record in records:
        if not record.is_initialiser or record.budget <= 0:
            continue
        if mode is BudgetMode.ADDITIVE:
            weekly_budget += record.budget
        elif record.category == category:
            weekly_budget = record.budget
    return weekly_budget


def budget_map(records: Iterable[TransactionRecord]) -> Dict[str, float]:
    """Per-category budgets, last initialiser row wins.

    Zero or blank budgets still overwrite, so a category can be switched off
    by a later initialiser row.  Keys keep first-encounter order.
    """
    budgets: Dict[str, float] = {}
    for record in records:
        if record.is_initialiser and record.category:
            budgets[record.category] = record.budget
    return budgets


def qualifying_budgets(budgets: Dict[str, float]) -> Dict[str, float]:
    """Categories whose resolved budget is positive."""
    return {category: amount for category, amount in budgets.items() if amount > 0}


def aggregate_budget(budgets: Dict[str, float]) -> float:
    return float(sum(qualifying_budgets(budgets).values()))
