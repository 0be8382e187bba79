"""Configuration management for the household budget dashboard.

This module centralizes all configuration values including paths,
range names, category defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in household_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("HOUSEHOLD_BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Spreadsheet workbook backing the transaction store
WORKBOOK_PATH = Path(
    os.getenv("HOUSEHOLD_BUDGET_WORKBOOK", DATA_DIR / "budget.xlsx")
).resolve()

# Persisted sidebar selections
PREFERENCES_PATH = DATA_DIR / "preferences.json"

# Named ranges inside the workbook
ANALYTICS_RANGE = os.getenv("HOUSEHOLD_BUDGET_ANALYTICS_RANGE", "Configured_Input!A:O")
LOG_RANGE = os.getenv("HOUSEHOLD_BUDGET_LOG_RANGE", "Tracker_Sheet!A:D")

# Week convention used for the stored WeekNum keys ("monday" or "iso")
WEEK_CONVENTION = os.getenv("HOUSEHOLD_BUDGET_WEEK_CONVENTION", "monday")

LOG_LEVEL = os.getenv("HOUSEHOLD_BUDGET_LOG_LEVEL")

ALL_CATEGORIES = "All"
WEEKS_PER_YEAR = 52

# Highest week number either convention can produce (Monday-anchored in a
# leap year starting on Sunday)
MAX_WEEK_NUMBER = 54

DEFAULT_CATEGORIES = [
    "Dating Allowance",
    "Petrol",
    "Gift Allowance",
    "Wellbeing allowance - Andrew",
    "Wellbeing allowance - Emmy",
    "Wellbeing allowance - Together",
    "Car Expenses",
    "Utilities (Water, Gas & Elec)",
    "Groceries",
    "Food & Dining",
    "Household Goods (e.g. Medicine, Cleaning, Small goods)",
    "Others",
]

TRANSACTION_LIMITS = ["5", "10", "15", "20", "All"]


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, WORKBOOK_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
