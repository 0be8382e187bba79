"""Lightweight persistent store for the dashboard's sidebar selections."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .config import ALL_CATEGORIES, PREFERENCES_PATH, TRANSACTION_LIMITS, WEEK_CONVENTION
from .week_numbering import WeekConvention

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "category": ALL_CATEGORIES,
    "week_convention": WEEK_CONVENTION,
    "transaction_limit": "10",
}


def load_preferences(path: Path | None = None) -> Dict[str, Any]:
    target = path or PREFERENCES_PATH
    if not target.exists():
        return DEFAULT_PREFERENCES.copy()
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError):
        return DEFAULT_PREFERENCES.copy()
    if not isinstance(data, dict):
        return DEFAULT_PREFERENCES.copy()
    merged = DEFAULT_PREFERENCES.copy()
    merged.update({k: v for k, v in data.items() if k in DEFAULT_PREFERENCES})
    if merged["transaction_limit"] not in TRANSACTION_LIMITS:
        merged["transaction_limit"] = DEFAULT_PREFERENCES["transaction_limit"]
    if merged["week_convention"] not in {convention.value for convention in WeekConvention}:
        merged["week_convention"] = DEFAULT_PREFERENCES["week_convention"]
    return merged


def save_preferences(preferences: Dict[str, Any], path: Path | None = None) -> None:
    target = path or PREFERENCES_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {k: v for k, v in preferences.items() if k in DEFAULT_PREFERENCES}
    with target.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)


def limit_value(label: str) -> int | None:
    """Translate a transaction-limit label into a slice length (``None`` = all)."""
    if label == "All":
        return None
    return int(label)
