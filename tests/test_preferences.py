from __future__ import annotations

import json

from household_budget.preferences import DEFAULT_PREFERENCES, limit_value, load_preferences, save_preferences


def test_missing_file_returns_defaults(tmp_path) -> None:
    assert load_preferences(tmp_path / "prefs.json") == DEFAULT_PREFERENCES


def test_round_trip_drops_unknown_keys(tmp_path) -> None:
    path = tmp_path / "nested" / "prefs.json"
    save_preferences({"category": "Food", "week_convention": "iso", "transaction_limit": "All", "theme": "dark"}, path)
    assert "theme" not in json.loads(path.read_text(encoding="utf-8"))
    assert load_preferences(path) == {"category": "Food", "week_convention": "iso", "transaction_limit": "All"}


def test_corrupt_file_returns_defaults(tmp_path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_preferences(path) == DEFAULT_PREFERENCES
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_preferences(path) == DEFAULT_PREFERENCES


def test_invalid_limit_falls_back(tmp_path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"transaction_limit": "7"}), encoding="utf-8")
    assert load_preferences(path)["transaction_limit"] == "10"


def test_limit_value() -> None:
    assert limit_value("All") is None
    assert limit_value("15") == 15


def test_unknown_convention_falls_back(tmp_path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"week_convention": "sunday", "category": "Fuel"}), encoding="utf-8")
    loaded = load_preferences(path)
    assert loaded["week_convention"] == DEFAULT_PREFERENCES["week_convention"]
    assert loaded["category"] == "Fuel"
