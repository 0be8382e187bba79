"""Unit tests for household_budget.data_processing."""

from __future__ import annotations

from datetime import date

import pytest

from household_budget import data_processing as dp
from household_budget.errors import NoDataError, ParseError

HEADER = ["WeekNum", "Amount", "Category", "Weekly Budget", "Description", "Date"]


def test_extract_week_number() -> None:
    assert dp.extract_week_number("2025-W07") == 7
    assert dp.extract_week_number("12") == 12
    assert dp.extract_week_number(" 3 ") == 3
    assert dp.extract_week_number("none") is None
    assert dp.extract_week_number("") is None
    assert dp.extract_week_number(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("20", 20.0),
        ("$1,234.50", 1234.5),
        ("(12.25)", -12.25),
        ("-3", -3.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (7, 7.0),
    ],
)
def test_parse_amount(raw, expected) -> None:
    assert dp.parse_amount(raw) == pytest.approx(expected)


def test_parse_date() -> None:
    assert dp.parse_date("2025-01-02") == date(2025, 1, 2)
    assert dp.parse_date("") is None
    assert dp.parse_date("not a date") is None
    assert dp.parse_date(date(2025, 3, 4)) == date(2025, 3, 4)


def test_is_initialiser_ignores_case_and_whitespace() -> None:
    assert dp.is_initialiser("Initialise")
    assert dp.is_initialiser("  initialise ")
    assert not dp.is_initialiser("Initialise budget")
    assert not dp.is_initialiser(None)


def test_parse_table_builds_records() -> None:
    raw = [
        HEADER,
        ["1", "0", "Food", "50", "Initialise", ""],
        ["2025-W01", "$1,200.50", "Food", "", "Lunch", "2025-01-02"],
        ["none", "5", "Food", "", "Dropped", ""],
        ["2", "(10)", "Fuel"],
    ]
    parsed = dp.parse_table(raw)
    assert parsed.ok
    assert len(parsed.records) == 3

    initialiser, lunch, refund = parsed.records
    assert initialiser.is_initialiser
    assert initialiser.budget == 50.0
    assert initialiser.date is None

    assert lunch.week_key == "2025-W01"
    assert lunch.week_number == 1
    assert lunch.amount == pytest.approx(1200.5)
    assert lunch.date == date(2025, 1, 2)
    assert not lunch.is_initialiser

    assert refund.week_number == 2
    assert refund.amount == -10.0
    assert refund.category == "Fuel"
    assert refund.description == ""


def test_parse_table_locates_columns_in_any_order() -> None:
    raw = [
        ["Description", "Category", "Extra", "Amount", "WeekNum"],
        ["Dinner", "Food", "x", "30", "2"],
    ]
    parsed = dp.parse_table(raw)
    assert parsed.ok
    record = parsed.records[0]
    assert (record.week_number, record.amount, record.category, record.description) == (2, 30.0, "Food", "Dinner")
    assert record.budget == 0.0


def test_parse_table_missing_required_column() -> None:
    parsed = dp.parse_table([["WeekNum", "Amount"], ["1", "20"]])
    assert not parsed.ok
    assert parsed.records == ()
    assert parsed.missing_columns == ("Category",)


def test_require_records_header_only_is_no_data() -> None:
    with pytest.raises(NoDataError):
        dp.require_records([HEADER])
    with pytest.raises(NoDataError):
        dp.require_records([])


def test_require_records_missing_columns_is_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        dp.require_records([["Week", "Amount", "Category"], ["1", "2", "Food"]])
    assert "WeekNum" in excinfo.value.message


def test_records_frame_columns() -> None:
    empty = dp.records_frame([])
    assert list(empty.columns) == dp.RECORD_COLUMNS
    records = dp.parse_table([HEADER, ["1", "20", "Food", "", "Lunch", "2025-01-02"]]).records
    frame = dp.records_frame(records)
    assert frame.loc[0, "amount"] == 20.0
    assert frame.loc[0, "week_number"] == 1


def test_known_categories_first_seen_order() -> None:
    raw = [HEADER, ["1", "1", "Fuel"], ["1", "1", "Food"], ["2", "1", "Fuel"], ["2", "1", ""]]
    records = dp.parse_table(raw).records
    assert dp.known_categories(records) == ["Fuel", "Food"]


def test_parse_log_keeps_sheet_row_numbers() -> None:
    raw = [
        ["2025-01-02", "20", "Food", "Lunch"],
        [],
        ["2025-01-05", "15", "Fuel"],
    ]
    entries = dp.parse_log(raw)
    assert [entry.row_index for entry in entries] == [1, 3]
    assert entries[1].description == ""
    assert entries[0].to_row() == ["2025-01-02", "20", "Food", "Lunch"]


def test_select_entries_newest_first_with_limit() -> None:
    entries = [
        dp.LogEntry(1, "2025-01-02", "20", "Food", "Lunch"),
        dp.LogEntry(2, "sometime", "5", "Food", "Snack"),
        dp.LogEntry(3, "2025-01-09", "30", "Food", "Dinner"),
        dp.LogEntry(4, "2025-01-05", "15", "Fuel", "Petrol"),
    ]
    newest = dp.select_entries(entries)
    assert [entry.row_index for entry in newest] == [3, 4, 1, 2]

    food = dp.select_entries(entries, "Food", limit=2)
    assert [entry.row_index for entry in food] == [3, 1]
