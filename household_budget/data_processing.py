"""Parsing of the raw spreadsheet tables into typed records.

The workbook hands back plain rectangular grids of text cells.  This module
turns the analytics table (header row + data rows) into
:class:`TransactionRecord` objects and the four-column transaction log into
:class:`LogEntry` objects.  Columns are located by header name because the
column order of the analytics sheet is not fixed.

These functions are pure and independent of any user interface so that they
can be unit tested and reused by the scripts.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .config import ALL_CATEGORIES
from .errors import NoDataError, ParseError
from .logging_setup import get_logger

logger = get_logger(__name__)

RawTable = List[List[str]]

WEEK_COLUMN = "WeekNum"
AMOUNT_COLUMN = "Amount"
CATEGORY_COLUMN = "Category"
BUDGET_COLUMN = "Weekly Budget"
DESCRIPTION_COLUMN = "Description"
DATE_COLUMN = "Date"

REQUIRED_COLUMNS = (WEEK_COLUMN, AMOUNT_COLUMN, CATEGORY_COLUMN)
OPTIONAL_COLUMNS = (BUDGET_COLUMN, DESCRIPTION_COLUMN, DATE_COLUMN)

INITIALISE_MARKER = "initialise"

_TRAILING_DIGITS = re.compile(r"(\d+)$")

RECORD_COLUMNS = [
    "week_key",
    "week_number",
    "amount",
    "category",
    "description",
    "date",
    "budget",
    "is_initialiser",
]


@dataclass(frozen=True)
class TransactionRecord:
    """One data row of the analytics table."""

    week_key: str
    week_number: int
    amount: float
    category: str
    description: str = ""
    date: Optional[date] = None
    budget: float = 0.0
    is_initialiser: bool = False


@dataclass(frozen=True)
class ParsedTable:
    records: Tuple[TransactionRecord, ...]
    ok: bool
    missing_columns: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Cell coercion
# ---------------------------------------------------------------------------


def extract_week_number(value: Any) -> Optional[int]:
    """Return the trailing integer of a week token (``"2025-W07"`` -> 7)."""
    if value is None:
        return None
    match = _TRAILING_DIGITS.search(str(value).strip())
    if not match:
        return None
    return int(match.group(1))


def parse_amount(value: Any) -> float:
    """Convert textual amount representations into floats, 0.0 when unusable."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if pd.isna(value) else float(value)
    cleaned = str(value).strip()
    if not cleaned:
        return 0.0
    # Accounting negatives e.g. (123.45)
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = f"-{cleaned[1:-1]}"
    cleaned = cleaned.replace("$", "").replace(",", "")
    number = pd.to_numeric([cleaned], errors="coerce")[0]
    if pd.isna(number):
        return 0.0
    return float(number)


def parse_date(value: Any) -> Optional[date]:
    """Best-effort conversion of a date-like cell, ``None`` when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def is_initialiser(description: Optional[str]) -> bool:
    return (description or "").strip().lower() == INITIALISE_MARKER


# ---------------------------------------------------------------------------
# Analytics table
# ---------------------------------------------------------------------------


def locate_columns(header: Sequence[str]) -> Dict[str, Optional[int]]:
    """Map each known column name to its first position in ``header``."""
    positions: Dict[str, Optional[int]] = {}
    for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS:
        positions[name] = next((idx for idx, cell in enumerate(header) if cell == name), None)
    return positions


def _cell(row: Sequence[Any], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value)


def _extract_frame(rows: Iterable[Sequence[Any]], positions: Dict[str, Optional[int]]) -> pd.DataFrame:
    data = [
        {
            "week_key": _cell(row, positions[WEEK_COLUMN]),
            "amount": _cell(row, positions[AMOUNT_COLUMN]),
            "category": _cell(row, positions[CATEGORY_COLUMN]),
            "budget": _cell(row, positions[BUDGET_COLUMN]),
            "description": _cell(row, positions[DESCRIPTION_COLUMN]),
            "date": _cell(row, positions[DATE_COLUMN]),
        }
        for row in rows
    ]
    return pd.DataFrame(data, columns=["week_key", "amount", "category", "budget", "description", "date"])


def parse_table(raw: Optional[RawTable]) -> ParsedTable:
    """Turn a raw analytics table into typed records.

    Fails (``ok=False``, no records) when ``WeekNum``, ``Amount`` or
    ``Category`` cannot be found by exact header match.  Rows whose week cell
    has no trailing digits are dropped silently.
    """
    if not raw:
        return ParsedTable(records=(), ok=False, missing_columns=REQUIRED_COLUMNS)

    header = [str(cell) if cell is not None else "" for cell in raw[0]]
    positions = locate_columns(header)
    missing = tuple(name for name in REQUIRED_COLUMNS if positions[name] is None)
    if missing:
        logger.warning("Required columns not found: %s (headers: %s)", ", ".join(missing), header)
        return ParsedTable(records=(), ok=False, missing_columns=missing)

    frame = _extract_frame(raw[1:], positions)
    if frame.empty:
        return ParsedTable(records=(), ok=True)

    frame["week_number"] = frame["week_key"].map(extract_week_number)
    dropped = int(frame["week_number"].isna().sum())
    if dropped:
        logger.debug("Dropped %d rows without a week number", dropped)
    frame = frame[frame["week_number"].notna()].copy()

    frame["amount"] = frame["amount"].map(parse_amount)
    frame["budget"] = frame["budget"].map(parse_amount)
    frame["date"] = frame["date"].map(parse_date)
    frame["is_initialiser"] = frame["description"].map(is_initialiser)

    records = tuple(
        TransactionRecord(
            week_key=row.week_key.strip(),
            week_number=int(row.week_number),
            amount=float(row.amount),
            category=row.category,
            description=row.description,
            date=row.date if isinstance(row.date, date) else None,
            budget=float(row.budget),
            is_initialiser=bool(row.is_initialiser),
        )
        for row in frame.itertuples(index=False)
    )
    return ParsedTable(records=records, ok=True)


def require_records(raw: Optional[RawTable]) -> Tuple[TransactionRecord, ...]:
    """Raising form of :func:`parse_table` used by the service layer."""
    if not raw or len(raw) <= 1:
        raise NoDataError()
    parsed = parse_table(raw)
    if not parsed.ok:
        raise ParseError(f"Required columns not found: {', '.join(parsed.missing_columns)}")
    return parsed.records


def records_frame(records: Sequence[TransactionRecord]) -> pd.DataFrame:
    """Return the records as a DataFrame with one column per field."""
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame([asdict(record) for record in records], columns=RECORD_COLUMNS)


def known_categories(records: Iterable[TransactionRecord]) -> List[str]:
    """Categories in order of first appearance, blanks skipped."""
    seen: Dict[str, None] = {}
    for record in records:
        if record.category and record.category not in seen:
            seen[record.category] = None
    return list(seen)


# ---------------------------------------------------------------------------
# Transaction log
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogEntry:
    """One row of the four-column transaction log.

    ``row_index`` is the 1-based sheet row; fields are kept as stored text.
    """

    row_index: int
    date: str = ""
    amount: str = ""
    category: str = ""
    description: str = ""

    def to_row(self) -> List[str]:
        return [self.date, self.amount, self.category, self.description]


def parse_log(raw: Optional[RawTable]) -> List[LogEntry]:
    """Read the transaction log (no header row) into entries."""
    entries: List[LogEntry] = []
    for index, row in enumerate(raw or [], start=1):
        if not any(str(cell or "").strip() for cell in row):
            continue
        entries.append(
            LogEntry(
                row_index=index,
                date=_cell(row, 0),
                amount=_cell(row, 1),
                category=_cell(row, 2),
                description=_cell(row, 3),
            )
        )
    return entries


def select_entries(
    entries: Sequence[LogEntry],
    category: str = ALL_CATEGORIES,
    limit: Optional[int] = None,
) -> List[LogEntry]:
    """Filter by category, newest first, truncated to ``limit``.

    Entries whose date cannot be parsed sort after all dated entries.
    """
    selected = [entry for entry in entries if category == ALL_CATEGORIES or entry.category == category]

    def sort_key(entry: LogEntry) -> Tuple[int, int]:
        parsed = parse_date(entry.date)
        if parsed is None:
            return (1, 0)
        return (0, -parsed.toordinal())

    selected.sort(key=sort_key)
    if limit is not None:
        selected = selected[:limit]
    return selected
