"""Transaction store backends.

The dashboard only talks to a :class:`TransactionStore`: something that can
read a named range back as a grid of text cells, append a row, overwrite a
row, and delete a row by sheet identifier.  Two implementations are
provided:

* :class:`MemoryStore` keeps the sheets in memory (tests, demos).
* :class:`WorkbookStore` reads and writes an ``.xlsx`` workbook on disk with
  openpyxl.  The workbook is reopened for every call so each read is a fresh
  snapshot, and it is saved after every write.

Ranges use spreadsheet A1 notation: ``Tracker_Sheet!A:D`` for whole columns,
``Tracker_Sheet!A5:D5`` for a single row.  Row numbers are 1-based.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from openpyxl import Workbook, load_workbook
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from .errors import StoreError
from .logging_setup import get_logger

logger = get_logger(__name__)

RawTable = List[List[str]]

_CELL_RANGE = re.compile(
    r"^(?P<start_col>[A-Za-z]+)(?P<start_row>\d+)?(?::(?P<end_col>[A-Za-z]+)(?P<end_row>\d+)?)?$"
)


@dataclass(frozen=True)
class RangeSpec:
    """A sheet name plus an optional column window and row window."""

    sheet: str
    first_col: int = 1
    last_col: Optional[int] = None
    first_row: Optional[int] = None
    last_row: Optional[int] = None

    @classmethod
    def parse(cls, text: Union[str, "RangeSpec"]) -> "RangeSpec":
        if isinstance(text, RangeSpec):
            return text
        if "!" not in text:
            return cls(sheet=text.strip().strip("'"))
        sheet, _, cells = text.rpartition("!")
        sheet = sheet.strip().strip("'")
        match = _CELL_RANGE.match(cells.strip())
        if not sheet or not match:
            raise ValueError(f"Invalid range '{text}'.")
        start_col = column_index_from_string(match.group("start_col").upper())
        end_col = match.group("end_col")
        start_row = match.group("start_row")
        end_row = match.group("end_row")
        return cls(
            sheet=sheet,
            first_col=start_col,
            last_col=column_index_from_string(end_col.upper()) if end_col else start_col,
            first_row=int(start_row) if start_row else None,
            last_row=int(end_row) if end_row else (int(start_row) if start_row and not end_col else None),
        )

    def for_row(self, row_index: int) -> "RangeSpec":
        """Same columns, restricted to one row."""
        return replace(self, first_row=row_index, last_row=row_index)

    @property
    def width(self) -> Optional[int]:
        if self.last_col is None:
            return None
        return self.last_col - self.first_col + 1

    def __str__(self) -> str:
        if self.last_col is None:
            return self.sheet
        start = f"{get_column_letter(self.first_col)}{self.first_row or ''}"
        end = f"{get_column_letter(self.last_col)}{self.last_row or ''}"
        return f"{self.sheet}!{start}:{end}"


class TransactionStore(Protocol):
    """Contract the dashboard relies on.  Every method raises ``StoreError``."""

    def read_range(self, range_spec: str) -> RawTable:
        ...

    def append_row(self, range_spec: str, row: Sequence[str]) -> None:
        ...

    def update_row(self, range_spec: str, row: Sequence[str]) -> None:
        ...

    def sheet_id(self, sheet_name: str) -> int:
        ...

    def delete_row(self, sheet_id: int, row_index: int) -> None:
        ...


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------


def cell_text(value: Any) -> str:
    """Render a cell value the way a spreadsheet displays it as text."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _trim(row: List[str]) -> List[str]:
    end = len(row)
    while end and row[end - 1] == "":
        end -= 1
    return row[:end]


def window(grid: Sequence[Sequence[Any]], spec: RangeSpec) -> RawTable:
    """Cut ``spec`` out of ``grid``; trailing empty cells and rows are dropped."""
    first_row = (spec.first_row or 1) - 1
    last_row = spec.last_row if spec.last_row is not None else len(grid)
    start = spec.first_col - 1
    rows: RawTable = []
    for raw in grid[first_row:last_row]:
        cells = list(raw[start:spec.last_col] if spec.last_col is not None else raw[start:])
        rows.append(_trim([cell_text(cell) for cell in cells]))
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _check_row(spec: RangeSpec, row: Sequence[str]) -> List[str]:
    values = ["" if value is None else str(value) for value in row]
    if spec.width is not None and len(values) > spec.width:
        raise StoreError(f"Row has {len(values)} fields but range {spec} holds {spec.width}")
    return values


def _target_row(spec: RangeSpec) -> int:
    if spec.first_row is None:
        raise StoreError(f"Range {spec} does not name a row to update")
    return spec.first_row


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class MemoryStore:
    """Sheets held as lists of text rows."""

    def __init__(self, sheets: Optional[Dict[str, RawTable]] = None):
        self.sheets: Dict[str, RawTable] = copy.deepcopy(sheets or {})

    def _sheet(self, name: str) -> RawTable:
        if name not in self.sheets:
            raise StoreError(f"Sheet '{name}' not found")
        return self.sheets[name]

    def read_range(self, range_spec: str) -> RawTable:
        spec = RangeSpec.parse(range_spec)
        return window(self._sheet(spec.sheet), spec)

    def append_row(self, range_spec: str, row: Sequence[str]) -> None:
        spec = RangeSpec.parse(range_spec)
        values = _check_row(spec, row)
        grid = self._sheet(spec.sheet)
        grid.append([""] * (spec.first_col - 1) + values)

    def update_row(self, range_spec: str, row: Sequence[str]) -> None:
        spec = RangeSpec.parse(range_spec)
        values = _check_row(spec, row)
        grid = self._sheet(spec.sheet)
        index = _target_row(spec)
        while len(grid) < index:
            grid.append([])
        target = list(grid[index - 1])
        end = spec.first_col - 1 + len(values)
        if len(target) < end:
            target.extend([""] * (end - len(target)))
        target[spec.first_col - 1:end] = values
        grid[index - 1] = target

    def sheet_id(self, sheet_name: str) -> int:
        names = list(self.sheets)
        if sheet_name not in names:
            raise StoreError(f"Sheet '{sheet_name}' not found")
        return names.index(sheet_name)

    def delete_row(self, sheet_id: int, row_index: int) -> None:
        names = list(self.sheets)
        if not 0 <= sheet_id < len(names):
            raise StoreError(f"No sheet with id {sheet_id}")
        grid = self.sheets[names[sheet_id]]
        if not 1 <= row_index <= len(grid):
            raise StoreError(f"Row {row_index} is out of range")
        del grid[row_index - 1]


# ---------------------------------------------------------------------------
# Workbook backend
# ---------------------------------------------------------------------------


class WorkbookStore:
    """Transaction store backed by an ``.xlsx`` workbook.

    Reads open the workbook with ``data_only=True`` so formula cells come back
    as their last computed value.  openpyxl cannot keep those cached values
    when it saves, so writes are refused with ``StoreError`` while any sheet
    holds a formula; the workbook must contain literal values only to be
    edited through this store.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def create(cls, path: Union[str, Path], sheets: Dict[str, RawTable]) -> "WorkbookStore":
        """Write a new workbook holding ``sheets`` and return a store for it."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        workbook = Workbook()
        if sheets:
            workbook.remove(workbook.active)
        for name, rows in sheets.items():
            sheet = workbook.create_sheet(title=name)
            for row in rows:
                sheet.append(list(row))
        workbook.save(target)
        return cls(target)

    def _open(self, *, data_only: bool):
        try:
            return load_workbook(self.path, data_only=data_only)
        except (OSError, InvalidFileException, KeyError, ValueError) as exc:
            logger.error("Could not open workbook %s: %s", self.path, exc)
            raise StoreError(f"Failed to open workbook {self.path.name}: {exc}") from exc

    def _open_for_write(self):
        workbook = self._open(data_only=False)
        formulas = [
            f"{sheet.title}!{cell.coordinate}"
            for sheet in workbook.worksheets
            for row in sheet.iter_rows()
            for cell in row
            if cell.data_type == "f"
        ]
        if formulas:
            workbook.close()
            logger.error("Refusing to write %s: %d formula cells would lose their values", self.path, len(formulas))
            raise StoreError(
                f"Workbook {self.path.name} has formula cells (first: {formulas[0]}); "
                "saving would discard their computed values"
            )
        return workbook

    def _save(self, workbook) -> None:
        try:
            workbook.save(self.path)
        except OSError as exc:
            logger.error("Could not save workbook %s: %s", self.path, exc)
            raise StoreError(f"Failed to save workbook {self.path.name}: {exc}") from exc

    @staticmethod
    def _worksheet(workbook, name: str):
        if name not in workbook.sheetnames:
            raise StoreError(f"Sheet '{name}' not found")
        return workbook[name]

    def read_range(self, range_spec: str) -> RawTable:
        spec = RangeSpec.parse(range_spec)
        workbook = self._open(data_only=True)
        try:
            sheet = self._worksheet(workbook, spec.sheet)
            grid = [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
        return window(grid, spec)

    def _last_used_row(self, sheet, spec: RangeSpec) -> int:
        last = 0
        last_col = spec.last_col or sheet.max_column
        for row in sheet.iter_rows(min_col=spec.first_col, max_col=last_col):
            if any(cell.value not in (None, "") for cell in row):
                last = row[0].row
        return last

    def append_row(self, range_spec: str, row: Sequence[str]) -> None:
        spec = RangeSpec.parse(range_spec)
        values = _check_row(spec, row)
        workbook = self._open_for_write()
        sheet = self._worksheet(workbook, spec.sheet)
        target = self._last_used_row(sheet, spec) + 1
        for offset, value in enumerate(values):
            sheet.cell(row=target, column=spec.first_col + offset, value=value)
        self._save(workbook)
        logger.info("Appended row %d to %s", target, spec.sheet)

    def update_row(self, range_spec: str, row: Sequence[str]) -> None:
        spec = RangeSpec.parse(range_spec)
        values = _check_row(spec, row)
        target = _target_row(spec)
        workbook = self._open_for_write()
        sheet = self._worksheet(workbook, spec.sheet)
        for offset, value in enumerate(values):
            sheet.cell(row=target, column=spec.first_col + offset, value=value)
        self._save(workbook)
        logger.info("Updated row %d of %s", target, spec.sheet)

    def sheet_id(self, sheet_name: str) -> int:
        workbook = self._open(data_only=True)
        try:
            if sheet_name not in workbook.sheetnames:
                raise StoreError(f"Sheet '{sheet_name}' not found")
            return workbook.sheetnames.index(sheet_name)
        finally:
            workbook.close()

    def delete_row(self, sheet_id: int, row_index: int) -> None:
        workbook = self._open_for_write()
        if not 0 <= sheet_id < len(workbook.sheetnames):
            raise StoreError(f"No sheet with id {sheet_id}")
        sheet = workbook.worksheets[sheet_id]
        if not 1 <= row_index <= sheet.max_row:
            raise StoreError(f"Row {row_index} is out of range")
        sheet.delete_rows(row_index)
        self._save(workbook)
        logger.info("Deleted row %d of %s", row_index, sheet.title)
