"""Report orchestration and transaction log operations.

:class:`BudgetService` is the only place that touches the store.  Each report
request performs one blocking read of the analytics range, then runs the
parser, budget resolver, aggregator and the matching report builder over
that snapshot.  Failures are returned as :class:`~household_budget.errors.Outcome`
values instead of being raised, so the UI can show a message and leave any
previously rendered report untouched.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple, Union

from . import budgets as budget_resolver
from .aggregation import GroupKey, aggregate_weekly
from .config import ALL_CATEGORIES, ANALYTICS_RANGE, LOG_RANGE, WEEK_CONVENTION
from .data_processing import (
    LogEntry,
    TransactionRecord,
    known_categories,
    parse_amount,
    parse_date,
    parse_log,
    require_records,
    select_entries,
)
from .errors import BudgetError, Outcome, StoreError, ValidationError
from .logging_setup import get_logger
from .reports import build_cumulative, build_period, build_scorecard
from .store import RangeSpec, TransactionStore
from .week_numbering import WeekConvention, current_week

logger = get_logger(__name__)


@dataclass(frozen=True)
class CumulativeRequest:
    category: str = ALL_CATEGORIES
    current_week: Optional[int] = None


@dataclass(frozen=True)
class PeriodRequest:
    category: str = ALL_CATEGORIES
    week: Optional[int] = None


@dataclass(frozen=True)
class ScorecardRequest:
    week: Optional[int] = None


ReportRequest = Union[CumulativeRequest, PeriodRequest, ScorecardRequest]


def validate_expense(date_text: str, amount_text: str, category: str) -> Dict[str, str]:
    """Field errors for a new expense, empty when the entry can be logged."""
    errors: Dict[str, str] = {}
    if not (date_text or "").strip() or parse_date(date_text) is None:
        errors["date"] = "Date is required"
    if not (amount_text or "").strip() or parse_amount(amount_text) <= 0:
        errors["amount"] = "Valid amount is required"
    if not (category or "").strip():
        errors["category"] = "Category is required"
    return errors


class BudgetService:
    """Runs report requests and transaction log edits against a store."""

    def __init__(
        self,
        store: TransactionStore,
        convention: Union[WeekConvention, str] = WEEK_CONVENTION,
        analytics_range: str = ANALYTICS_RANGE,
        log_range: str = LOG_RANGE,
        today: Optional[Callable[[], date]] = None,
    ):
        self.store = store
        self.convention = WeekConvention.parse(convention)
        self.analytics_range = analytics_range
        self.log_range = RangeSpec.parse(log_range)
        self._today = today or date.today

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def reference_week(self, week: Optional[int] = None) -> int:
        """``week`` if given, otherwise the current week under the convention."""
        if week is not None:
            return int(week)
        return current_week(self.convention, self._today())

    def _fetch_records(self) -> Tuple[TransactionRecord, ...]:
        raw = self.store.read_range(self.analytics_range)
        return require_records(raw)

    def run(self, request: ReportRequest) -> Outcome:
        """Compute one report from a fresh snapshot of the analytics table."""
        started = time.perf_counter()
        try:
            records = self._fetch_records()
            if isinstance(request, CumulativeRequest):
                report = self._cumulative(records, request)
            elif isinstance(request, PeriodRequest):
                report = self._period(records, request)
            elif isinstance(request, ScorecardRequest):
                report = self._scorecard(records, request)
            else:
                raise TypeError(f"Unsupported report request {type(request).__name__}")
        except StoreError as exc:
            logger.error("Report %s abandoned: %s", type(request).__name__, exc.message)
            return Outcome.failure(exc)
        except BudgetError as exc:
            logger.warning("Report %s not produced: %s", type(request).__name__, exc.message)
            return Outcome.failure(exc)
        logger.debug("%s built in %.3fs", type(request).__name__, time.perf_counter() - started)
        return Outcome.success(report)

    def _cumulative(self, records, request: CumulativeRequest):
        spend = aggregate_weekly(
            records,
            category=request.category,
            exclude_future=True,
            today=self._today(),
        )
        weekly_budget = budget_resolver.resolve_budget(records, request.category)
        if spend.matched == 0 and weekly_budget <= 0:
            raise ValidationError("No data available for the selected category")
        return build_cumulative(
            spend,
            weekly_budget,
            self.reference_week(request.current_week),
            category=request.category,
        )

    def _period(self, records, request: PeriodRequest):
        spend = aggregate_weekly(
            records,
            category=request.category,
            week=request.week,
            key=GroupKey.WEEK_KEY,
        )
        weekly_budget = budget_resolver.resolve_budget(records, request.category)
        report = build_period(spend, weekly_budget, category=request.category, week=request.week)
        if not report.points:
            raise ValidationError()
        return report

    def _scorecard(self, records, request: ScorecardRequest):
        week = self.reference_week(request.week)
        spend = aggregate_weekly(
            [record for record in records if record.category],
            key=GroupKey.WEEK_CATEGORY,
        )
        scorecard = build_scorecard(spend, budget_resolver.budget_map(records), week)
        if scorecard.category_count == 0:
            raise ValidationError("No categories have a weekly budget")
        return scorecard

    def categories(self) -> Outcome:
        """Categories present in the analytics table, first-seen order."""
        try:
            return Outcome.success(known_categories(self._fetch_records()))
        except BudgetError as exc:
            return Outcome.failure(exc)

    # ------------------------------------------------------------------
    # Transaction log
    # ------------------------------------------------------------------

    def _read_log(self) -> List[LogEntry]:
        return parse_log(self.store.read_range(str(self.log_range)))

    def list_transactions(self, category: str = ALL_CATEGORIES, limit: Optional[int] = None) -> Outcome:
        """Logged transactions, newest first, filtered and truncated."""
        try:
            entries = self._read_log()
        except StoreError as exc:
            logger.error("Could not read transaction log: %s", exc.message)
            return Outcome.failure(exc)
        return Outcome.success(select_entries(entries, category, limit))

    def _write(self, action: str, operation: Callable[[], None]) -> Outcome:
        try:
            operation()
            entries = self._read_log()
        except StoreError as exc:
            logger.error("Failed to %s transaction: %s", action, exc.message)
            return Outcome.failure(StoreError(f"Failed to {action} transaction: {exc.message}"))
        return Outcome.success(entries)

    def log_expense(self, entry: LogEntry) -> Outcome:
        """Append an expense to the log; the refreshed log is returned."""
        errors = validate_expense(entry.date, entry.amount, entry.category)
        if errors:
            return Outcome.failure(ValidationError("; ".join(errors.values())))
        return self._write("append", lambda: self.store.append_row(str(self.log_range), entry.to_row()))

    def update_transaction(self, entry: LogEntry) -> Outcome:
        """Overwrite ``entry.row_index`` in place."""
        target = str(self.log_range.for_row(entry.row_index))
        return self._write("update", lambda: self.store.update_row(target, entry.to_row()))

    def delete_transaction(self, entry: LogEntry) -> Outcome:
        """Remove ``entry.row_index``; later rows shift up."""

        def _delete() -> None:
            sheet_id = self.store.sheet_id(self.log_range.sheet)
            self.store.delete_row(sheet_id, entry.row_index)

        return self._write("delete", _delete)
