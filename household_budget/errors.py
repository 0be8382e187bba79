"""Error taxonomy and the typed outcome returned by the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class BudgetError(Exception):
    """Base class for every failure surfaced to the dashboard."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ParseError(BudgetError):
    """Required columns could not be located in the source table."""

    default_message = "Required columns not found"


class NoDataError(BudgetError):
    """The source table is empty or contains only a header row."""

    default_message = "No data found in the sheet"


class StoreError(BudgetError):
    """The transaction store failed to read or write."""

    default_message = "Failed to fetch data from the store"


class ValidationError(BudgetError):
    """The requested filter combination matched nothing."""

    default_message = "No data available for the selected filters"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the error that prevented computing it."""

    value: Optional[T] = None
    error: Optional[BudgetError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    @classmethod
    def success(cls, value: Any) -> "Outcome[Any]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BudgetError) -> "Outcome[Any]":
        return cls(error=error)
