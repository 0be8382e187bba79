"""Streamlit app for the household budget dashboard.

The app has five sections: an expense logger, the list of previous
transactions (with edit and delete), the weekly spending chart, the
cumulative budget tracker and the weekly scorecard.  Every report is loaded
on demand with a button; a failed load shows an error and leaves the last
successful report on screen until the next successful load.

To run the dashboard from the command line::

    streamlit run household_budget/dashboard.py

or use ``python run_dashboard.py`` from the project root.
"""

from __future__ import annotations

import os
import sys
from datetime import date
from typing import Any, Dict, List, Optional

import streamlit as st

# Conditional imports to support execution both as part of a package and
# directly via ``streamlit run household_budget/dashboard.py``.
if __package__:
    from . import config
    from . import visualization as viz
    from .data_processing import LogEntry, parse_amount, select_entries
    from .errors import Outcome
    from .formatting import escape_dollar_for_markdown, format_currency, format_delta, format_percent
    from .logging_setup import configure_logging
    from .preferences import limit_value, load_preferences, save_preferences
    from .service import BudgetService, CumulativeRequest, PeriodRequest, ScorecardRequest, validate_expense
    from .store import WorkbookStore
    from .week_numbering import WeekConvention
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from household_budget import config  # type: ignore
    from household_budget import visualization as viz  # type: ignore
    from household_budget.data_processing import LogEntry, parse_amount, select_entries  # type: ignore
    from household_budget.errors import Outcome  # type: ignore
    from household_budget.formatting import (  # type: ignore
        escape_dollar_for_markdown,
        format_currency,
        format_delta,
        format_percent,
    )
    from household_budget.logging_setup import configure_logging  # type: ignore
    from household_budget.preferences import limit_value, load_preferences, save_preferences  # type: ignore
    from household_budget.service import (  # type: ignore
        BudgetService,
        CumulativeRequest,
        PeriodRequest,
        ScorecardRequest,
        validate_expense,
    )
    from household_budget.store import WorkbookStore  # type: ignore
    from household_budget.week_numbering import WeekConvention  # type: ignore


WEEK_OPTIONS = ["All"] + [str(week) for week in range(1, config.MAX_WEEK_NUMBER + 1)]


def remember(key: str, outcome: Outcome) -> Optional[Any]:
    """Keep the last successful value for ``key`` in session state.

    On failure the error is shown and whatever was stored before is returned
    unchanged.
    """
    if outcome.ok:
        st.session_state[key] = outcome.value
    else:
        st.error(outcome.message)
    return st.session_state.get(key)


def _rerun() -> None:
    rerun = getattr(st, "rerun", None) or getattr(st, "experimental_rerun", None)
    if rerun is not None:
        rerun()


def _category_options(service: BudgetService) -> List[str]:
    outcome = service.categories()
    found = outcome.value if outcome.ok else []
    merged = list(config.DEFAULT_CATEGORIES)
    merged.extend(category for category in found if category not in merged)
    return merged


def _render_sidebar(preferences: Dict[str, Any], categories: List[str]) -> Dict[str, Any]:
    st.sidebar.header("Filters")
    options = [config.ALL_CATEGORIES] + categories
    current = preferences.get("category")
    category = st.sidebar.selectbox(
        "Category",
        options=options,
        index=options.index(current) if current in options else 0,
    )
    conventions = [convention.value for convention in WeekConvention]
    convention = st.sidebar.radio(
        "Week numbering",
        options=conventions,
        index=conventions.index(preferences.get("week_convention"))
        if preferences.get("week_convention") in conventions
        else 0,
        format_func=lambda value: "ISO-8601" if value == WeekConvention.ISO.value else "Monday-anchored",
        help="Must match the convention used for the WeekNum column",
    )
    limit = st.sidebar.selectbox(
        "Transactions to show",
        options=config.TRANSACTION_LIMITS,
        index=config.TRANSACTION_LIMITS.index(preferences.get("transaction_limit", "10")),
    )
    updated = {"category": category, "week_convention": convention, "transaction_limit": limit}
    if updated != preferences:
        save_preferences(updated)
    return updated


def _render_expense_logger(service: BudgetService, categories: List[str]) -> None:
    st.subheader("Log an expense")
    with st.form("expense_logger", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            spent_on = st.date_input("Date", value=date.today())
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        with col2:
            category = st.selectbox("Category", options=[""] + categories)
            description = st.text_input("Description")
        submitted = st.form_submit_button("Add expense")

    if not submitted:
        return
    date_text = spent_on.isoformat() if spent_on else ""
    amount_text = f"{amount:.2f}" if amount else ""
    errors = validate_expense(date_text, amount_text, category)
    if errors:
        for message in errors.values():
            st.warning(message)
        return
    entry = LogEntry(row_index=0, date=date_text, amount=amount_text, category=category, description=description)
    outcome = service.log_expense(entry)
    if outcome.ok:
        st.success("Expense logged")
    else:
        st.error(outcome.message)


def _render_transactions(service: BudgetService, filters: Dict[str, Any], categories: List[str]) -> None:
    st.subheader("Previous transactions")
    if st.button("Load transactions"):
        remember(
            "transactions",
            service.list_transactions(filters["category"], limit_value(filters["transaction_limit"])),
        )
    entries: List[LogEntry] = st.session_state.get("transactions") or []
    if not entries:
        st.info("No transactions loaded yet.")
        return

    for entry in entries:
        label = f"{entry.date} | {entry.category} | {escape_dollar_for_markdown(format_currency(parse_amount(entry.amount)))}"
        options = categories if entry.category in categories else [entry.category] + categories
        with st.expander(label):
            with st.form(f"edit_{entry.row_index}"):
                edited_date = st.text_input("Date", value=entry.date)
                edited_amount = st.text_input("Amount", value=entry.amount)
                edited_category = st.selectbox(
                    "Category",
                    options=options,
                    index=options.index(entry.category),
                )
                edited_description = st.text_input("Description", value=entry.description)
                save, delete = st.columns(2)
                with save:
                    save_clicked = st.form_submit_button("Save")
                with delete:
                    delete_clicked = st.form_submit_button("Delete")
            if save_clicked:
                edited = LogEntry(
                    row_index=entry.row_index,
                    date=edited_date,
                    amount=edited_amount,
                    category=edited_category,
                    description=edited_description,
                )
                _apply_edit(service.update_transaction(edited), filters)
            elif delete_clicked:
                _apply_edit(service.delete_transaction(entry), filters)


def _apply_edit(outcome: Outcome, filters: Dict[str, Any]) -> None:
    if not outcome.ok:
        st.error(outcome.message)
        return
    st.session_state["transactions"] = select_entries(
        outcome.value, filters["category"], limit_value(filters["transaction_limit"])
    )
    _rerun()


def _render_spending_chart(service: BudgetService, filters: Dict[str, Any]) -> None:
    st.subheader("Weekly spending")
    week_label = st.selectbox("Week", options=WEEK_OPTIONS, index=0)
    st.caption(f"Today is {date.today():%A %d %B %Y}, week {service.reference_week()}")
    if st.button("Load chart"):
        week = None if week_label == "All" else int(week_label)
        remember("period_report", service.run(PeriodRequest(category=filters["category"], week=week)))
    report = st.session_state.get("period_report")
    if report is None:
        st.info('Select a category and week, then click "Load chart".')
        return
    st.plotly_chart(viz.create_period_chart(report), use_container_width=True)


def _render_cumulative_tracker(service: BudgetService, filters: Dict[str, Any]) -> None:
    st.subheader("Cumulative budget tracker")
    if st.button("Load tracker"):
        remember("cumulative_report", service.run(CumulativeRequest(category=filters["category"])))
    report = st.session_state.get("cumulative_report")
    if report is None:
        st.info('Select a category and click "Load tracker" to view cumulative spending.')
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total spend to date", format_currency(report.total_spend_to_date), format_delta(report.delta) + " vs budget", delta_color="inverse")
    col2.metric("Total budget to date", format_currency(report.total_budget_to_date), f"Through week {report.current_week}", delta_color="off")
    col3.metric("Average weekly spend", format_currency(report.average_weekly_spend), format_delta(report.weekly_delta) + " vs budget", delta_color="inverse")
    col4.metric("Budgeted weekly spend", format_currency(report.weekly_budget), "Target per week", delta_color="off")
    st.plotly_chart(viz.create_cumulative_chart(report), use_container_width=True)


def _scorecard_columns(scorecard) -> Dict[str, Any]:
    """Show the rescaled bar width as a progress bar on the chart's scale."""
    return {
        "Percent Used": st.column_config.NumberColumn(format="%.0f%%"),
        "Bar Width": st.column_config.ProgressColumn(
            f"Used (of {scorecard.chart_scale}%)",
            format="%.0f",
            min_value=0,
            max_value=100,
        ),
    }


def _render_scorecard(service: BudgetService) -> None:
    st.subheader(f"Week {service.reference_week()} spending scorecard")
    if st.button("Load scorecard"):
        remember("scorecard", service.run(ScorecardRequest()))
    scorecard = st.session_state.get("scorecard")
    if scorecard is None:
        st.info('Click "Load scorecard" to compare this week against last week.')
        return

    col1, col2, col3 = st.columns(3)
    col1.metric(
        "This week",
        format_currency(scorecard.total_this_week),
        f"{format_delta(scorecard.difference)} ({format_percent(scorecard.percent_change, 1)}) vs last week",
        delta_color="inverse",
    )
    col2.metric("Weekly budget", format_currency(scorecard.total_budget))
    col3.metric("Categories on track", f"{scorecard.on_track} / {scorecard.category_count}")
    st.plotly_chart(viz.create_scorecard_chart(scorecard), use_container_width=True)
    st.dataframe(
        viz.scorecard_frame(scorecard),
        use_container_width=True,
        hide_index=True,
        column_config=_scorecard_columns(scorecard),
    )


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Household Budget", layout="wide", initial_sidebar_state="expanded")
    configure_logging(config.LOG_LEVEL)
    config.ensure_data_directories()
    st.title("Household Budget")

    if not config.WORKBOOK_PATH.exists():
        st.warning(f"Workbook not found at {config.WORKBOOK_PATH}. Set HOUSEHOLD_BUDGET_WORKBOOK to point at it.")
        st.stop()

    preferences = load_preferences()
    store = WorkbookStore(config.WORKBOOK_PATH)
    service = BudgetService(store, convention=preferences["week_convention"])
    categories = _category_options(service)
    filters = _render_sidebar(preferences, categories)
    service = BudgetService(store, convention=filters["week_convention"])

    logger_tab, transactions_tab, chart_tab, tracker_tab, scorecard_tab = st.tabs(
        ["Log expense", "Transactions", "Weekly spending", "Cumulative tracker", "Scorecard"]
    )
    with logger_tab:
        _render_expense_logger(service, categories)
    with transactions_tab:
        _render_transactions(service, filters, categories)
    with chart_tab:
        _render_spending_chart(service, filters)
    with tracker_tab:
        _render_cumulative_tracker(service, filters)
    with scorecard_tab:
        _render_scorecard(service)


if __name__ == "__main__":  # pragma: no cover
    main()
