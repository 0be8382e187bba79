#!/usr/bin/env python3
"""Print the weekly scorecard for a budget workbook."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from household_budget import config
from household_budget.formatting import format_currency, format_delta
from household_budget.logging_setup import configure_logging
from household_budget.service import BudgetService, ScorecardRequest
from household_budget.store import WorkbookStore
from household_budget.visualization import scorecard_frame


def main(workbook: Path, week: int | None = None, convention: str = config.WEEK_CONVENTION) -> int:
    service = BudgetService(WorkbookStore(workbook), convention=convention)
    outcome = service.run(ScorecardRequest(week=week))
    if not outcome.ok:
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1

    scorecard = outcome.value
    print(f"Week {scorecard.week}")
    print(f"This week: {format_currency(scorecard.total_this_week)} ({format_delta(scorecard.difference)} vs last week)")
    print(f"Budget:    {format_currency(scorecard.total_budget)}")
    print(f"On track:  {scorecard.on_track} / {scorecard.category_count}")
    print()
    table = scorecard_frame(scorecard).rename(columns={"Bar Width": f"Share of {scorecard.chart_scale}%"})
    print(table.to_string(index=False, float_format=lambda value: f"{value:,.2f}"))
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the weekly spending scorecard.')
    parser.add_argument('--workbook', type=Path, default=config.WORKBOOK_PATH, help='Path to the budget workbook')
    parser.add_argument('--week', type=int, default=None, help='Week to report (defaults to the current week)')
    parser.add_argument('--convention', choices=['monday', 'iso'], default=config.WEEK_CONVENTION)
    parser.add_argument('--log-level', default=None, help='Logging level name')
    args = parser.parse_args()
    configure_logging(args.log_level)
    sys.exit(main(args.workbook, week=args.week, convention=args.convention))
