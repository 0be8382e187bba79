"""Plotly visualisation helpers for the budget reports.

Each function accepts one of the report objects built in :mod:`reports` and
produces an interactive Plotly figure that Streamlit can render via
``st.plotly_chart``.  The figures only present data; every number they show
has already been computed by the report builders.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .reports import CumulativeReport, PeriodReport, Scorecard, bar_width

INK = "#2b2b2b"
OVER = "#d32f2f"
UNDER = "#4caf50"


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def cumulative_frame(report: CumulativeReport) -> pd.DataFrame:
    """One row per week with the cumulative spend, budget and status."""
    return pd.DataFrame(
        {
            "Week": [point.label for point in report.points],
            "Actual": [point.cumulative_spend for point in report.points],
            "Budget": [point.cumulative_budget for point in report.points],
            "Over Budget": [point.over_budget for point in report.points],
        }
    )


def create_cumulative_chart(report: Optional[CumulativeReport], title: str | None = None) -> go.Figure:
    """Cumulative spend bars against the linear budget line.

    Bars are red for weeks where cumulative spend is above the budget line
    and green otherwise.

    Parameters
    ----------
    report : CumulativeReport
        Output of :func:`reports.build_cumulative`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Combined bar and line chart.
    """
    if report is None or not report.points:
        return _empty_figure()
    df = cumulative_frame(report)
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=df["Week"],
            y=df["Actual"],
            name="Actual Cumulative Spending",
            marker_color=np.where(df["Over Budget"], OVER, UNDER),
            opacity=0.7,
        )
    )
    fig.add_trace(
        go.Scatter(
            x=df["Week"],
            y=df["Budget"],
            name="Budgeted Cumulative (Linear)",
            mode="lines",
            line=dict(color=INK, width=2),
        )
    )
    fig.update_layout(
        title=title or f"Cumulative spending: {report.category}",
        xaxis_title="Week",
        yaxis_title="Cumulative ($)",
        hovermode="x unified",
        yaxis=dict(rangemode="tozero", tickprefix="$"),
    )
    return fig


def period_frame(report: PeriodReport) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Week": [point.label for point in report.points],
            "Amount": [point.amount for point in report.points],
            "Budget": [point.budget for point in report.points],
        }
    )


def create_period_chart(report: Optional[PeriodReport], title: str | None = None) -> go.Figure:
    """Per-week spending bars with the flat weekly budget as a dashed line."""
    if report is None or not report.points:
        return _empty_figure()
    df = period_frame(report)
    fig = px.bar(df, x="Week", y="Amount", color_discrete_sequence=[INK])
    fig.data[0].name = report.series_name
    fig.data[0].showlegend = True
    fig.add_trace(
        go.Scatter(
            x=df["Week"],
            y=df["Budget"],
            name="Weekly Budget",
            mode="lines",
            line=dict(color=OVER, width=2, dash="dash"),
        )
    )
    fig.update_layout(
        title=title or report.series_name,
        xaxis_title="Week",
        yaxis_title="Spending ($)",
        xaxis=dict(type="category"),
        yaxis=dict(rangemode="tozero", tickprefix="$"),
    )
    return fig


def scorecard_frame(scorecard: Scorecard) -> pd.DataFrame:
    """Category rows with the bar width already rescaled by the chart scale."""
    return pd.DataFrame(
        {
            "Category": [score.category for score in scorecard.categories],
            "Spent": [score.this_week for score in scorecard.categories],
            "Budget": [score.budget for score in scorecard.categories],
            "Percent Used": [score.percent_used for score in scorecard.categories],
            "Bar Width": [bar_width(score.percent_used, scorecard.chart_scale) for score in scorecard.categories],
            "On Track": [score.on_track for score in scorecard.categories],
        }
    )


def create_scorecard_chart(scorecard: Optional[Scorecard], title: str | None = None) -> go.Figure:
    """Horizontal percent-of-budget bars on a 0..chart_scale axis.

    A marker line is drawn at 100% so over-budget categories stand out.
    """
    if scorecard is None or not scorecard.categories:
        return _empty_figure()
    df = scorecard_frame(scorecard)
    fig = go.Figure(
        go.Bar(
            x=df["Percent Used"],
            y=df["Category"],
            orientation="h",
            marker_color=np.where(df["On Track"], UNDER, OVER),
            text=[f"{value:.0f}%" for value in df["Percent Used"]],
            textposition="auto",
        )
    )
    fig.add_vline(x=100, line_dash="dash", line_color=INK)
    fig.update_layout(
        title=title or f"Week {scorecard.week} budget used",
        xaxis=dict(range=[0, scorecard.chart_scale], ticksuffix="%"),
        yaxis=dict(autorange="reversed"),
        showlegend=False,
    )
    return fig
