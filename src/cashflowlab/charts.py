"""
Chart functions for visualizing cashflow projections.

All chart functions return (figure, tidy_dataframe_used) for consistency.
Balances are stored in cents and plotted in currency units.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .core.results import Projection
from .kpi import danger_ranges

_RANGE_COLORS = {
    "both": "rgba(220, 38, 38, 0.25)",
    "optimistic": "rgba(220, 38, 38, 0.15)",
    "pessimistic": "rgba(245, 158, 11, 0.15)",
}


def balance_vs_time(projection: Projection) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot both scenario balances over the projection horizon.

    Danger ranges are shaded behind the lines and the zero line is marked, so
    days on which a scenario goes negative stand out.

    **Args:**
        projection: Projection from :func:`calculate_cashflow` or a rebased one

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used) where the frame has
        ``date``, ``scenario`` and ``balance`` (currency units) columns

    **Example:**
        ```python
        from cashflowlab import balance_vs_time, calculate_cashflow

        projection = calculate_cashflow(engine_input)
        fig, data = balance_vs_time(projection)
        fig.show()
        ```
    """
    frame = projection.to_frame()
    tidy = (
        frame[["optimistic_balance", "pessimistic_balance"]]
        .rename(columns=lambda col: col.removesuffix("_balance"))
        .reset_index()
        .melt(id_vars="date", var_name="scenario", value_name="balance")
    )
    tidy["balance"] = tidy["balance"] / 100

    fig = px.line(
        tidy,
        x="date",
        y="balance",
        color="scenario",
        title="Projected Balance",
        labels={"balance": "Balance", "date": "Date"},
    )
    fig.add_hline(y=0, line_dash="dot", line_color="gray")
    for danger in danger_ranges(projection):
        fig.add_vrect(
            x0=pd.Timestamp(danger.start) - pd.Timedelta(hours=12),
            x1=pd.Timestamp(danger.end) + pd.Timedelta(hours=12),
            fillcolor=_RANGE_COLORS[danger.scenario],
            line_width=0,
            layer="below",
        )

    fig.update_layout(hovermode="x unified", legend_title="Scenario")

    return fig, tidy


def daily_flows(projection: Projection) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot daily income (per scenario) and expenses as grouped bars.

    Args:
        projection: Projection to plot

    Returns:
        Tuple of (plotly_figure, tidy_dataframe_used) with ``date``, ``flow``
        and ``amount`` (currency units) columns; expenses are negative
    """
    frame = projection.to_frame()
    flows = frame[["optimistic_income", "pessimistic_income", "expenses"]].copy()
    flows["expenses"] = -flows["expenses"]
    tidy = flows.reset_index().melt(id_vars="date", var_name="flow", value_name="amount")
    tidy["amount"] = tidy["amount"] / 100

    fig = px.bar(
        tidy,
        x="date",
        y="amount",
        color="flow",
        barmode="group",
        title="Daily Cash Flows",
        labels={"amount": "Amount", "date": "Date", "flow": "Flow"},
    )

    return fig, tidy


def save_chart(fig: go.Figure, filename: str, format: str = "html") -> None:
    """
    Save chart to file.

    Args:
        fig: Plotly figure
        filename: Output filename
        format: Output format ('html', 'png', 'pdf', 'svg')
    """
    if format == "html":
        fig.write_html(filename)
    elif format in {"png", "pdf", "svg"}:
        fig.write_image(filename, format=format)
    else:
        raise ValueError(f"Unsupported format: {format}")
