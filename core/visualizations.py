"""
Visualization components using Plotly for interactive charts.

Figures are built from profiler output (histogram bins, frequency tables)
so the UI renders exactly what the insight report describes.
"""

from typing import List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from core.dataset import Dataset, is_empty, normalize_value, numeric_series, to_frame
from core.profiling import ColumnStats


def create_histogram(stats: ColumnStats) -> go.Figure:
    """
    Create a histogram from precomputed bins.

    Args:
        stats: Numeric column statistics

    Returns:
        Plotly figure object
    """
    if not stats.histogram:
        raise ValueError(f"Column '{stats.name}' has no numeric values to plot")

    fig = go.Figure(go.Bar(
        x=[b.label for b in stats.histogram],
        y=[b.count for b in stats.histogram],
    ))
    fig.update_layout(
        title=f"Distribution of {stats.name}",
        xaxis_title=stats.name,
        yaxis_title="Count",
        bargap=0.05,
        showlegend=False,
    )
    return fig


def create_frequency_chart(stats: ColumnStats, kind: str = "bar") -> go.Figure:
    """
    Create a bar or pie chart of the most frequent values.

    Args:
        stats: Categorical column statistics
        kind: "bar" or "pie"

    Returns:
        Plotly figure object
    """
    if not stats.top_values:
        raise ValueError(f"Column '{stats.name}' has no values to plot")

    labels = list(stats.top_values.keys())
    counts = list(stats.top_values.values())

    if kind == "pie":
        fig = go.Figure(go.Pie(labels=labels, values=counts))
        fig.update_layout(title=f"Share of {stats.name}")
        return fig
    if kind != "bar":
        raise ValueError(f"Unknown chart kind: {kind}")

    fig = go.Figure(go.Bar(x=labels, y=counts))
    fig.update_layout(
        title=f"Top {len(labels)} Values in {stats.name}",
        xaxis_title=stats.name,
        yaxis_title="Count",
        showlegend=False,
    )
    return fig


def create_grouped_bar(
    dataset: Dataset,
    category_col: str,
    value_col: str,
    top_n: Optional[int] = 10,
) -> go.Figure:
    """Sum of a numeric column per category, largest first."""
    df = to_frame(dataset)
    frame = pd.DataFrame({
        category_col: df[category_col].map(lambda v: None if is_empty(v) else normalize_value(v)),
        value_col: numeric_series(df[value_col]),
    }).dropna()

    agg = frame.groupby(category_col)[value_col].sum().sort_values(ascending=False)
    if top_n:
        agg = agg.head(top_n)

    fig = go.Figure(go.Bar(x=agg.index, y=agg.values))
    fig.update_layout(
        title=f"{value_col} by {category_col}",
        xaxis_title=category_col,
        yaxis_title=value_col,
        showlegend=False,
    )
    return fig


def create_scatter(dataset: Dataset, x_col: str, y_col: str) -> go.Figure:
    """Scatter plot of two numeric columns, skipping non-numeric cells."""
    df = to_frame(dataset)
    frame = pd.DataFrame({
        x_col: numeric_series(df[x_col]),
        y_col: numeric_series(df[y_col]),
    }).dropna()

    fig = px.scatter(frame, x=x_col, y=y_col, title=f"{y_col} vs {x_col}")
    return fig


def available_charts(stats: ColumnStats) -> List[str]:
    if stats.detected_type == "numeric":
        return ["histogram"] if stats.histogram else []
    return ["bar", "pie"] if stats.top_values else []
