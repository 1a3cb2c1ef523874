"""Reusable metric card components for the dashboard."""

import streamlit as st

from src.analytics.queries import format_rate


def kpi_row(metrics: list[tuple[str, str, str | None]]) -> None:
    """Display a row of KPI cards.

    Args:
        metrics: List of (label, value, delta) tuples.
    """
    cols = st.columns(len(metrics))
    for col, (label, value, delta) in zip(cols, metrics):
        with col:
            st.metric(label=label, value=value, delta=delta)


def rate_row(rates: list[tuple[str, int]]) -> None:
    """Display a row of bps figures as percentages."""
    kpi_row([(label, format_rate(bps), None) for label, bps in rates])
