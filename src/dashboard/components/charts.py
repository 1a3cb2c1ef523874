"""Reusable Plotly chart components."""

import pandas as pd
import plotly.graph_objects as go

from src.data.constants import BPS, HEALTH_FACTOR_SAFE, WAD


def _pct(series: pd.Series) -> pd.Series:
    return series.astype(float) * 100 / BPS


def rate_curve_chart(
    df: pd.DataFrame,
    current_utilization_bps: int | None = None,
    kink_utilization_bps: int | None = None,
    title: str = "Interest Rate Curve",
) -> go.Figure:
    """Create an interactive rate curve chart.

    Args:
        df: DataFrame with columns: utilization_bps, borrow_rate_bps, supply_rate_bps.
        current_utilization_bps: If provided, marks current utilization on chart.
        kink_utilization_bps: If provided, marks the kink of the curve.
        title: Chart title.
    """
    fig = go.Figure()

    fig.add_trace(
        go.Scatter(
            x=_pct(df["utilization_bps"]),
            y=_pct(df["borrow_rate_bps"]),
            name="Borrow Rate",
            line=dict(color="#ef4444", width=2),
            hovertemplate="Utilization: %{x:.1f}%<br>Borrow Rate: %{y:.2f}%<extra></extra>",
        )
    )

    fig.add_trace(
        go.Scatter(
            x=_pct(df["utilization_bps"]),
            y=_pct(df["supply_rate_bps"]),
            name="Supply Rate",
            line=dict(color="#22c55e", width=2),
            hovertemplate="Utilization: %{x:.1f}%<br>Supply Rate: %{y:.2f}%<extra></extra>",
        )
    )

    if kink_utilization_bps is not None:
        fig.add_vline(
            x=kink_utilization_bps * 100 / BPS,
            line_dash="dot",
            line_color="#f59e0b",
            annotation_text="Kink",
        )

    if current_utilization_bps is not None:
        fig.add_vline(
            x=current_utilization_bps * 100 / BPS,
            line_dash="dash",
            line_color="#6b7280",
            annotation_text=f"Current: {current_utilization_bps * 100 / BPS:.1f}%",
        )

    fig.update_layout(
        title=title,
        xaxis_title="Utilization (%)",
        yaxis_title="Rate (%)",
        hovermode="x unified",
        template="plotly_dark",
        height=450,
    )

    return fig


def apy_history_chart(df: pd.DataFrame, title: str = "APY History") -> go.Figure:
    """Plot supply/borrow APY and utilization from hourly snapshots.

    Args:
        df: DataFrame as returned by ``apy_history``.
    """
    fig = go.Figure()

    if df.empty:
        fig.update_layout(title="No snapshots in range", template="plotly_dark", height=400)
        return fig

    fig.add_trace(
        go.Scatter(
            x=df["timestamp"],
            y=_pct(df["supply_apy_bps"]),
            name="Supply APY",
            mode="lines+markers",
            line=dict(color="#22c55e", width=2),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=df["timestamp"],
            y=_pct(df["borrow_apy_bps"]),
            name="Borrow APY",
            mode="lines+markers",
            line=dict(color="#ef4444", width=2),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=df["timestamp"],
            y=_pct(df["utilization_bps"]),
            name="Utilization",
            yaxis="y2",
            line=dict(color="#6b7280", width=1, dash="dot"),
        )
    )

    fig.update_layout(
        title=title,
        xaxis_title="Time (UTC)",
        yaxis=dict(title="APY (%)"),
        yaxis2=dict(title="Utilization (%)", overlaying="y", side="right", range=[0, 100]),
        hovermode="x unified",
        template="plotly_dark",
        height=450,
    )

    return fig


def health_factor_gauge(hf_wad: int, degraded: bool = False) -> go.Figure:
    """Gauge for a WAD-scaled health factor.

    The scale tops out at the no-debt sentinel (2.0), so any position without
    borrows pins the needle to the right edge.
    """
    ceiling = HEALTH_FACTOR_SAFE / WAD
    hf = min(hf_wad, HEALTH_FACTOR_SAFE) / WAD

    if degraded:
        bar_color, label = "#6b7280", "Health Factor (degraded)"
    elif hf_wad >= HEALTH_FACTOR_SAFE:
        bar_color, label = "#22c55e", "Health Factor (no debt)"
    elif hf >= 1.25:
        bar_color, label = "#22c55e", "Health Factor"
    elif hf >= 1.0:
        bar_color, label = "#f59e0b", "Health Factor"
    else:
        bar_color, label = "#ef4444", "Health Factor"

    bands = [
        {"range": [0, 1.0], "color": "rgba(239,68,68,0.2)"},
        {"range": [1.0, 1.25], "color": "rgba(245,158,11,0.2)"},
        {"range": [1.25, ceiling], "color": "rgba(34,197,94,0.2)"},
    ]
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=hf,
            number={"valueformat": ".3f", "font": {"size": 36}},
            title={"text": label},
            gauge={
                "axis": {"range": [0, ceiling]},
                "bar": {"color": bar_color},
                "steps": bands,
                # liquidation line
                "threshold": {"line": {"color": "white", "width": 2}, "value": 1.0},
            },
        )
    )
    fig.update_layout(template="plotly_dark", height=320, margin=dict(t=50, b=10, l=30, r=30))
    return fig
