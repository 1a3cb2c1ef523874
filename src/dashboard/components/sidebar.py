"""Sidebar controls for the rate model."""

from dataclasses import dataclass

import streamlit as st

from src.protocol.interest_rate import InterestRateParams

_COMPOUNDING_LABELS = {1: "Yearly", 12: "Monthly", 52: "Weekly", 365: "Daily", 8760: "Hourly"}


@dataclass
class SidebarParams:
    """User-controlled parameters from the sidebar."""

    rate_params: InterestRateParams
    compounding_periods: int
    timeframe: str


def render_sidebar(defaults: InterestRateParams, default_periods: int) -> SidebarParams:
    """Render sidebar controls and return selected parameters.

    Parameters
    ----------
    defaults : InterestRateParams
        Starting values, normally from ``load_engine_config``.
    default_periods : int
        Starting compounding frequency.
    """
    st.sidebar.header("Rate Model")

    base = st.sidebar.number_input(
        "Base Rate (bps)", min_value=0, max_value=10_000, value=defaults.base_rate_bps, step=25
    )
    slope1 = st.sidebar.number_input(
        "Slope 1 (bps)", min_value=0, max_value=50_000, value=defaults.slope1_bps, step=50
    )
    slope2 = st.sidebar.number_input(
        "Slope 2 (bps)", min_value=0, max_value=500_000, value=defaults.slope2_bps, step=500
    )
    kink = st.sidebar.slider(
        "Kink Utilization (bps)",
        min_value=100,
        max_value=9_900,
        value=defaults.kink_utilization_bps,
        step=100,
    )
    reserve = st.sidebar.slider(
        "Reserve Factor (bps)",
        min_value=0,
        max_value=10_000,
        value=defaults.reserve_factor_bps,
        step=100,
    )
    st.sidebar.caption("Changing the model replays the demo history under the new curve.")

    st.sidebar.header("Analytics")

    options = list(_COMPOUNDING_LABELS)
    periods = st.sidebar.selectbox(
        "Compounding",
        options=options,
        index=options.index(default_periods) if default_periods in options else 3,
        format_func=_COMPOUNDING_LABELS.__getitem__,
    )
    timeframe = st.sidebar.radio("History Window", options=["1h", "24h", "7d", "30d"], index=1)

    return SidebarParams(
        rate_params=InterestRateParams(
            base_rate_bps=int(base),
            slope1_bps=int(slope1),
            slope2_bps=int(slope2),
            kink_utilization_bps=int(kink),
            reserve_factor_bps=int(reserve),
        ),
        compounding_periods=int(periods),
        timeframe=timeframe,
    )
