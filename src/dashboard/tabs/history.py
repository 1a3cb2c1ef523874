"""APY History page: hourly snapshots and interest accruals."""

import streamlit as st

from src.analytics.queries import apy_history, interest_accruals
from src.dashboard.components.charts import apy_history_chart
from src.data.interfaces import StateStore


def render_history(store: StateStore, now: int, timeframe: str) -> None:
    """Render snapshot history and the accrual log."""
    st.header("APY History")

    pools = store.list_pools()
    if not pools:
        st.info("No pools indexed yet.")
        return

    selected = st.selectbox("Pool", options=[p.address for p in pools], key="history_pool")
    df = apy_history(store, selected, now=now, timeframe=timeframe)
    st.plotly_chart(apy_history_chart(df), use_container_width=True)
    st.caption(f"{len(df)} hourly snapshots in the last {timeframe}")

    st.divider()
    st.subheader("Interest Accruals")
    st.dataframe(interest_accruals(store, selected), use_container_width=True)
