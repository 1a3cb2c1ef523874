"""Positions page: per-user collateral, debt and health factor."""

import pandas as pd
import streamlit as st

from src.dashboard.components.charts import health_factor_gauge
from src.data.memory_store import InMemoryStateStore
from src.protocol.health_factor import HealthFactorCalculator


def render_positions(store: InMemoryStateStore) -> None:
    """Render health factors for every user with activity in a pool."""
    st.header("User Positions")

    pairs = sorted({(e.user, e.pool) for e in store.events() if e.user})
    if not pairs:
        st.info("No user positions yet.")
        return

    user, pool = st.selectbox(
        "User / Pool",
        options=pairs,
        format_func=lambda p: f"{p[0][:10]}… in {p[1][:10]}…",
    )
    collateral = store.collateral_positions(user, pool)
    borrows = store.borrow_positions(user, pool)
    hf = HealthFactorCalculator().health_factor(collateral, borrows)

    col1, col2 = st.columns([1, 1])

    with col1:
        st.plotly_chart(health_factor_gauge(hf.value, hf.degraded), use_container_width=True)

    with col2:
        st.subheader("Position Safety")
        st.metric("Health Factor", f"{hf.as_float():.4f}")
        if hf.degraded:
            st.warning(f"Degraded computation: {hf.reason}")
        elif not hf.is_healthy:
            st.error("Position is undercollateralized")

    st.divider()
    st.subheader("Collateral")
    st.table(pd.DataFrame([vars(p) for p in collateral]))
    st.subheader("Debt")
    st.table(pd.DataFrame([vars(p) for p in borrows]))
