"""Interest Rates page: rate curve and per-pool current rates."""

import pandas as pd
import streamlit as st

from src.analytics.queries import all_pools_apy, format_rate
from src.dashboard.components.charts import rate_curve_chart
from src.dashboard.components.metrics_cards import rate_row
from src.data.interfaces import StateStore
from src.protocol.accrual import rate_snapshot
from src.protocol.interest_rate import InterestRateModel


def render_rates(store: StateStore, model: InterestRateModel, compounding_periods: int) -> None:
    """Render the interest rates page."""
    st.header("Interest Rate Curve")

    pools = store.list_pools()
    if not pools:
        st.info("No pools indexed yet.")
        return

    selected = st.selectbox("Pool", options=[p.address for p in pools])
    record = store.get_pool(selected)
    rates = rate_snapshot(record.state, model, compounding_periods)

    rate_row(
        [
            ("Utilization", rates.utilization_bps),
            ("Borrow Rate", rates.borrow_rate_bps),
            ("Supply Rate", rates.supply_rate_bps),
            ("Borrow APY", rates.borrow_apy_bps),
            ("Supply APY", rates.supply_apy_bps),
        ]
    )

    fig = rate_curve_chart(
        model.rate_curve(),
        current_utilization_bps=rates.utilization_bps,
        kink_utilization_bps=model.params.kink_utilization_bps,
    )
    st.plotly_chart(fig, use_container_width=True)

    # Rate sensitivity table
    st.divider()
    st.subheader("Rate Sensitivity")

    rows = []
    for u in [2000, 4000, 6000, model.params.kink_utilization_bps, 9000, 9500, 10_000]:
        rows.append(
            {
                "Utilization": format_rate(u),
                "Borrow Rate": format_rate(model.borrow_rate(u)),
                "Supply Rate": format_rate(model.supply_rate(u)),
            }
        )
    st.table(pd.DataFrame(rows))

    st.divider()
    st.subheader("All Pools")
    st.dataframe(all_pools_apy(store, model, compounding_periods), use_container_width=True)
