"""Lending Pool Rates Dashboard: main Streamlit entry point."""

import logging
import os
from pathlib import Path

import streamlit as st

logger = logging.getLogger(__name__)

# Load .env file if present (for LENDING_* overrides)
_env_path = Path(__file__).resolve().parents[2] / ".env"
if _env_path.exists():
    for line in _env_path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip())

# Bridge Streamlit secrets into os.environ so load_engine_config sees them
try:
    for key in st.secrets:
        if isinstance(st.secrets[key], str):
            os.environ.setdefault(key, st.secrets[key])
except FileNotFoundError:
    logger.debug("No Streamlit secrets configured")

from src.dashboard.components.sidebar import render_sidebar
from src.dashboard.tabs.history import render_history
from src.dashboard.tabs.positions import render_positions
from src.dashboard.tabs.rates import render_rates
from src.data.memory_store import InMemoryStateStore
from src.data.params_factory import load_engine_config
from src.data.static_params import demo_events
from src.events.processor import EventProcessor
from src.protocol.interest_rate import InterestRateModel, InterestRateParams


@st.cache_resource
def replay_demo(
    rate_params: InterestRateParams, compounding_periods: int, collateral_factor_bps: int
) -> InMemoryStateStore:
    """Replay the demo history into a fresh store under the given curve."""
    store = InMemoryStateStore()
    processor = EventProcessor(
        store,
        InterestRateModel(rate_params),
        compounding_periods=compounding_periods,
        default_collateral_factor_bps=collateral_factor_bps,
    )
    outcomes = processor.process_all(demo_events())
    logger.info("Replayed %d demo events", len(outcomes))
    return store


def main() -> None:
    st.set_page_config(
        page_title="Lending Pool Rates",
        page_icon="📊",
        layout="wide",
    )

    st.title("Lending Pool Rates")
    st.caption("Utilization, interest rates, APYs and health factors from indexed pool events")

    config = load_engine_config()
    params = render_sidebar(config.rate_params, config.compounding_periods)

    store = replay_demo(
        params.rate_params, params.compounding_periods, config.default_collateral_factor_bps
    )
    model = InterestRateModel(params.rate_params)

    # History windows are measured from the last indexed event
    cursor_ts = max((e.timestamp for e in store.events()), default=0)

    tab1, tab2, tab3 = st.tabs(["Interest Rates", "APY History", "Positions"])

    with tab1:
        render_rates(store, model, params.compounding_periods)

    with tab2:
        render_history(store, cursor_ts, params.timeframe)

    with tab3:
        render_positions(store)


if __name__ == "__main__":
    main()
