"""Read-side analytics over stored pool state and snapshots."""

from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd

from src.data.constants import BPS, DEFAULT_COMPOUNDING_PERIODS
from src.data.interfaces import StateStore
from src.protocol.accrual import rate_snapshot
from src.protocol.interest_rate import InterestRateModel

# Lookback windows in seconds
TIMEFRAMES: dict[str, int] = {
    "1h": 3600,
    "24h": 86_400,
    "7d": 604_800,
    "30d": 2_592_000,
}
DEFAULT_TIMEFRAME = "24h"


def format_rate(rate_bps: int) -> str:
    """Render a bps figure as a percentage string, e.g. 1250 -> '12.50%'."""
    return f"{rate_bps * 100 / BPS:.2f}%"


def _iso(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def current_apy(
    store: StateStore,
    pool_address: str,
    model: InterestRateModel,
    compounding_periods: int = DEFAULT_COMPOUNDING_PERIODS,
) -> dict[str, str]:
    """Current rates for one pool, formatted for display.

    Rates come from the stored totals as of ``last_accrued``; nothing is
    accrued on read.

    Raises:
        KeyError: if the pool has never been seen.
    """
    record = store.get_pool(pool_address)
    if record is None:
        raise KeyError(f"Pool not found: {pool_address}")

    rates = rate_snapshot(record.state, model, compounding_periods)
    return {
        "pool": pool_address,
        "supply_apy": format_rate(rates.supply_apy_bps),
        "borrow_apy": format_rate(rates.borrow_apy_bps),
        "utilization_rate": format_rate(rates.utilization_bps),
        "supply_rate": format_rate(rates.supply_rate_bps),
        "borrow_rate": format_rate(rates.borrow_rate_bps),
        "total_supply_assets": str(record.state.total_supply_assets),
        "total_borrow_assets": str(record.state.total_borrow_assets),
        "last_updated": _iso(record.state.last_accrued),
    }


def apy_history(
    store: StateStore,
    pool_address: str,
    now: int,
    timeframe: str = DEFAULT_TIMEFRAME,
) -> pd.DataFrame:
    """Hourly snapshots for a pool within a lookback window.

    Args:
        timeframe: One of ``1h``, ``24h``, ``7d``, ``30d``; anything else
            falls back to ``24h``.

    Returns:
        DataFrame with columns: timestamp, supply_apy_bps, borrow_apy_bps,
        utilization_bps, total_supply_assets, total_borrow_assets; oldest first.
    """
    window = TIMEFRAMES.get(timeframe, TIMEFRAMES[DEFAULT_TIMEFRAME])
    snapshots = store.snapshots(pool_address, since=now - window)
    return pd.DataFrame(
        {
            "timestamp": pd.to_datetime([s.timestamp for s in snapshots], unit="s", utc=True),
            "supply_apy_bps": [s.supply_apy_bps for s in snapshots],
            "borrow_apy_bps": [s.borrow_apy_bps for s in snapshots],
            "utilization_bps": [s.utilization_bps for s in snapshots],
            "total_supply_assets": [s.total_supply_assets for s in snapshots],
            "total_borrow_assets": [s.total_borrow_assets for s in snapshots],
        }
    )


def all_pools_apy(
    store: StateStore,
    model: InterestRateModel,
    compounding_periods: int = DEFAULT_COMPOUNDING_PERIODS,
) -> pd.DataFrame:
    """Current rates for every pool, largest supply first."""
    rows = []
    for record in store.list_pools():
        rates = rate_snapshot(record.state, model, compounding_periods)
        rows.append(
            {
                "address": record.address,
                "collateral_token": record.collateral_token,
                "borrow_token": record.borrow_token,
                "supply_apy_bps": rates.supply_apy_bps,
                "borrow_apy_bps": rates.borrow_apy_bps,
                "utilization_bps": rates.utilization_bps,
                "total_supply_assets": record.state.total_supply_assets,
                "total_borrow_assets": record.state.total_borrow_assets,
            }
        )
    columns = [
        "address",
        "collateral_token",
        "borrow_token",
        "supply_apy_bps",
        "borrow_apy_bps",
        "utilization_bps",
        "total_supply_assets",
        "total_borrow_assets",
    ]
    rows.sort(key=lambda r: r["total_supply_assets"], reverse=True)
    return pd.DataFrame(rows, columns=columns)


def interest_accruals(
    store: StateStore, pool_address: str | None = None, limit: int = 50
) -> pd.DataFrame:
    """Most recent interest accrual rows, newest first."""
    records = store.accruals(pool_address)
    records = sorted(records, key=lambda a: (a.timestamp, a.block_number), reverse=True)[:limit]
    columns = [
        "id",
        "pool",
        "interest_earned",
        "previous_supply_assets",
        "new_supply_assets",
        "previous_borrow_assets",
        "new_borrow_assets",
        "borrow_rate_bps",
        "timestamp",
        "block_number",
    ]
    return pd.DataFrame([[getattr(a, c) for c in columns] for a in records], columns=columns)
