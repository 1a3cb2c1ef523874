"""Hourly pool analytics snapshots."""

from __future__ import annotations

from dataclasses import dataclass

from src.data.constants import DEFAULT_COMPOUNDING_PERIODS, SNAPSHOT_INTERVAL
from src.protocol.accrual import rate_snapshot
from src.protocol.interest_rate import InterestRateModel
from src.protocol.pool import PoolState


@dataclass(frozen=True)
class SnapshotKey:
    """At most one snapshot exists per (pool, hourly bucket)."""

    pool: str
    bucket: int

    @property
    def id(self) -> str:
        return f"{self.pool}-{self.bucket}"


@dataclass(frozen=True)
class PoolSnapshot:
    """Periodic analytics row for a pool."""

    pool: str
    timestamp: int  # bucket start
    utilization_bps: int
    borrow_rate_bps: int
    supply_rate_bps: int
    borrow_apy_bps: int
    supply_apy_bps: int
    total_supply_assets: int
    total_borrow_assets: int

    @property
    def key(self) -> SnapshotKey:
        return SnapshotKey(self.pool, self.timestamp)


def snapshot_bucket(timestamp: int) -> int:
    """Start of the hourly window containing *timestamp*."""
    return timestamp - timestamp % SNAPSHOT_INTERVAL


def due_snapshot(
    pool_address: str, timestamp: int, last_bucket: int | None = None
) -> SnapshotKey | None:
    """Return the snapshot key for *timestamp*, or None if that hour is covered.

    Args:
        pool_address: Pool the snapshot belongs to.
        timestamp: Block timestamp of the triggering event.
        last_bucket: Bucket of the most recent stored snapshot for the pool.
    """
    bucket = snapshot_bucket(timestamp)
    if last_bucket is not None and bucket <= last_bucket:
        return None
    return SnapshotKey(pool_address, bucket)


def build_snapshot(
    key: SnapshotKey,
    state: PoolState,
    model: InterestRateModel,
    compounding_periods: int = DEFAULT_COMPOUNDING_PERIODS,
) -> PoolSnapshot:
    rates = rate_snapshot(state, model, compounding_periods)
    return PoolSnapshot(
        pool=key.pool,
        timestamp=key.bucket,
        utilization_bps=rates.utilization_bps,
        borrow_rate_bps=rates.borrow_rate_bps,
        supply_rate_bps=rates.supply_rate_bps,
        borrow_apy_bps=rates.borrow_apy_bps,
        supply_apy_bps=rates.supply_apy_bps,
        total_supply_assets=state.total_supply_assets,
        total_borrow_assets=state.total_borrow_assets,
    )
