"""Dict-backed state store used for replays, the dashboard and tests."""

from __future__ import annotations

from src.analytics.snapshots import PoolSnapshot
from src.data.interfaces import (
    EventRecord,
    FactoryRecord,
    InterestAccrualRecord,
    PoolRecord,
    StateStore,
    UserRecord,
)
from src.position.positions import BorrowPosition, CollateralPosition


class InMemoryStateStore(StateStore):
    """State store keeping every record in process memory."""

    def __init__(self) -> None:
        self._pools: dict[str, PoolRecord] = {}
        self._factories: dict[str, FactoryRecord] = {}
        self._users: dict[str, UserRecord] = {}
        self._collateral: dict[tuple[str, str, str], CollateralPosition] = {}
        self._borrows: dict[tuple[str, str, str], BorrowPosition] = {}
        self._events: dict[str, EventRecord] = {}
        self._accruals: list[InterestAccrualRecord] = []
        self._snapshots: dict[str, dict[int, PoolSnapshot]] = {}
        self._cursor: tuple[int, int] | None = None

    def get_pool(self, address: str) -> PoolRecord | None:
        return self._pools.get(address)

    def put_pool(self, record: PoolRecord) -> None:
        self._pools[record.address] = record

    def list_pools(self) -> list[PoolRecord]:
        return list(self._pools.values())

    def get_factory(self, address: str) -> FactoryRecord | None:
        return self._factories.get(address)

    def put_factory(self, record: FactoryRecord) -> None:
        self._factories[record.address] = record

    def get_user(self, address: str) -> UserRecord | None:
        return self._users.get(address)

    def put_user(self, record: UserRecord) -> None:
        self._users[record.address] = record

    def get_collateral_position(
        self, user: str, pool: str, asset: str
    ) -> CollateralPosition | None:
        return self._collateral.get((user, pool, asset))

    def put_collateral_position(self, position: CollateralPosition) -> None:
        self._collateral[position.key] = position

    def collateral_positions(self, user: str, pool: str) -> list[CollateralPosition]:
        return [p for p in self._collateral.values() if p.user == user and p.pool == pool]

    def get_borrow_position(self, user: str, pool: str, asset: str) -> BorrowPosition | None:
        return self._borrows.get((user, pool, asset))

    def put_borrow_position(self, position: BorrowPosition) -> None:
        self._borrows[position.key] = position

    def borrow_positions(self, user: str, pool: str) -> list[BorrowPosition]:
        return [p for p in self._borrows.values() if p.user == user and p.pool == pool]

    def has_event(self, event_id: str) -> bool:
        return event_id in self._events

    def put_event(self, record: EventRecord) -> None:
        self._events[record.id] = record

    def events(self) -> list[EventRecord]:
        return list(self._events.values())

    def put_accrual(self, record: InterestAccrualRecord) -> None:
        self._accruals.append(record)

    def accruals(self, pool: str | None = None) -> list[InterestAccrualRecord]:
        if pool is None:
            return list(self._accruals)
        return [a for a in self._accruals if a.pool == pool]

    def latest_snapshot_bucket(self, pool: str) -> int | None:
        buckets = self._snapshots.get(pool)
        if not buckets:
            return None
        return max(buckets)

    def put_snapshot(self, snapshot: PoolSnapshot) -> bool:
        buckets = self._snapshots.setdefault(snapshot.pool, {})
        if snapshot.timestamp in buckets:
            return False
        buckets[snapshot.timestamp] = snapshot
        return True

    def snapshots(self, pool: str, since: int = 0) -> list[PoolSnapshot]:
        buckets = self._snapshots.get(pool, {})
        return [buckets[ts] for ts in sorted(buckets) if ts >= since]

    def get_cursor(self) -> tuple[int, int] | None:
        return self._cursor

    def set_cursor(self, position: tuple[int, int]) -> None:
        self._cursor = position
