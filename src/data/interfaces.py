"""Persisted records and the abstract state store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.analytics.snapshots import PoolSnapshot
from src.position.positions import BorrowPosition, CollateralPosition
from src.protocol.pool import PoolState


@dataclass(frozen=True)
class PoolRecord:
    """A lending pool and its running totals."""

    address: str
    factory: str = ""
    collateral_token: str = ""
    borrow_token: str = ""
    ltv_bps: int | None = None  # None until the factory registers the pool
    created: int = 0
    state: PoolState = field(default_factory=PoolState)
    total_deposits: int = 0
    total_withdrawals: int = 0
    total_borrows: int = 0
    total_repays: int = 0


@dataclass(frozen=True)
class FactoryRecord:
    """A pool factory and how many pools it has deployed."""

    address: str
    total_pools_created: int = 0
    created: int = 0


@dataclass(frozen=True)
class UserRecord:
    """Lifetime flow totals for a user across all pools."""

    address: str
    total_deposited: int = 0
    total_withdrawn: int = 0
    total_borrowed: int = 0
    total_repaid: int = 0


@dataclass(frozen=True)
class EventRecord:
    """Raw log of a processed event, keyed by ``{block}-{log_index}``."""

    id: str
    kind: str
    pool: str
    user: str
    asset: str
    amount: int
    timestamp: int
    block_number: int
    transaction_hash: str


@dataclass(frozen=True)
class InterestAccrualRecord:
    """Pool totals before and after one accrual window."""

    id: str
    pool: str
    interest_earned: int
    previous_supply_assets: int
    new_supply_assets: int
    previous_borrow_assets: int
    new_borrow_assets: int
    borrow_rate_bps: int
    timestamp: int
    block_number: int


class StateStore(ABC):
    """Abstract persistence for pools, users, positions and analytics rows."""

    @abstractmethod
    def get_pool(self, address: str) -> PoolRecord | None:
        """Get a pool record, or None if never seen."""

    @abstractmethod
    def put_pool(self, record: PoolRecord) -> None:
        """Insert or replace a pool record."""

    @abstractmethod
    def list_pools(self) -> list[PoolRecord]:
        """All known pools."""

    @abstractmethod
    def get_factory(self, address: str) -> FactoryRecord | None:
        """Get a factory record, or None if never seen."""

    @abstractmethod
    def put_factory(self, record: FactoryRecord) -> None:
        """Insert or replace a factory record."""

    @abstractmethod
    def get_user(self, address: str) -> UserRecord | None:
        """Get a user record, or None if never seen."""

    @abstractmethod
    def put_user(self, record: UserRecord) -> None:
        """Insert or replace a user record."""

    @abstractmethod
    def get_collateral_position(
        self, user: str, pool: str, asset: str
    ) -> CollateralPosition | None:
        """Get a collateral position by (user, pool, asset)."""

    @abstractmethod
    def put_collateral_position(self, position: CollateralPosition) -> None:
        """Insert or replace a collateral position."""

    @abstractmethod
    def collateral_positions(self, user: str, pool: str) -> list[CollateralPosition]:
        """All collateral positions a user holds in a pool."""

    @abstractmethod
    def get_borrow_position(self, user: str, pool: str, asset: str) -> BorrowPosition | None:
        """Get a borrow position by (user, pool, asset)."""

    @abstractmethod
    def put_borrow_position(self, position: BorrowPosition) -> None:
        """Insert or replace a borrow position."""

    @abstractmethod
    def borrow_positions(self, user: str, pool: str) -> list[BorrowPosition]:
        """All borrow positions a user holds in a pool."""

    @abstractmethod
    def has_event(self, event_id: str) -> bool:
        """Whether an event with this id was already processed."""

    @abstractmethod
    def put_event(self, record: EventRecord) -> None:
        """Record a processed event."""

    @abstractmethod
    def put_accrual(self, record: InterestAccrualRecord) -> None:
        """Record an interest accrual row."""

    @abstractmethod
    def accruals(self, pool: str | None = None) -> list[InterestAccrualRecord]:
        """Accrual rows in insertion order, optionally for one pool."""

    @abstractmethod
    def latest_snapshot_bucket(self, pool: str) -> int | None:
        """Bucket of the most recent snapshot for a pool."""

    @abstractmethod
    def put_snapshot(self, snapshot: PoolSnapshot) -> bool:
        """Insert a snapshot unless one exists for its key; return True if inserted."""

    @abstractmethod
    def snapshots(self, pool: str, since: int = 0) -> list[PoolSnapshot]:
        """Snapshots for a pool with ``timestamp >= since``, oldest first."""

    @abstractmethod
    def get_cursor(self) -> tuple[int, int] | None:
        """(block_number, log_index) of the last applied event."""

    @abstractmethod
    def set_cursor(self, position: tuple[int, int]) -> None:
        """Advance the event cursor."""
