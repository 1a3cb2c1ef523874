"""Typed lending events, validated before they reach the engine.

Each event kind is a frozen dataclass with explicit required fields; the
processor only ever receives one of the variants listed in ``LendingEvent``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from src.data.constants import BPS, UINT256_MAX
from src.protocol.errors import InvalidEventError, UnresolvedTokenError


def _require_address(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidEventError(f"{name} must be a non-empty address, got {value!r}")


def _require_uint(name: str, value: int, positive: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidEventError(f"{name} must be an int, got {value!r}")
    if value < 0 or value > UINT256_MAX:
        raise InvalidEventError(f"{name} is outside the uint256 range: {value}")
    if positive and value == 0:
        raise InvalidEventError(f"{name} must be positive")


@dataclass(frozen=True)
class EventMeta:
    """Chain position of an event log."""

    block_number: int
    log_index: int
    transaction_hash: str
    timestamp: int

    def __post_init__(self) -> None:
        _require_uint("block_number", self.block_number)
        _require_uint("log_index", self.log_index)
        _require_uint("timestamp", self.timestamp)
        if not isinstance(self.transaction_hash, str) or not self.transaction_hash:
            raise InvalidEventError("transaction_hash must be a non-empty string")

    @property
    def event_id(self) -> str:
        return f"{self.block_number}-{self.log_index}"

    @property
    def position(self) -> tuple[int, int]:
        return (self.block_number, self.log_index)


@dataclass(frozen=True)
class PoolCreated:
    """A factory deployed a new lending pool."""

    meta: EventMeta
    factory: str
    pool: str
    collateral_token: str
    borrow_token: str
    ltv_bps: int

    kind = "PoolCreated"

    def __post_init__(self) -> None:
        _require_address("factory", self.factory)
        _require_address("pool", self.pool)
        for name in ("collateral_token", "borrow_token"):
            token = getattr(self, name)
            if not token or token == self.pool:
                raise UnresolvedTokenError(f"{name} is unresolved for pool {self.pool}")
        _require_uint("ltv_bps", self.ltv_bps)
        if self.ltv_bps > BPS:
            raise InvalidEventError(f"ltv_bps must be <= {BPS}, got {self.ltv_bps}")


@dataclass(frozen=True)
class _PoolAmountEvent:
    """Base for events moving *amount* of *asset* between a user and a pool."""

    meta: EventMeta
    pool: str
    user: str
    asset: str
    amount: int

    kind = ""

    def __post_init__(self) -> None:
        _require_address("pool", self.pool)
        _require_address("user", self.user)
        # No fallback to the pool address: an unresolved token is a data error
        if not self.asset or self.asset == self.pool:
            raise UnresolvedTokenError(
                f"{self.kind} at {self.meta.event_id} has no resolved asset for pool {self.pool}"
            )
        _require_uint("amount", self.amount, positive=True)


@dataclass(frozen=True)
class SupplyLiquidity(_PoolAmountEvent):
    kind = "SupplyLiquidity"


@dataclass(frozen=True)
class WithdrawLiquidity(_PoolAmountEvent):
    kind = "WithdrawLiquidity"


@dataclass(frozen=True)
class BorrowDebt(_PoolAmountEvent):
    """Borrow, possibly bridged to another chain (``chain_id``)."""

    chain_id: int = 0

    kind = "BorrowDebt"


@dataclass(frozen=True)
class RepayDebt(_PoolAmountEvent):
    kind = "RepayDebt"


@dataclass(frozen=True)
class SupplyCollateral(_PoolAmountEvent):
    kind = "SupplyCollateral"


@dataclass(frozen=True)
class WithdrawCollateral(_PoolAmountEvent):
    kind = "WithdrawCollateral"


@dataclass(frozen=True)
class CreatePosition:
    """A user opened a position account in a pool."""

    meta: EventMeta
    pool: str
    user: str

    kind = "CreatePosition"

    def __post_init__(self) -> None:
        _require_address("pool", self.pool)
        _require_address("user", self.user)


LendingEvent = Union[
    PoolCreated,
    SupplyLiquidity,
    WithdrawLiquidity,
    BorrowDebt,
    RepayDebt,
    SupplyCollateral,
    WithdrawCollateral,
    CreatePosition,
]
