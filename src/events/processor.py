"""Apply typed lending events to stored pool, user and position state.

For every event touching pool totals the order is fixed: accrue the pool to
the event timestamp, apply the event's delta, then update the affected user
and write an hourly snapshot when one is due.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

from src.analytics.snapshots import PoolSnapshot, build_snapshot, due_snapshot
from src.data.constants import DEFAULT_COMPOUNDING_PERIODS
from src.data.interfaces import (
    EventRecord,
    FactoryRecord,
    InterestAccrualRecord,
    PoolRecord,
    StateStore,
    UserRecord,
)
from src.events.types import (
    BorrowDebt,
    CreatePosition,
    LendingEvent,
    PoolCreated,
    RepayDebt,
    SupplyCollateral,
    SupplyLiquidity,
    WithdrawCollateral,
    WithdrawLiquidity,
)
from src.position.positions import BorrowPosition, CollateralPosition
from src.position.user_accrual import accrue_user
from src.protocol.accrual import AccrualResult, accrue
from src.protocol.errors import EventOrderingError, InvalidEventError
from src.protocol.fixed_point import checked_add, checked_sub, zero_floor_sub
from src.protocol.health_factor import HealthFactor, HealthFactorCalculator
from src.protocol.interest_rate import InterestRateModel
from src.protocol.pool import PoolState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingOutcome:
    """What processing one event produced, for logging and analytics."""

    event_id: str
    accrual: AccrualResult | None = None
    snapshot: PoolSnapshot | None = None
    health_factor: HealthFactor | None = None


def _identity(asset: str, amount: int) -> int:
    return amount


class EventProcessor:
    """Event-processing collaborator driving the rate and accrual engine.

    Parameters
    ----------
    store : StateStore
        Where pool, user, position and analytics records live.
    model : InterestRateModel
        Rate curve applied to every pool.
    compounding_periods : int
        Compounding frequency used for snapshot APYs.
    default_collateral_factor_bps : int
        Collateral weight for pools whose LTV was never registered.
    to_common_unit : Callable[[str, int], int]
        Converts an (asset, amount) pair into the unit health factors are
        computed in. Defaults to identity (amounts already comparable).
    """

    def __init__(
        self,
        store: StateStore,
        model: InterestRateModel,
        compounding_periods: int = DEFAULT_COMPOUNDING_PERIODS,
        default_collateral_factor_bps: int = 8000,
        to_common_unit: Callable[[str, int], int] = _identity,
    ) -> None:
        self.store = store
        self.model = model
        self.compounding_periods = compounding_periods
        self.default_collateral_factor_bps = default_collateral_factor_bps
        self.to_common_unit = to_common_unit
        self.health = HealthFactorCalculator()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process(self, event: LendingEvent) -> ProcessingOutcome | None:
        """Apply one event. Returns None for an already-processed event id."""
        meta = event.meta
        if self.store.has_event(meta.event_id):
            logger.debug("Skipping duplicate event %s", meta.event_id)
            return None

        cursor = self.store.get_cursor()
        if cursor is not None and meta.position < cursor:
            raise EventOrderingError(
                f"event {meta.event_id} arrived after {cursor[0]}-{cursor[1]}"
            )

        if isinstance(event, PoolCreated):
            outcome = self._on_pool_created(event)
        elif isinstance(event, CreatePosition):
            outcome = self._on_create_position(event)
        elif isinstance(
            event,
            (
                SupplyLiquidity,
                WithdrawLiquidity,
                BorrowDebt,
                RepayDebt,
                SupplyCollateral,
                WithdrawCollateral,
            ),
        ):
            outcome = self._on_pool_event(event)
        else:
            raise InvalidEventError(f"unsupported event type: {type(event).__name__}")

        self.store.set_cursor(meta.position)
        return outcome

    def process_all(self, events: list[LendingEvent]) -> list[ProcessingOutcome]:
        """Apply events in chain order, dropping duplicates from the result."""
        ordered = sorted(events, key=lambda e: e.meta.position)
        outcomes = []
        for event in ordered:
            outcome = self.process(event)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    # ------------------------------------------------------------------
    # Lazy record access
    # ------------------------------------------------------------------

    def _get_or_create_pool(self, address: str, timestamp: int) -> PoolRecord:
        record = self.store.get_pool(address)
        if record is None:
            # Accrual starts at the first event seen for the pool, not at epoch 0
            record = PoolRecord(address=address, state=PoolState(last_accrued=timestamp))
            self.store.put_pool(record)
        return record

    def _get_or_create_user(self, address: str) -> UserRecord:
        record = self.store.get_user(address)
        if record is None:
            record = UserRecord(address=address)
            self.store.put_user(record)
        return record

    def _record_event(self, event: LendingEvent, user: str = "", asset: str = "", amount: int = 0) -> None:
        meta = event.meta
        self.store.put_event(
            EventRecord(
                id=meta.event_id,
                kind=event.kind,
                pool=event.pool,
                user=user,
                asset=asset,
                amount=amount,
                timestamp=meta.timestamp,
                block_number=meta.block_number,
                transaction_hash=meta.transaction_hash,
            )
        )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_pool_created(self, event: PoolCreated) -> ProcessingOutcome:
        existing = self.store.get_pool(event.pool)
        if existing is None or existing.ltv_bps is None:
            base = existing or PoolRecord(
                address=event.pool, state=PoolState(last_accrued=event.meta.timestamp)
            )
            self.store.put_pool(
                replace(
                    base,
                    factory=event.factory,
                    collateral_token=event.collateral_token,
                    borrow_token=event.borrow_token,
                    ltv_bps=event.ltv_bps,
                    created=event.meta.timestamp,
                )
            )

        factory = self.store.get_factory(event.factory)
        if factory is None:
            factory = FactoryRecord(address=event.factory, created=event.meta.timestamp)
        factory = replace(factory, total_pools_created=factory.total_pools_created + 1)
        self.store.put_factory(factory)

        self._record_event(event, asset=event.collateral_token, amount=event.ltv_bps)
        logger.info(
            "Pool %s registered (%s/%s); factory %s now has %d pools",
            event.pool,
            event.collateral_token,
            event.borrow_token,
            event.factory,
            factory.total_pools_created,
        )
        return ProcessingOutcome(event_id=event.meta.event_id)

    def _on_create_position(self, event: CreatePosition) -> ProcessingOutcome:
        self._get_or_create_user(event.user)
        self._get_or_create_pool(event.pool, event.meta.timestamp)
        self._record_event(event, user=event.user)
        return ProcessingOutcome(event_id=event.meta.event_id)

    def _on_pool_event(self, event) -> ProcessingOutcome:
        meta = event.meta
        pool = self._get_or_create_pool(event.pool, meta.timestamp)
        user = self._get_or_create_user(event.user)

        # Accrue before applying the delta
        state, accrual = accrue(pool.state, self.model, meta.timestamp)
        amount = event.amount
        health: HealthFactor | None = None

        # Positions are computed up front so a failing delta leaves the store untouched
        _, rate, _ = self.model.rates_for(state)
        borrow_position: BorrowPosition | None = None
        collateral_position: CollateralPosition | None = None
        borrows: list[BorrowPosition] | None = None
        if isinstance(event, (BorrowDebt, RepayDebt)):
            borrow_position = self._next_borrow_position(event, rate)
        elif isinstance(event, (SupplyCollateral, WithdrawCollateral)):
            collateral_position = self._next_collateral_position(event, pool)
        if borrow_position is not None or collateral_position is not None:
            borrows = self._accrued_borrow_positions(event, rate, borrow_position)

        if isinstance(event, SupplyLiquidity):
            state = state.supply(amount)
            pool = replace(pool, total_deposits=checked_add(pool.total_deposits, amount))
            user = replace(user, total_deposited=checked_add(user.total_deposited, amount))
        elif isinstance(event, WithdrawLiquidity):
            state = state.withdraw(amount)
            pool = replace(pool, total_withdrawals=checked_add(pool.total_withdrawals, amount))
            user = replace(user, total_withdrawn=checked_add(user.total_withdrawn, amount))
        elif isinstance(event, BorrowDebt):
            state = state.borrow(amount)
            pool = replace(pool, total_borrows=checked_add(pool.total_borrows, amount))
            user = replace(user, total_borrowed=checked_add(user.total_borrowed, amount))
        elif isinstance(event, RepayDebt):
            state = state.repay(amount)
            pool = replace(pool, total_repays=checked_add(pool.total_repays, amount))
            user = replace(user, total_repaid=checked_add(user.total_repaid, amount))

        pool = replace(pool, state=state)
        self.store.put_pool(pool)
        self.store.put_user(user)
        if accrual.delta_t > 0:
            self.store.put_accrual(
                InterestAccrualRecord(
                    id=meta.event_id,
                    pool=pool.address,
                    interest_earned=accrual.interest_earned,
                    previous_supply_assets=accrual.previous_supply_assets,
                    new_supply_assets=accrual.new_supply_assets,
                    previous_borrow_assets=accrual.previous_borrow_assets,
                    new_borrow_assets=accrual.new_borrow_assets,
                    borrow_rate_bps=accrual.borrow_rate_bps,
                    timestamp=meta.timestamp,
                    block_number=meta.block_number,
                )
            )

        if collateral_position is not None:
            self.store.put_collateral_position(collateral_position)
        if borrows is not None:
            for position in borrows:
                self.store.put_borrow_position(position)
            health = self._refresh_health(event.user, event.pool, borrows)

        snapshot = self._maybe_snapshot(pool, meta.timestamp)
        self._record_event(event, user=event.user, asset=event.asset, amount=amount)
        return ProcessingOutcome(
            event_id=meta.event_id,
            accrual=accrual,
            snapshot=snapshot,
            health_factor=health,
        )

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def _next_borrow_position(self, event, rate: int) -> BorrowPosition:
        """Accrue the user's debt at the freshly computed pool rate, then apply the event."""
        position = self.store.get_borrow_position(event.user, event.pool, event.asset)
        if position is None:
            position = BorrowPosition(
                user=event.user,
                pool=event.pool,
                asset=event.asset,
                last_accrued=event.meta.timestamp,
            )
        position = accrue_user(position, event.meta.timestamp, rate)

        if isinstance(event, BorrowDebt):
            amount = checked_add(position.amount, event.amount)
        else:
            amount = zero_floor_sub(position.amount, event.amount)
        return replace(position, amount=amount, is_active=amount > 0)

    def _next_collateral_position(self, event, pool: PoolRecord) -> CollateralPosition:
        factor = pool.ltv_bps
        if factor is None:
            logger.warning(
                "Pool %s has no registered LTV; using default collateral factor %d bps",
                pool.address,
                self.default_collateral_factor_bps,
            )
            factor = self.default_collateral_factor_bps

        position = self.store.get_collateral_position(event.user, event.pool, event.asset)
        if position is None:
            position = CollateralPosition(user=event.user, pool=event.pool, asset=event.asset)

        if isinstance(event, SupplyCollateral):
            amount = checked_add(position.amount, event.amount)
        else:
            amount = checked_sub(position.amount, event.amount)
        return replace(
            position,
            amount=amount,
            collateral_factor_bps=factor,
            is_active=amount > 0,
        )

    def _accrued_borrow_positions(
        self, event, rate: int, updated: BorrowPosition | None
    ) -> list[BorrowPosition]:
        """Every borrow the user holds in the pool, accrued to the event timestamp.

        *updated* is the position the event itself changed; it replaces the
        stored copy for its asset.
        """
        positions = []
        for position in self.store.borrow_positions(event.user, event.pool):
            if updated is not None and position.key == updated.key:
                continue
            positions.append(accrue_user(position, event.meta.timestamp, rate))
        if updated is not None:
            positions.append(updated)
        return positions

    def _refresh_health(
        self, user: str, pool: str, borrows: list[BorrowPosition]
    ) -> HealthFactor:
        """Health factor from stored collateral and debt accrued to the current event."""
        collateral = [
            replace(p, amount=self.to_common_unit(p.asset, p.amount))
            for p in self.store.collateral_positions(user, pool)
        ]
        debt = [replace(p, amount=self.to_common_unit(p.asset, p.amount)) for p in borrows]
        result = self.health.health_factor(collateral, debt)
        if result.degraded:
            logger.warning(
                "Health factor for %s in pool %s is degraded: %s", user, pool, result.reason
            )
        return result

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _maybe_snapshot(self, pool: PoolRecord, timestamp: int) -> PoolSnapshot | None:
        key = due_snapshot(pool.address, timestamp, self.store.latest_snapshot_bucket(pool.address))
        if key is None:
            return None
        snapshot = build_snapshot(key, pool.state, self.model, self.compounding_periods)
        if not self.store.put_snapshot(snapshot):
            return None
        logger.info(
            "Snapshot %s: utilization=%d bps supply APY=%d bps borrow APY=%d bps",
            key.id,
            snapshot.utilization_bps,
            snapshot.supply_apy_bps,
            snapshot.borrow_apy_bps,
        )
        return snapshot
