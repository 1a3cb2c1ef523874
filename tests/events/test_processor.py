"""End-to-end tests for the event processor."""

import logging

import pytest

from src.data.constants import SECONDS_PER_YEAR
from src.data.memory_store import InMemoryStateStore
from src.data.static_params import DEFAULT_RATE_PARAMS
from src.events.processor import EventProcessor
from src.events.types import (
    BorrowDebt,
    CreatePosition,
    EventMeta,
    PoolCreated,
    RepayDebt,
    SupplyCollateral,
    SupplyLiquidity,
    WithdrawCollateral,
    WithdrawLiquidity,
)
from src.protocol.errors import (
    ArithmeticOverflowError,
    EventOrderingError,
    InvalidTimeOrderingError,
)
from src.protocol.interest_rate import InterestRateModel

FACTORY = "0xfactory"
POOL = "0xpool"
WETH = "0xweth"
USDC = "0xusdc"
LENDER = "0xlender"
BORROWER = "0xborrower"

REPAY_AT = 3600 + SECONDS_PER_YEAR


def _meta(block: int, timestamp: int, log_index: int = 0) -> EventMeta:
    return EventMeta(
        block_number=block,
        log_index=log_index,
        transaction_hash=f"0x{block:x}{log_index:x}",
        timestamp=timestamp,
    )


def _pool_created(block: int = 1, timestamp: int = 0, ltv_bps: int = 8000) -> PoolCreated:
    return PoolCreated(
        meta=_meta(block, timestamp),
        factory=FACTORY,
        pool=POOL,
        collateral_token=WETH,
        borrow_token=USDC,
        ltv_bps=ltv_bps,
    )


def _scenario() -> list:
    return [
        _pool_created(),
        SupplyLiquidity(meta=_meta(2, 100), pool=POOL, user=LENDER, asset=USDC, amount=1_000_000),
        SupplyCollateral(
            meta=_meta(3, 200), pool=POOL, user=BORROWER, asset=WETH, amount=2_000_000
        ),
        BorrowDebt(meta=_meta(4, 3600), pool=POOL, user=BORROWER, asset=USDC, amount=500_000),
        RepayDebt(meta=_meta(5, REPAY_AT), pool=POOL, user=BORROWER, asset=USDC, amount=100_000),
    ]


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def processor(store: InMemoryStateStore) -> EventProcessor:
    return EventProcessor(store, InterestRateModel(DEFAULT_RATE_PARAMS), compounding_periods=365)


class TestScenario:
    def test_pool_registration(self, store: InMemoryStateStore, processor: EventProcessor) -> None:
        processor.process(_pool_created())
        pool = store.get_pool(POOL)
        assert pool.ltv_bps == 8000
        assert pool.collateral_token == WETH
        assert pool.borrow_token == USDC
        assert store.get_factory(FACTORY).total_pools_created == 1

    def test_borrow_sets_health_factor(self, processor: EventProcessor) -> None:
        outcomes = processor.process_all(_scenario()[:4])
        borrow = outcomes[-1]
        # 2_000_000 * 80% / 500_000
        assert borrow.health_factor.value == 3_200_000_000_000_000_000
        assert not borrow.health_factor.degraded

    def test_collateral_alone_is_safe(self, processor: EventProcessor) -> None:
        outcomes = processor.process_all(_scenario()[:3])
        assert outcomes[-1].health_factor.value == 2 * 10**18

    def test_full_year_of_interest(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        outcomes = processor.process_all(_scenario())
        repay = outcomes[-1]

        # One year at 50% utilization: 500_000 * 12.5%
        assert repay.accrual.interest_earned == 62_500
        assert repay.accrual.borrow_rate_bps == 1250

        pool = store.get_pool(POOL)
        assert pool.state.total_borrow_assets == 462_500
        assert pool.state.total_supply_assets == 1_062_500
        assert pool.state.last_accrued == REPAY_AT
        assert pool.total_deposits == 1_000_000
        assert pool.total_borrows == 500_000
        assert pool.total_repays == 100_000

    def test_user_accrues_at_post_accrual_rate(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario())
        position = store.get_borrow_position(BORROWER, POOL, USDC)

        # Utilization after accrual is 562_500 / 1_062_500 -> 5294 bps -> 1323 bps
        assert position.borrow_rate_bps == 1323
        assert position.accrued_interest == 66_150
        assert position.amount == 466_150
        assert position.last_accrued == REPAY_AT
        assert position.is_active

    def test_user_totals(self, store: InMemoryStateStore, processor: EventProcessor) -> None:
        processor.process_all(_scenario())
        borrower = store.get_user(BORROWER)
        assert borrower.total_borrowed == 500_000
        assert borrower.total_repaid == 100_000
        assert store.get_user(LENDER).total_deposited == 1_000_000

    def test_accrual_rows_and_snapshots(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario())
        assert len(store.accruals(POOL)) == 4
        assert [s.timestamp for s in store.snapshots(POOL)] == [0, 3600, REPAY_AT]

    def test_snapshot_reflects_post_event_state(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario()[:4])
        snap = store.snapshots(POOL)[-1]
        assert snap.timestamp == 3600
        assert snap.total_borrow_assets == 500_000
        assert snap.utilization_bps == 5000
        assert snap.borrow_rate_bps == 1250

    def test_cursor_advances(self, store: InMemoryStateStore, processor: EventProcessor) -> None:
        processor.process_all(_scenario())
        assert store.get_cursor() == (5, 0)

    def test_events_recorded(self, store: InMemoryStateStore, processor: EventProcessor) -> None:
        processor.process_all(_scenario())
        kinds = [e.kind for e in store.events()]
        assert kinds == [
            "PoolCreated",
            "SupplyLiquidity",
            "SupplyCollateral",
            "BorrowDebt",
            "RepayDebt",
        ]


class TestOrdering:
    def test_duplicate_is_skipped(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        events = _scenario()[:2]
        processor.process_all(events)
        before = store.get_pool(POOL)

        assert processor.process(events[1]) is None
        assert store.get_pool(POOL) == before

    def test_out_of_order_rejected(self, processor: EventProcessor) -> None:
        processor.process_all(_scenario()[:3])
        late = SupplyLiquidity(
            meta=_meta(2, 150, log_index=5), pool=POOL, user=LENDER, asset=USDC, amount=1
        )
        with pytest.raises(EventOrderingError):
            processor.process(late)

    def test_process_all_sorts_by_position(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        outcomes = processor.process_all(list(reversed(_scenario())))
        assert [o.event_id for o in outcomes] == ["1-0", "2-0", "3-0", "4-0", "5-0"]
        assert store.get_pool(POOL).state.total_borrow_assets == 462_500

    def test_process_all_drops_duplicates(self, processor: EventProcessor) -> None:
        events = _scenario()
        outcomes = processor.process_all(events + events[1:3])
        assert len(outcomes) == 5

    def test_timestamp_regression_raises(self, processor: EventProcessor) -> None:
        processor.process_all(_scenario()[:2])
        stale = SupplyLiquidity(meta=_meta(9, 50), pool=POOL, user=LENDER, asset=USDC, amount=1)
        with pytest.raises(InvalidTimeOrderingError):
            processor.process(stale)

    def test_same_block_events_accrue_once(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario()[:4])
        same_block = [
            BorrowDebt(
                meta=_meta(10, 7200, log_index=i), pool=POOL, user=BORROWER, asset=USDC, amount=1
            )
            for i in range(3)
        ]
        outcomes = processor.process_all(same_block)
        assert outcomes[0].accrual.delta_t == 3600
        assert outcomes[1].accrual.delta_t == 0
        assert outcomes[2].accrual.delta_t == 0
        assert len(store.accruals(POOL)) == 4


class TestFailures:
    def test_collateral_overdraw_leaves_store_untouched(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario()[:3])
        pool_before = store.get_pool(POOL)
        position_before = store.get_collateral_position(BORROWER, POOL, WETH)

        overdraw = WithdrawCollateral(
            meta=_meta(20, 7200), pool=POOL, user=BORROWER, asset=WETH, amount=2_000_001
        )
        with pytest.raises(ArithmeticOverflowError):
            processor.process(overdraw)

        assert store.get_pool(POOL) == pool_before
        assert store.get_collateral_position(BORROWER, POOL, WETH) == position_before
        assert not store.has_event("20-0")
        assert store.get_cursor() == (3, 0)

    def test_liquidity_overdraw_raises(self, processor: EventProcessor) -> None:
        processor.process_all(_scenario()[:2])
        overdraw = WithdrawLiquidity(
            meta=_meta(20, 7200), pool=POOL, user=LENDER, asset=USDC, amount=1_000_001
        )
        with pytest.raises(ArithmeticOverflowError):
            processor.process(overdraw)

    def test_repay_more_than_owed_floors_at_zero(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario()[:4])
        processor.process(
            RepayDebt(meta=_meta(6, 3600), pool=POOL, user=BORROWER, asset=USDC, amount=600_000)
        )
        position = store.get_borrow_position(BORROWER, POOL, USDC)
        assert position.amount == 0
        assert not position.is_active
        assert store.get_pool(POOL).state.total_borrow_assets == 0


class TestCollateralFactor:
    def test_unregistered_pool_uses_default(
        self, store: InMemoryStateStore, caplog
    ) -> None:
        processor = EventProcessor(
            store, InterestRateModel(DEFAULT_RATE_PARAMS), default_collateral_factor_bps=5000
        )
        event = SupplyCollateral(
            meta=_meta(1, 100), pool=POOL, user=BORROWER, asset=WETH, amount=1_000
        )
        with caplog.at_level(logging.WARNING):
            processor.process(event)

        position = store.get_collateral_position(BORROWER, POOL, WETH)
        assert position.collateral_factor_bps == 5000
        assert position.is_active
        assert "no registered LTV" in caplog.text

    def test_late_registration_fills_metadata(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process(
            SupplyLiquidity(meta=_meta(1, 100), pool=POOL, user=LENDER, asset=USDC, amount=500)
        )
        processor.process(_pool_created(block=2, timestamp=200, ltv_bps=7000))
        pool = store.get_pool(POOL)
        assert pool.ltv_bps == 7000
        assert pool.state.total_supply_assets == 500

    def test_withdrawing_all_collateral_deactivates(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process_all(_scenario()[:3])
        processor.process(
            WithdrawCollateral(
                meta=_meta(4, 300), pool=POOL, user=BORROWER, asset=WETH, amount=2_000_000
            )
        )
        position = store.get_collateral_position(BORROWER, POOL, WETH)
        assert position.amount == 0
        assert not position.is_active


class TestCommonUnit:
    def test_conversion_applied_before_health_factor(self, store: InMemoryStateStore) -> None:
        prices = {WETH: 3, USDC: 1}
        processor = EventProcessor(
            store,
            InterestRateModel(DEFAULT_RATE_PARAMS),
            to_common_unit=lambda asset, amount: amount * prices[asset],
        )
        outcomes = processor.process_all(_scenario()[:4])
        # 2_000_000 * 3 * 80% / 500_000
        assert outcomes[-1].health_factor.value == 9_600_000_000_000_000_000


class TestCreatePosition:
    def test_creates_user_without_accrual(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process(_pool_created())
        outcome = processor.process(CreatePosition(meta=_meta(2, 500), pool=POOL, user=BORROWER))
        assert outcome.accrual is None
        assert store.get_user(BORROWER) is not None
        assert store.get_pool(POOL).state.last_accrued == 0


class TestHealthUsesAccruedDebt:
    def _open_loan(self, processor: EventProcessor) -> None:
        processor.process_all(
            [
                _pool_created(),
                SupplyLiquidity(
                    meta=_meta(2, 100), pool=POOL, user=LENDER, asset=USDC, amount=1_000_000
                ),
                SupplyCollateral(
                    meta=_meta(3, 200), pool=POOL, user=BORROWER, asset=WETH, amount=1_000_000
                ),
                BorrowDebt(
                    meta=_meta(4, 3600), pool=POOL, user=BORROWER, asset=USDC, amount=700_000
                ),
            ]
        )

    def test_collateral_event_accrues_debt_before_health(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        self._open_loan(processor)
        assert store.get_borrow_position(BORROWER, POOL, USDC).amount == 700_000

        outcome = processor.process(
            WithdrawCollateral(
                meta=_meta(5, REPAY_AT), pool=POOL, user=BORROWER, asset=WETH, amount=1
            )
        )

        # Pool: 700_000 at 1750 bps for a year
        assert outcome.accrual.new_borrow_assets == 822_500
        # User: 1_122_500 supply, 822_500 borrow -> 7327 bps -> 1831 bps
        position = store.get_borrow_position(BORROWER, POOL, USDC)
        assert position.amount == 828_170
        assert position.last_accrued == REPAY_AT
        assert position.borrow_rate_bps == 1831

        # 999_999 * 80% against 828_170 of debt
        assert outcome.health_factor.value == 799_999 * 10**18 // 828_170
        assert outcome.health_factor.value < 10**18
        assert not outcome.health_factor.is_healthy

    def test_supplying_collateral_also_accrues_debt(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        self._open_loan(processor)
        processor.process(
            SupplyCollateral(meta=_meta(5, REPAY_AT), pool=POOL, user=BORROWER, asset=WETH, amount=1)
        )
        position = store.get_borrow_position(BORROWER, POOL, USDC)
        assert position.accrued_interest == 128_170

    def test_other_borrow_assets_accrue_too(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        self._open_loan(processor)
        dai = "0xdai"
        processor.process(
            BorrowDebt(meta=_meta(5, REPAY_AT), pool=POOL, user=BORROWER, asset=dai, amount=1)
        )
        usdc_debt = store.get_borrow_position(BORROWER, POOL, USDC)
        dai_debt = store.get_borrow_position(BORROWER, POOL, dai)
        assert usdc_debt.last_accrued == REPAY_AT
        assert usdc_debt.amount == 828_170
        assert dai_debt.amount == 1


class TestPoolClock:
    def test_lazily_created_pool_starts_at_first_event(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        outcome = processor.process(
            SupplyLiquidity(
                meta=_meta(1, 1_735_689_600), pool=POOL, user=LENDER, asset=USDC, amount=500
            )
        )
        assert outcome.accrual.delta_t == 0
        assert store.accruals(POOL) == []
        assert store.get_pool(POOL).state.last_accrued == 1_735_689_600

    def test_registered_pool_starts_at_creation(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process(_pool_created(timestamp=5_000))
        assert store.get_pool(POOL).state.last_accrued == 5_000

        outcome = processor.process(
            SupplyLiquidity(meta=_meta(2, 5_100), pool=POOL, user=LENDER, asset=USDC, amount=500)
        )
        assert outcome.accrual.delta_t == 100

    def test_create_position_seeds_clock(
        self, store: InMemoryStateStore, processor: EventProcessor
    ) -> None:
        processor.process(CreatePosition(meta=_meta(1, 9_000), pool=POOL, user=BORROWER))
        assert store.get_pool(POOL).state.last_accrued == 9_000
