"""Hardcoded default engine parameters and a demo event sequence."""

from src.data.constants import DEFAULT_COMPOUNDING_PERIODS
from src.events.types import (
    BorrowDebt,
    CreatePosition,
    EventMeta,
    LendingEvent,
    PoolCreated,
    RepayDebt,
    SupplyCollateral,
    SupplyLiquidity,
    WithdrawLiquidity,
)
from src.protocol.interest_rate import InterestRateParams

# --- Default rate curve (annualized bps) ---

DEFAULT_RATE_PARAMS = InterestRateParams(
    base_rate_bps=0,
    slope1_bps=2000,
    slope2_bps=10000,
    kink_utilization_bps=8000,
    reserve_factor_bps=0,
)

DEFAULT_COLLATERAL_FACTOR_BPS = 8000

COMPOUNDING_PERIODS = DEFAULT_COMPOUNDING_PERIODS

# --- Demo replay used by the dashboard (Base Sepolia-style addresses) ---

DEMO_FACTORY = "0x31c3850D2cBDC5B084D632d1c61d54161790bFF8"
DEMO_POOL = "0x5a4c1b7e0f3d2e9a8b6c4d2e0f1a3b5c7d9e1f20"
DEMO_COLLATERAL_TOKEN = "0x4200000000000000000000000000000000000006"  # WETH
DEMO_BORROW_TOKEN = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"  # USDC
DEMO_LENDER = "0x1111111111111111111111111111111111111111"
DEMO_BORROWER = "0x2222222222222222222222222222222222222222"

_DEMO_START = 1_735_689_600  # 2025-01-01T00:00:00Z
_HOUR = 3600


def _meta(block: int, log_index: int, offset: int) -> EventMeta:
    return EventMeta(
        block_number=30_396_548 + block,
        log_index=log_index,
        transaction_hash=f"0x{block:04x}{log_index:04x}".ljust(66, "0"),
        timestamp=_DEMO_START + offset,
    )


def demo_events() -> list[LendingEvent]:
    """A small, deterministic history: one pool, one lender, one borrower."""
    return [
        PoolCreated(
            meta=_meta(0, 0, 0),
            factory=DEMO_FACTORY,
            pool=DEMO_POOL,
            collateral_token=DEMO_COLLATERAL_TOKEN,
            borrow_token=DEMO_BORROW_TOKEN,
            ltv_bps=DEFAULT_COLLATERAL_FACTOR_BPS,
        ),
        SupplyLiquidity(
            meta=_meta(10, 0, 10 * 60),
            pool=DEMO_POOL,
            user=DEMO_LENDER,
            asset=DEMO_BORROW_TOKEN,
            amount=1_000_000 * 10**6,
        ),
        CreatePosition(meta=_meta(20, 0, 20 * 60), pool=DEMO_POOL, user=DEMO_BORROWER),
        SupplyCollateral(
            meta=_meta(20, 1, 20 * 60),
            pool=DEMO_POOL,
            user=DEMO_BORROWER,
            asset=DEMO_COLLATERAL_TOKEN,
            amount=1_200_000 * 10**6,
        ),
        BorrowDebt(
            meta=_meta(30, 0, 2 * _HOUR),
            pool=DEMO_POOL,
            user=DEMO_BORROWER,
            asset=DEMO_BORROW_TOKEN,
            amount=500_000 * 10**6,
        ),
        BorrowDebt(
            meta=_meta(40, 0, 6 * _HOUR),
            pool=DEMO_POOL,
            user=DEMO_BORROWER,
            asset=DEMO_BORROW_TOKEN,
            amount=250_000 * 10**6,
        ),
        WithdrawLiquidity(
            meta=_meta(50, 0, 12 * _HOUR),
            pool=DEMO_POOL,
            user=DEMO_LENDER,
            asset=DEMO_BORROW_TOKEN,
            amount=100_000 * 10**6,
        ),
        RepayDebt(
            meta=_meta(60, 0, 20 * _HOUR),
            pool=DEMO_POOL,
            user=DEMO_BORROWER,
            asset=DEMO_BORROW_TOKEN,
            amount=300_000 * 10**6,
        ),
    ]
