"""Pool-level interest accrual over elapsed time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from src.data.constants import BPS, DEFAULT_COMPOUNDING_PERIODS, SECONDS_PER_YEAR
from src.protocol.compounding import to_apy_bps
from src.protocol.errors import InvalidTimeOrderingError
from src.protocol.fixed_point import checked_add, checked_mul
from src.protocol.interest_rate import InterestRateModel
from src.protocol.pool import PoolState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccrualResult:
    """Outcome of a single accrual step."""

    new_supply_assets: int
    new_borrow_assets: int
    interest_earned: int
    previous_supply_assets: int = 0
    previous_borrow_assets: int = 0
    borrow_rate_bps: int = 0
    delta_t: int = 0


@dataclass(frozen=True)
class RateSnapshot:
    """Rates derived from a pool state; never stored as authoritative data."""

    utilization_bps: int
    borrow_rate_bps: int
    supply_rate_bps: int
    borrow_apy_bps: int
    supply_apy_bps: int


def linear_interest(principal: int, rate_bps: int, delta_t: int) -> int:
    """Simple interest on *principal* at *rate_bps* per year over *delta_t* seconds."""
    numerator = checked_mul(checked_mul(principal, rate_bps), delta_t)
    return numerator // (SECONDS_PER_YEAR * BPS)


def accrue(
    state: PoolState, model: InterestRateModel, current_timestamp: int
) -> tuple[PoolState, AccrualResult]:
    """Bring a pool's totals up to *current_timestamp*.

    Must run before an event's own balance delta is applied, so the delta
    lands on freshly accrued totals. A zero elapsed window is a no-op, which
    keeps several events in one block from accruing twice.

    Raises:
        InvalidTimeOrderingError: if *current_timestamp* precedes ``last_accrued``.
    """
    delta_t = current_timestamp - state.last_accrued
    if delta_t < 0:
        raise InvalidTimeOrderingError(state.last_accrued, current_timestamp)

    if delta_t == 0:
        return state, AccrualResult(
            new_supply_assets=state.total_supply_assets,
            new_borrow_assets=state.total_borrow_assets,
            interest_earned=0,
            previous_supply_assets=state.total_supply_assets,
            previous_borrow_assets=state.total_borrow_assets,
        )

    _, borrow_rate, _ = model.rates_for(state)
    interest = linear_interest(state.total_borrow_assets, borrow_rate, delta_t)
    supplier_interest = interest * (BPS - model.params.reserve_factor_bps) // BPS

    new_borrow = checked_add(state.total_borrow_assets, interest)
    new_supply = checked_add(state.total_supply_assets, supplier_interest)

    new_state = replace(
        state,
        total_supply_assets=new_supply,
        total_borrow_assets=new_borrow,
        last_accrued=current_timestamp,
    )
    if interest:
        logger.debug(
            "Accrued %d interest over %ds at %d bps", interest, delta_t, borrow_rate
        )
    return new_state, AccrualResult(
        new_supply_assets=new_supply,
        new_borrow_assets=new_borrow,
        interest_earned=interest,
        previous_supply_assets=state.total_supply_assets,
        previous_borrow_assets=state.total_borrow_assets,
        borrow_rate_bps=borrow_rate,
        delta_t=delta_t,
    )


def rate_snapshot(
    state: PoolState,
    model: InterestRateModel,
    compounding_periods: int = DEFAULT_COMPOUNDING_PERIODS,
) -> RateSnapshot:
    """Derive utilization, rates and compounded APYs for a pool state."""
    utilization, borrow_rate, supply_rate = model.rates_for(state)
    return RateSnapshot(
        utilization_bps=utilization,
        borrow_rate_bps=borrow_rate,
        supply_rate_bps=supply_rate,
        borrow_apy_bps=to_apy_bps(borrow_rate, compounding_periods),
        supply_apy_bps=to_apy_bps(supply_rate, compounding_periods),
    )
