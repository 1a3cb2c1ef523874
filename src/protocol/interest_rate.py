"""Kinked two-slope interest rate model in basis points.

All arithmetic is integer with truncating division, so results are
reproducible across replays of the same event stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from src.data.constants import BPS
from src.protocol.errors import InvalidRateModelError

if TYPE_CHECKING:
    from src.protocol.pool import PoolState


@dataclass(frozen=True)
class InterestRateParams:
    """Parameters for the piecewise linear rate curve (annualized bps)."""

    base_rate_bps: int
    slope1_bps: int
    slope2_bps: int
    kink_utilization_bps: int
    reserve_factor_bps: int = 0

    def __post_init__(self) -> None:
        for name in (
            "base_rate_bps",
            "slope1_bps",
            "slope2_bps",
            "kink_utilization_bps",
            "reserve_factor_bps",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidRateModelError(f"{name} must be an int, got {value!r}")
            if value < 0:
                raise InvalidRateModelError(f"{name} must be non-negative, got {value}")
        if not 0 < self.kink_utilization_bps < BPS:
            raise InvalidRateModelError(
                f"kink_utilization_bps must be in (0, {BPS}), got {self.kink_utilization_bps}"
            )
        if self.reserve_factor_bps > BPS:
            raise InvalidRateModelError(
                f"reserve_factor_bps must be <= {BPS}, got {self.reserve_factor_bps}"
            )


def utilization_bps(state: PoolState) -> int:
    """Share of supplied assets currently borrowed, in bps.

    Returns 0 for an empty pool and never more than 10_000, even when
    rounding drift leaves borrows slightly above supply.
    """
    if state.total_supply_assets == 0:
        return 0
    u = state.total_borrow_assets * BPS // state.total_supply_assets
    return max(0, min(BPS, u))


class InterestRateModel:
    """Borrow and supply rates as a function of utilization."""

    def __init__(self, params: InterestRateParams) -> None:
        self.params = params

    def borrow_rate(self, utilization: int) -> int:
        """Compute the annual borrow rate for a given utilization.

        Args:
            utilization: Pool utilization in bps; clamped to [0, 10_000].

        Returns:
            Annual borrow rate in bps.
        """
        p = self.params
        utilization = max(0, min(BPS, utilization))

        if utilization < p.kink_utilization_bps:
            return p.base_rate_bps + p.slope1_bps * utilization // p.kink_utilization_bps
        excess = utilization - p.kink_utilization_bps
        return (
            p.base_rate_bps
            + p.slope1_bps
            + p.slope2_bps * excess // (BPS - p.kink_utilization_bps)
        )

    def supply_rate(self, utilization: int, borrow_rate: int | None = None) -> int:
        """Compute the supply (deposit) rate.

        R_supply = R_borrow * U / 10000 * (10000 - reserve_factor) / 10000
        Suppliers only earn interest borrowers actually pay, net of reserves.
        """
        utilization = max(0, min(BPS, utilization))
        if borrow_rate is None:
            borrow_rate = self.borrow_rate(utilization)
        return (
            borrow_rate * utilization // BPS * (BPS - self.params.reserve_factor_bps) // BPS
        )

    def rates_for(self, state: PoolState) -> tuple[int, int, int]:
        """Return (utilization, borrow_rate, supply_rate) for a pool state."""
        u = utilization_bps(state)
        borrow = self.borrow_rate(u)
        return u, borrow, self.supply_rate(u, borrow)

    def rate_curve(self, n_points: int = 201) -> pd.DataFrame:
        """Generate the full rate curve for plotting.

        Returns:
            DataFrame with columns: utilization_bps, borrow_rate_bps, supply_rate_bps
        """
        utilizations = np.linspace(0, BPS, n_points).round().astype(int)
        borrow_rates = [self.borrow_rate(int(u)) for u in utilizations]
        supply_rates = [self.supply_rate(int(u)) for u in utilizations]

        return pd.DataFrame(
            {
                "utilization_bps": utilizations,
                "borrow_rate_bps": borrow_rates,
                "supply_rate_bps": supply_rates,
            }
        )
