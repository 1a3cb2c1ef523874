"""Health factor aggregation over a user's collateral and borrow positions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.data.constants import BPS, DEGRADED_HEALTH_FACTOR, HEALTH_FACTOR_SAFE, WAD
from src.position.positions import BorrowPosition, CollateralPosition
from src.protocol.errors import ArithmeticOverflowError, DegradedRiskComputationError
from src.protocol.fixed_point import check_uint256, checked_add, mul_div_down

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthFactor:
    """WAD-scaled collateral-to-debt ratio.

    ``degraded`` marks a fail-closed result that must not be read as real
    risk data.
    """

    value: int
    degraded: bool = False
    reason: str | None = None

    @property
    def is_healthy(self) -> bool:
        return not self.degraded and self.value >= WAD

    def as_float(self) -> float:
        return self.value / WAD


class HealthFactorCalculator:
    """Aggregate positions (already in a common unit) into a health factor."""

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    @staticmethod
    def weighted_collateral(positions: Iterable[CollateralPosition]) -> int:
        """Σ amount * collateral_factor / 10000 over active collateral."""
        total = 0
        for p in positions:
            if not p.is_active:
                continue
            check_uint256(p.amount, "collateral amount")
            if not 0 <= p.collateral_factor_bps <= BPS:
                raise ValueError(
                    f"collateral_factor_bps out of range: {p.collateral_factor_bps}"
                )
            total = checked_add(total, mul_div_down(p.amount, p.collateral_factor_bps, BPS))
        return total

    @staticmethod
    def total_debt(positions: Iterable[BorrowPosition]) -> int:
        """Σ amount over active borrows."""
        total = 0
        for p in positions:
            if not p.is_active:
                continue
            total = checked_add(total, check_uint256(p.amount, "borrow amount"))
        return total

    def health_factor(
        self,
        collateral_positions: Iterable[CollateralPosition],
        borrow_positions: Iterable[BorrowPosition],
    ) -> HealthFactor:
        """Compute the health factor.

        HF = weighted_collateral * 1e18 / total_debt

        Returns ``2e18`` when there is no debt. Malformed input fails closed
        with ``DEGRADED_HEALTH_FACTOR`` and ``degraded=True`` (or raises
        :class:`DegradedRiskComputationError` in strict mode).
        """
        try:
            collateral = self.weighted_collateral(collateral_positions)
            debt = self.total_debt(borrow_positions)
            if debt == 0:
                return HealthFactor(HEALTH_FACTOR_SAFE)
            return HealthFactor(mul_div_down(collateral, WAD, debt))
        except (TypeError, ValueError, AttributeError, ArithmeticOverflowError) as exc:
            if self.strict:
                raise DegradedRiskComputationError(str(exc)) from exc
            logger.warning("Degraded health factor computation: %s", exc)
            return HealthFactor(DEGRADED_HEALTH_FACTOR, degraded=True, reason=str(exc))
