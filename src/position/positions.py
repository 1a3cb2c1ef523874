"""Per-user collateral and borrow positions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CollateralPosition:
    """Collateral a user has posted to a pool, for one asset."""

    user: str
    pool: str
    asset: str
    amount: int = 0
    collateral_factor_bps: int = 0  # effective LTV weight, e.g. 8000 = 80%
    is_active: bool = False

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user, self.pool, self.asset)


@dataclass(frozen=True)
class BorrowPosition:
    """Debt a user owes a pool, for one asset."""

    user: str
    pool: str
    asset: str
    amount: int = 0
    accrued_interest: int = 0  # informational running total, never reduced
    borrow_rate_bps: int = 0
    last_accrued: int = 0
    is_active: bool = False

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user, self.pool, self.asset)
