"""Pool asset/share totals and the balance deltas applied by events."""

from dataclasses import dataclass, replace

from src.protocol.fixed_point import (
    check_uint256,
    checked_add,
    checked_sub,
    mul_div_down,
    mul_div_up,
    zero_floor_sub,
)


def to_shares_down(assets: int, total_assets: int, total_shares: int) -> int:
    """Shares minted for *assets*, rounding against the depositor."""
    if total_shares == 0 or total_assets == 0:
        return assets
    return mul_div_down(assets, total_shares, total_assets)


def to_shares_up(assets: int, total_assets: int, total_shares: int) -> int:
    """Shares burned for *assets*, rounding against the withdrawer."""
    if total_shares == 0 or total_assets == 0:
        return assets
    return mul_div_up(assets, total_shares, total_assets)


@dataclass(frozen=True)
class PoolState:
    """Authoritative pool counters.

    Everything else (utilization, rates, APYs) is derived from these five
    fields on demand.
    """

    total_supply_assets: int = 0
    total_supply_shares: int = 0
    total_borrow_assets: int = 0
    total_borrow_shares: int = 0
    last_accrued: int = 0

    def __post_init__(self) -> None:
        for name in (
            "total_supply_assets",
            "total_supply_shares",
            "total_borrow_assets",
            "total_borrow_shares",
            "last_accrued",
        ):
            check_uint256(getattr(self, name), name)

    # The methods below assume the pool was accrued to the event timestamp.

    def supply(self, assets: int) -> "PoolState":
        shares = to_shares_down(assets, self.total_supply_assets, self.total_supply_shares)
        return replace(
            self,
            total_supply_assets=checked_add(self.total_supply_assets, assets),
            total_supply_shares=checked_add(self.total_supply_shares, shares),
        )

    def withdraw(self, assets: int) -> "PoolState":
        shares = to_shares_up(assets, self.total_supply_assets, self.total_supply_shares)
        return replace(
            self,
            total_supply_assets=checked_sub(self.total_supply_assets, assets),
            total_supply_shares=zero_floor_sub(self.total_supply_shares, shares),
        )

    def borrow(self, assets: int) -> "PoolState":
        shares = to_shares_up(assets, self.total_borrow_assets, self.total_borrow_shares)
        return replace(
            self,
            total_borrow_assets=checked_add(self.total_borrow_assets, assets),
            total_borrow_shares=checked_add(self.total_borrow_shares, shares),
        )

    def repay(self, assets: int) -> "PoolState":
        """Reduce debt; floors at zero since user-level accrual can drift above the pool's."""
        shares = to_shares_down(assets, self.total_borrow_assets, self.total_borrow_shares)
        return replace(
            self,
            total_borrow_assets=zero_floor_sub(self.total_borrow_assets, assets),
            total_borrow_shares=zero_floor_sub(self.total_borrow_shares, shares),
        )
