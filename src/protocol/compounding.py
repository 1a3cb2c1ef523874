"""Simple annual rate → compounded APY conversion in WAD fixed point."""

from src.data.constants import BPS, DEFAULT_COMPOUNDING_PERIODS, MAX_APY_BPS, WAD
from src.protocol.errors import ArithmeticOverflowError
from src.protocol.fixed_point import checked_mul


def _wad_mul(a: int, b: int) -> int:
    return checked_mul(a, b) // WAD


def _wad_pow(base: int, exponent: int) -> int:
    """Raise a WAD-scaled *base* to an integer power by repeated squaring.

    Each multiplication truncates, so the precision loss is bounded by
    roughly ``2 * log2(exponent)`` wei.
    """
    result = WAD
    while exponent > 0:
        if exponent & 1:
            result = _wad_mul(result, base)
        exponent >>= 1
        if exponent:
            base = _wad_mul(base, base)
    return result


def to_apy_bps(
    rate_bps: int, compounding_periods_per_year: int = DEFAULT_COMPOUNDING_PERIODS
) -> int:
    """Convert a simple annual rate into an effective compounded APY.

    APY = (1 + r / n)^n - 1

    Args:
        rate_bps: Simple annual rate in bps.
        compounding_periods_per_year: Number of compounding periods ``n``.

    Returns:
        APY in bps. Exactly ``rate_bps`` when ``n == 1``, uncapped. Otherwise
        saturates at ``MAX_APY_BPS`` instead of overflowing.
    """
    if rate_bps < 0:
        raise ValueError(f"rate_bps must be non-negative, got {rate_bps}")
    if compounding_periods_per_year < 1:
        raise ValueError(
            f"compounding_periods_per_year must be >= 1, got {compounding_periods_per_year}"
        )
    if rate_bps == 0 or compounding_periods_per_year == 1:
        return rate_bps

    try:
        per_period = WAD + checked_mul(rate_bps, WAD) // (BPS * compounding_periods_per_year)
        growth = _wad_pow(per_period, compounding_periods_per_year)
    except ArithmeticOverflowError:
        return MAX_APY_BPS

    apy = (growth - WAD) * BPS // WAD
    return min(apy, MAX_APY_BPS)
