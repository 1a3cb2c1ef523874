"""Checked uint256 arithmetic.

Python integers never wrap, so range checks are explicit: any result outside
``[0, UINT256_MAX]`` raises :class:`ArithmeticOverflowError` instead of being
silently truncated the way on-chain code would.
"""

from src.data.constants import UINT256_MAX
from src.protocol.errors import ArithmeticOverflowError


def check_uint256(value: int, name: str = "value") -> int:
    """Return *value* if it is an int in the uint256 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflowError(f"{name}={value} is outside the uint256 range")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError(f"{a} + {b} overflows uint256")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflowError(f"{a} - {b} underflows uint256")
    return a - b


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError(f"{a} * {b} overflows uint256")
    return result


def mul_div_down(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)`` with an overflow check on the product."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div_down denominator is zero")
    return checked_mul(a, b) // denominator


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """``ceil(a * b / denominator)`` with an overflow check on the product."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div_up denominator is zero")
    return (checked_mul(a, b) + denominator - 1) // denominator


def zero_floor_sub(a: int, b: int) -> int:
    """``max(a - b, 0)``; absorbs rounding drift between pool and user totals."""
    return a - b if a > b else 0
