"""Interest accrual on an individual borrow position."""

from dataclasses import replace

from src.position.positions import BorrowPosition
from src.protocol.accrual import linear_interest
from src.protocol.errors import InvalidTimeOrderingError
from src.protocol.fixed_point import checked_add


def accrue_user(
    position: BorrowPosition, current_timestamp: int, current_borrow_rate_bps: int
) -> BorrowPosition:
    """Accrue simple interest on a borrow position up to *current_timestamp*.

    The caller must pass the freshly computed pool borrow rate; it becomes
    the position's displayed rate as well as the rate used for this window.
    An empty position or a zero window accrues nothing but still moves
    ``last_accrued`` forward.

    Raises:
        InvalidTimeOrderingError: if *current_timestamp* precedes ``last_accrued``.
    """
    delta_t = current_timestamp - position.last_accrued
    if delta_t < 0:
        raise InvalidTimeOrderingError(position.last_accrued, current_timestamp)

    if position.amount == 0 or delta_t == 0:
        return replace(
            position,
            borrow_rate_bps=current_borrow_rate_bps,
            last_accrued=current_timestamp,
        )

    interest = linear_interest(position.amount, current_borrow_rate_bps, delta_t)
    return replace(
        position,
        amount=checked_add(position.amount, interest),
        accrued_interest=checked_add(position.accrued_interest, interest),
        borrow_rate_bps=current_borrow_rate_bps,
        last_accrued=current_timestamp,
    )
