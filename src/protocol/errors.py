"""Exceptions raised by the rate and accrual engine."""


class LendingEngineError(Exception):
    """Base exception for all engine errors."""


class InvalidTimeOrderingError(LendingEngineError, ValueError):
    """Raised when an accrual is requested for a timestamp before the last one."""

    def __init__(self, last_accrued: int, current_timestamp: int) -> None:
        super().__init__(
            f"current_timestamp {current_timestamp} is before last_accrued {last_accrued}"
        )
        self.last_accrued = last_accrued
        self.current_timestamp = current_timestamp


class ArithmeticOverflowError(LendingEngineError, ArithmeticError):
    """Raised when a uint256 operation leaves the representable range."""


class InvalidRateModelError(LendingEngineError, ValueError):
    """Raised for interest rate parameters the curve cannot evaluate."""


class InvalidEventError(LendingEngineError, ValueError):
    """Raised when an event fails validation before reaching the engine."""


class UnresolvedTokenError(InvalidEventError):
    """Raised when an event's token identity is missing or is the pool itself."""


class EventOrderingError(LendingEngineError, ValueError):
    """Raised when an event arrives out of (block_number, log_index) order."""


class DegradedRiskComputationError(LendingEngineError, RuntimeError):
    """Raised by strict health factor computations that could not complete."""
