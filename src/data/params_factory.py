"""Build engine configuration from the environment, falling back to static defaults."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from src.data.static_params import (
    COMPOUNDING_PERIODS,
    DEFAULT_COLLATERAL_FACTOR_BPS,
    DEFAULT_RATE_PARAMS,
)
from src.protocol.errors import InvalidRateModelError
from src.protocol.interest_rate import InterestRateParams

logger = logging.getLogger(__name__)

# Environment variable → InterestRateParams field
_RATE_ENV_VARS: dict[str, str] = {
    "LENDING_BASE_RATE_BPS": "base_rate_bps",
    "LENDING_SLOPE1_BPS": "slope1_bps",
    "LENDING_SLOPE2_BPS": "slope2_bps",
    "LENDING_KINK_BPS": "kink_utilization_bps",
    "LENDING_RESERVE_FACTOR_BPS": "reserve_factor_bps",
}


@dataclass(frozen=True)
class EngineConfig:
    """Everything the event processor needs besides a store."""

    rate_params: InterestRateParams
    compounding_periods: int
    default_collateral_factor_bps: int


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; using default %d", name, raw, default)
        return default


def load_rate_params(env: Mapping[str, str] | None = None) -> InterestRateParams:
    """Read the rate curve from ``LENDING_*_BPS`` variables.

    Any variable left unset keeps its static default. A combination the
    curve cannot evaluate (e.g. a kink at 0%) is logged and replaced by the
    static defaults as a whole.
    """
    env = os.environ if env is None else env
    values = {
        field: _read_int(env, var, getattr(DEFAULT_RATE_PARAMS, field))
        for var, field in _RATE_ENV_VARS.items()
    }
    try:
        return InterestRateParams(**values)
    except InvalidRateModelError:
        logger.warning("Invalid rate model from environment; using static defaults", exc_info=True)
        return DEFAULT_RATE_PARAMS


def load_engine_config(env: Mapping[str, str] | None = None) -> EngineConfig:
    """Create the engine configuration.

    Parameters
    ----------
    env : Mapping[str, str] | None
        Source of ``LENDING_*`` settings. Defaults to ``os.environ``.

    Returns
    -------
    EngineConfig
        Rate params plus ``LENDING_COMPOUNDING_PERIODS`` and
        ``LENDING_DEFAULT_COLLATERAL_FACTOR_BPS``, each validated and
        falling back to the static value.
    """
    env = os.environ if env is None else env

    periods = _read_int(env, "LENDING_COMPOUNDING_PERIODS", COMPOUNDING_PERIODS)
    if periods < 1:
        logger.warning("LENDING_COMPOUNDING_PERIODS must be >= 1; using %d", COMPOUNDING_PERIODS)
        periods = COMPOUNDING_PERIODS

    factor = _read_int(
        env, "LENDING_DEFAULT_COLLATERAL_FACTOR_BPS", DEFAULT_COLLATERAL_FACTOR_BPS
    )
    if not 0 <= factor <= 10_000:
        logger.warning(
            "LENDING_DEFAULT_COLLATERAL_FACTOR_BPS out of range; using %d",
            DEFAULT_COLLATERAL_FACTOR_BPS,
        )
        factor = DEFAULT_COLLATERAL_FACTOR_BPS

    return EngineConfig(
        rate_params=load_rate_params(env),
        compounding_periods=periods,
        default_collateral_factor_bps=factor,
    )
