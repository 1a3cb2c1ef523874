"""Fixed-point units and protocol constants."""

# Basis points: 10_000 bps = 100%
BPS = 10_000

# WAD (1e18): fixed-point unit for health factors and compounding
WAD = 10**18

# 365 days; the rate curve is annualized over a non-leap year
SECONDS_PER_YEAR = 31_536_000

# Analytics snapshots are bucketed into hourly windows
SNAPSHOT_INTERVAL = 3600

# Every stored amount must fit an unsigned 256-bit word
UINT256_MAX = 2**256 - 1

# Health factor returned when a user has no debt
HEALTH_FACTOR_SAFE = 2 * WAD

# Health factor returned when the computation could not be trusted
DEGRADED_HEALTH_FACTOR = 0

# Ceiling for compounded APYs (1e12 bps = 1e10 %)
MAX_APY_BPS = 10**12

# Default compounding frequency for APY figures (daily)
DEFAULT_COMPOUNDING_PERIODS = 365
