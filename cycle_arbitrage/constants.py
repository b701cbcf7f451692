"""
Constants and enums for the cycle arbitrage system.

Centralizes the hop bound, fee tiers, default intervals and other values
shared by the scanner, the executor and the configuration layer.
"""

from enum import Enum

# Single hop bound shared by scanning and execution
MIN_HOPS = 2
MAX_HOPS = 5

# Token class marker used by every identifier in this domain
UNIT_CLASS = "Unit"
NONE_FIELD = "none"

# Fee tiers offered by the pools (basis-point-like units)
DEFAULT_FEE_TIERS = (500, 3000, 10000)

BPS_PER_UNIT = 10_000


class RouteStrategy(str, Enum):
    """How candidate cycles pick their fee tiers."""

    FULL = "full"  # every fee-tier combination
    GREEDY = "greedy"  # best-output tier per hop


class ExecutionPolicy(str, Enum):
    """How the executor treats a submitted swap before moving on."""

    SPECULATIVE = "speculative"  # log the handle, sleep, continue
    CONFIRMED = "confirmed"  # wait for the backend to confirm


# Default configuration constants
DEFAULT_CONFIG = {
    "BASE_SYMBOLS": ["GUSDC", "GALA"],
    "TOKENS": ["GUSDC", "GALA", "GMUSIC", "FILM", "GWETH", "GWBTC", "SOL", "OSMI"],
    "PROBE_AMOUNT": "50",
    "TRADE_AMOUNT": "50",
    "MAX_HOPS": 3,
    "MIN_PROFIT_BPS": 0,
    "MAX_SLIPPAGE_BPS": 50,
    "COOLDOWN_MS": 30_000,
    "DEDUPE_WINDOW_MS": 120_000,
    "SCAN_INTERVAL_MS": 5_000,
    "STATUS_INTERVAL_MS": 2_000,
    "STATUS_BREAKDOWN_TOP": 4,
    "WAIT_AFTER_SEND_MS": 7_000,
    "LOG_SEARCHED_MAX": 0,
}

# Network and API constants
NETWORK_CONFIG = {
    "DEX_BASE_URL": "https://dex-backend-prod1.defi.gala.com",
    "QUOTE_PATH": "/v1/trade/quote",
    "DEFAULT_API_TIMEOUT": 15,
    "DEFAULT_PROMETHEUS_PORT": 8000,
    "RETRY_MAX_ATTEMPTS": 3,
    "RETRY_DELAY_MS": 250,
    "RETRY_BACKOFF_MULTIPLIER": 2.0,
    "MAX_IN_FLIGHT_QUOTES": 4,
}

# Observability constants
METRICS_CONSTANTS = {
    "METRIC_PREFIX": "cycle_arbitrage",
    "HISTOGRAM_BUCKETS_PROFIT_PCT": [-5.0, -1.0, -0.5, -0.1, 0.0, 0.1, 0.5, 1.0, 5.0],
}
