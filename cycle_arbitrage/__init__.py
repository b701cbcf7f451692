"""
Cycle Arbitrage for the GalaSwap DEX.

Enumerates closed multi-hop token cycles over a configurable token universe
and fee-tier set, quotes every hop against the DEX backend, ranks the
profitable cycles and optionally replays the best one as a sequence of swaps
guarded by a hop bound, a global cooldown and a per-route dedupe window.
"""

PROJECT_NAME = "GalaSwap-Cycle-Arbitrage"

from cycle_arbitrage.version import __version__

VERSION = __version__

from cycle_arbitrage.constants import ExecutionPolicy, RouteStrategy
from cycle_arbitrage.execution_types import (
    Cycle,
    ExecutionResult,
    ExecutionState,
    Opportunity,
    ScanProgress,
    SkipReason,
)
from cycle_arbitrage.executor import CycleExecutor
from cycle_arbitrage.ranking import rank
from cycle_arbitrage.routes import RouteEnumerator
from cycle_arbitrage.scanner import CycleScanner
from cycle_arbitrage.tokens import TokenIdentifier, normalize

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "Cycle",
    "CycleExecutor",
    "CycleScanner",
    "ExecutionPolicy",
    "ExecutionResult",
    "ExecutionState",
    "Opportunity",
    "RouteEnumerator",
    "RouteStrategy",
    "ScanProgress",
    "SkipReason",
    "TokenIdentifier",
    "normalize",
    "rank",
]
