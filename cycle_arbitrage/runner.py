"""
Outer scan loop: scan, rank, optionally execute the best candidate, wait.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from .config_schema import ArbitrageConfig
from .execution_types import ExecutionResult, Opportunity
from .executor import CycleExecutor
from .ranking import rank
from .reporter import ProgressReporter
from .scanner import CycleScanner
from .utils import format_profit_pct, get_logger

logger = get_logger(__name__)


@dataclass
class RoundSummary:
    """What one loop iteration produced."""

    opportunities: List[Opportunity] = field(default_factory=list)
    eligible: List[Opportunity] = field(default_factory=list)
    execution: Optional[ExecutionResult] = None

    @property
    def best(self) -> Optional[Opportunity]:
        return self.eligible[0] if self.eligible else None


class ArbitrageRunner:
    """
    Drives scanner, ranker and executor on a fixed interval.

    ``run()`` is the only place that swallows every error: a failed round is
    logged and the loop continues after the scan interval.
    """

    def __init__(
        self,
        config: ArbitrageConfig,
        scanner: CycleScanner,
        executor: Optional[CycleExecutor] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.config = config
        self.scanner = scanner
        self.executor = executor
        self.reporter = reporter or ProgressReporter(scanner.get_progress, config.reporter)
        self.rounds = 0

    def log_banner(self) -> None:
        scan = self.config.scan
        execution = self.config.execution
        logger.info(
            f"Cycle arbitrage started | scanner={scan.enabled} | execute={execution.enabled} "
            f"| probe={scan.probe_amount} | trade={execution.trade_amount} "
            f"| strategy={scan.route_strategy.value} | policy={execution.policy.value}"
        )
        logger.info(
            f"Bases: {', '.join(scan.base_symbols)} | Tokens: {', '.join(scan.tokens)} "
            f"| Fees=[{','.join(str(f) for f in scan.fee_tiers)}] "
            f"| MinProfit={scan.min_profit_bps}bps | MaxHops={scan.max_hops}"
        )

    async def run_once(self) -> RoundSummary:
        """Run one scan round."""
        summary = RoundSummary()
        self.rounds += 1

        self.reporter.start()
        try:
            summary.opportunities = await self.scanner.scan()
        finally:
            await self.reporter.stop()

        summary.eligible = rank(summary.opportunities, self.config.scan.min_profit_bps)
        best = summary.best
        if best is None:
            logger.info("[EXEC] no eligible opportunity this round")
            return summary

        logger.info(
            f"[CANDIDATE] {best.path} | profit≈{format_profit_pct(best.pct)} | hops={best.hops}"
        )
        if self.executor is not None and self.config.execution.enabled:
            summary.execution = await self.executor.attempt(best)
        return summary

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Loop until ``stop_event`` is set."""
        stop_event = stop_event or asyncio.Event()
        interval = self.config.scan.interval_ms / 1000
        self.log_banner()

        while not stop_event.is_set():
            if self.config.scan.enabled:
                try:
                    await self.run_once()
                except Exception as e:
                    logger.error(f"loop error: {e}", exc_info=True)
            else:
                logger.debug("Scanner disabled; idling")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

        logger.info(f"Cycle arbitrage stopped after {self.rounds} rounds")
