"""
Cycle scanner: quotes candidate routes hop by hop and reports the ones
that complete.

Each hop's quoted output becomes the next hop's exact input, so the hops of
one cycle are always quoted in order. A cycle is dropped (never an error
for the scan as a whole) when a hop has no pool, the quote fails, or the
quoted output is zero.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from .config_schema import ScanSettings
from .constants import RouteStrategy
from .exceptions import CycleArbitrageError
from .execution_types import Cycle, FeeTier, Opportunity, ScanProgress, path_label
from .interfaces import QuoteProvider, TimeProvider
from .opportunity_math import profit_bps
from .progress import PairStatsCollector, ProgressTracker
from .routes import RouteEnumerator, TokenPath
from .tokens import TokenIdentifier
from .utils import format_duration, get_logger

logger = get_logger(__name__)


class CycleScanner:
    """
    Walks every candidate cycle from the route enumerator through the
    quoting collaborator and builds an Opportunity for each completed one.
    """

    def __init__(
        self,
        quoter: QuoteProvider,
        settings: ScanSettings,
        clock: Optional[TimeProvider] = None,
        metrics=None,
    ):
        self.quoter = quoter
        self.settings = settings
        self.metrics = metrics
        self.progress = ProgressTracker(clock)
        self.pair_stats: Optional[PairStatsCollector] = None
        self.searched: List[str] = []
        self.searched_total = 0
        self._fee_tiers: Tuple[FeeTier, ...] = tuple(settings.fee_tiers)

    def get_progress(self) -> ScanProgress:
        """Snapshot of the current (or last) scan session."""
        return self.progress.snapshot()

    def build_enumerator(self) -> RouteEnumerator:
        return RouteEnumerator(
            bases=self.settings.base_tokens,
            universe=self.settings.universe,
            fee_tiers=self.settings.fee_tiers,
            max_hops=self.settings.max_hops,
        )

    async def scan(self) -> List[Opportunity]:
        """
        Run one full scan.

        Returns:
            Opportunities in enumeration order, profitable or not
        """
        settings = self.settings
        enumerator = self.build_enumerator()
        strategy = settings.route_strategy
        self._fee_tiers = enumerator.fee_tiers

        self.progress.reset(
            enumerator.estimate_quotes(strategy),
            [base.symbol for base in enumerator.bases],
        )
        self.pair_stats = PairStatsCollector() if settings.pair_diagnostics else None
        self.searched = []
        self.searched_total = 0
        if self.metrics:
            self.metrics.record_scan()

        if strategy == RouteStrategy.GREEDY:
            candidates: Iterable = enumerator.token_paths()
            evaluate: Callable[..., Awaitable[Optional[Opportunity]]] = self._evaluate_greedy
        else:
            candidates = enumerator.cycles()
            evaluate = self._evaluate_cycle

        try:
            if settings.concurrency <= 1:
                opportunities = []
                for candidate in candidates:
                    opportunity = await evaluate(candidate)
                    if opportunity is not None:
                        opportunities.append(opportunity)
            else:
                opportunities = await self._evaluate_concurrently(
                    candidates, evaluate, settings.concurrency
                )
        finally:
            self.progress.finish()

        self._log_scan_summary(opportunities)
        return opportunities

    async def _evaluate_concurrently(
        self,
        candidates: Iterable,
        evaluate: Callable[..., Awaitable[Optional[Opportunity]]],
        limit: int,
    ) -> List[Opportunity]:
        """Quote up to ``limit`` cycles at once, keeping enumeration order."""
        found: List[Tuple[int, Opportunity]] = []
        indexed = enumerate(candidates)

        async def worker():
            for index, candidate in indexed:
                opportunity = await evaluate(candidate)
                if opportunity is not None:
                    found.append((index, opportunity))

        tasks = [asyncio.create_task(worker()) for _ in range(limit)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        found.sort(key=lambda item: item[0])
        return [opportunity for _, opportunity in found]

    async def _evaluate_cycle(self, cycle: Cycle) -> Optional[Opportunity]:
        """Quote every hop of a fixed-fee cycle."""
        self._record_route(cycle.tokens, cycle.fees)
        amount = self.settings.probe_amount
        for token_in, token_out, fee in cycle.legs():
            amount_out = await self._quote(token_in, token_out, amount, fee)
            if amount_out is None or amount_out.is_zero():
                return None
            amount = amount_out
        return self._build_opportunity(cycle.tokens, cycle.fees, amount)

    async def _evaluate_greedy(self, path: TokenPath) -> Optional[Opportunity]:
        """Quote each hop at every fee tier and carry the best output forward."""
        self._record_route(path)
        amount = self.settings.probe_amount
        fees: List[FeeTier] = []
        for token_in, token_out in zip(path, path[1:]):
            best_out: Optional[Decimal] = None
            best_fee: Optional[FeeTier] = None
            for fee in self._fee_tiers:
                amount_out = await self._quote(token_in, token_out, amount, fee)
                if amount_out is None or amount_out.is_zero():
                    continue
                if best_out is None or amount_out > best_out:
                    best_out, best_fee = amount_out, fee
            if best_out is None:
                return None
            fees.append(best_fee)
            amount = best_out
        return self._build_opportunity(path, tuple(fees), amount)

    async def _quote(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        amount_in: Decimal,
        fee: FeeTier,
    ) -> Optional[Decimal]:
        try:
            result = await self.quoter.quote_exact_input(token_in, token_out, amount_in, fee)
        except CycleArbitrageError as e:
            self._record_quote(token_in, token_out, fee, ok=False)
            logger.debug(f"No quote {token_in.symbol}->{token_out.symbol} fee={fee}: {e}")
            return None
        except Exception as e:
            self._record_quote(token_in, token_out, fee, ok=False)
            logger.warning(
                f"Quote {token_in.symbol}->{token_out.symbol} fee={fee} failed unexpectedly: "
                f"{type(e).__name__}: {e}"
            )
            return None
        self._record_quote(token_in, token_out, fee, ok=True)
        return result.output_amount

    def _record_route(self, tokens: TokenPath, fees: Sequence[FeeTier] = ()) -> None:
        self.progress.record_route(tokens[0].symbol)
        self.searched_total += 1
        if self.metrics:
            self.metrics.record_route()
        settings = self.settings
        if settings.log_searched_pairs and len(self.searched) < settings.log_searched_max:
            label = path_label(tokens)
            if fees:
                label += f" [{','.join(str(f) for f in fees)}]"
            self.searched.append(label)

    def _record_quote(
        self, token_in: TokenIdentifier, token_out: TokenIdentifier, fee: FeeTier, ok: bool
    ) -> None:
        self.progress.record_quote(ok)
        if self.pair_stats is not None:
            self.pair_stats.record(token_in, token_out, fee, ok)
        if self.metrics:
            self.metrics.record_quote(ok)

    def _build_opportunity(
        self, tokens: TokenPath, fees: Tuple[FeeTier, ...], amount_out: Decimal
    ) -> Opportunity:
        amount_in = self.settings.probe_amount
        opportunity = Opportunity(
            path=path_label(tokens),
            tokens=tuple(tokens),
            fees=tuple(fees),
            hops=len(fees),
            amount_in=amount_in,
            amount_out=amount_out,
            profit_bps=profit_bps(amount_in, amount_out),
        )
        if self.metrics:
            self.metrics.record_opportunity()
        logger.debug(
            f"Quoted {opportunity.path} fees={list(fees)} "
            f"out={amount_out} profit={opportunity.profit_bps:.2f}bps"
        )
        return opportunity

    def _log_scan_summary(self, opportunities: List[Opportunity]) -> None:
        progress = self.progress.snapshot()
        logger.info(
            f"Scan finished in {format_duration(progress.elapsed_ms / 1000)} | "
            f"routes={progress.pairs_tried} | quotes={progress.quotes_requested} "
            f"(ok={progress.quotes_ok}, err={progress.quotes_err}) | "
            f"opportunities={len(opportunities)}"
        )

        if self.settings.log_searched_pairs:
            logger.info(
                f"[ARB:searched] pairs checked ({len(self.searched)}/{self.searched_total})"
            )
            for label in self.searched:
                logger.info(f"  - {label}")

        if self.pair_stats is not None:
            for line in self.pair_stats.summary_lines():
                logger.info(f"[ARB:pairs] {line}")
