"""
Cycle executor: replays one quoted opportunity as a sequence of swaps.

Every attempt walks the same states:

    IDLE -> HOPS_BOUND_CHECK -> COOLDOWN_CHECK -> DEDUPE_CHECK
         -> EXECUTING (hop 0..N-1) -> COMPLETED | ABORTED

Rejections by the hop bound, the cooldown or the dedupe window are skips,
not failures, and never reach the swap collaborator. A failing hop aborts
the remaining hops; swaps already submitted are not rolled back.
"""

from typing import Optional

from .config_schema import ExecutionSettings
from .constants import ExecutionPolicy
from .exceptions import ExecutionError
from .execution_types import (
    ExecutionResult,
    ExecutionState,
    HopFill,
    Opportunity,
    SkipReason,
)
from .guards import ExecutionGuard
from .interfaces import (
    QuoteProvider,
    SwapProvider,
    SwapRequest,
    SystemTimeProvider,
    TimeProvider,
)
from .opportunity_math import minimum_output, profit_pct
from .utils import format_profit_pct, get_logger

logger = get_logger(__name__)


class CycleExecutor:
    """
    Executes opportunities hop by hop against a swap collaborator.

    Each hop is re-quoted at its own fee tier with the running amount, the
    swap is submitted with a slippage floor below that quote, and the quoted
    output becomes the next hop's input. Under the speculative policy the
    executor logs the pending handle and sleeps ``wait_after_send_ms``
    instead of waiting for confirmation.
    """

    def __init__(
        self,
        quoter: QuoteProvider,
        swapper: SwapProvider,
        settings: ExecutionSettings,
        clock: Optional[TimeProvider] = None,
        metrics=None,
    ):
        self.quoter = quoter
        self.swapper = swapper
        self.settings = settings
        self.clock = clock or SystemTimeProvider()
        self.metrics = metrics
        self.guard = ExecutionGuard(settings.cooldown_ms, settings.dedupe_window_ms)
        self.state = ExecutionState.IDLE

    @property
    def max_hops(self) -> int:
        return self.settings.max_hops

    async def try_execute(self, opportunity: Opportunity) -> bool:
        """Execute ``opportunity``; True only when every hop was submitted."""
        result = await self.attempt(opportunity)
        return result.success

    async def attempt(self, opportunity: Opportunity) -> ExecutionResult:
        """
        Run one execution attempt.

        Never raises: skips carry a ``skip_reason``, failures carry the
        error text.
        """
        self.state = ExecutionState.IDLE
        try:
            if not self.settings.enabled:
                return self._skip(opportunity, SkipReason.DISABLED, "Execution disabled")

            self.state = ExecutionState.HOPS_BOUND_CHECK
            if opportunity.hops > self.max_hops:
                return self._skip(
                    opportunity,
                    SkipReason.TOO_MANY_HOPS,
                    f"{opportunity.hops} hops exceeds limit of {self.max_hops}",
                )

            now_ms = self.clock.current_time_ms()

            self.state = ExecutionState.COOLDOWN_CHECK
            ok, reason = self.guard.check_cooldown(now_ms)
            if not ok:
                return self._skip(opportunity, SkipReason.COOLDOWN, reason)

            self.state = ExecutionState.DEDUPE_CHECK
            ok, reason = self.guard.check_dedupe(opportunity.signature, now_ms)
            if not ok:
                return self._skip(opportunity, SkipReason.DUPLICATE_PATH, reason)

            self.state = ExecutionState.EXECUTING
            result = await self._execute_hops(opportunity)

            self.guard.record_execution(opportunity.signature, self.clock.current_time_ms())
            self.state = ExecutionState.COMPLETED
            logger.info(
                f"[EXEC] {opportunity.path} done | "
                f"in={result.amount_in} out≈{result.estimated_amount_out} | "
                f"profit≈{format_profit_pct(result.estimated_profit_pct)} "
                f"(estimated from quotes; not settled)"
            )
            if self.metrics:
                self.metrics.record_execution("success", result.estimated_profit_pct)
            return result

        except Exception as e:
            self.state = ExecutionState.ABORTED
            logger.error(f"[EXEC] {opportunity.path} aborted: {e}")
            if self.metrics:
                self.metrics.record_execution("failed")
            return ExecutionResult(
                success=False,
                path=opportunity.path,
                hops=opportunity.hops,
                error=str(e),
            )

    async def _execute_hops(self, opportunity: Opportunity) -> ExecutionResult:
        settings = self.settings
        amount_in = settings.trade_amount
        amount = amount_in
        result = ExecutionResult(
            success=False,
            path=opportunity.path,
            hops=opportunity.hops,
            amount_in=amount_in,
        )

        logger.info(
            f"[EXEC] {opportunity.path} fees={list(opportunity.fees)} "
            f"trade={amount_in} policy={settings.policy.value}"
        )

        for index, (token_in, token_out, fee) in enumerate(opportunity.cycle.legs()):
            quote = await self.quoter.quote_exact_input(token_in, token_out, amount, fee)
            quoted_out = quote.output_amount
            if quoted_out <= 0:
                raise ExecutionError(
                    f"Hop {index} {token_in.symbol}->{token_out.symbol} quoted zero output",
                    path=opportunity.path,
                    hop_index=index,
                )

            floor = minimum_output(quoted_out, settings.max_slippage_bps)
            request = SwapRequest(exact_input=amount, minimum_output=floor)
            pending = await self.swapper.swap(
                token_in, token_out, fee, request, settings.wallet_address
            )

            fill = HopFill(
                hop_index=index,
                token_in=token_in.symbol,
                token_out=token_out.symbol,
                fee_tier=fee,
                amount_in=amount,
                quoted_out=quoted_out,
                minimum_out=floor,
                tx_id=pending.tx_id,
            )

            if settings.policy == ExecutionPolicy.CONFIRMED:
                receipt = await pending.wait()
                fill.transaction_hash = receipt.transaction_hash
                logger.info(
                    f"[EXEC] hop {index + 1}/{opportunity.hops} "
                    f"{token_in.symbol}->{token_out.symbol} confirmed "
                    f"tx={receipt.transaction_hash}"
                )
            else:
                logger.info(
                    f"[EXEC] hop {index + 1}/{opportunity.hops} "
                    f"{token_in.symbol}->{token_out.symbol} sent txId={pending.tx_id}"
                )
                await self.clock.sleep(settings.wait_after_send_ms / 1000)

            result.fills.append(fill)
            amount = quoted_out

        result.success = True
        result.estimated_amount_out = amount
        result.estimated_profit_pct = profit_pct(amount_in, amount)
        return result

    def _skip(self, opportunity: Opportunity, reason: SkipReason, message: str) -> ExecutionResult:
        self.state = ExecutionState.ABORTED
        logger.warning(f"[EXEC] skip {opportunity.path}: {message}")
        if self.metrics:
            self.metrics.record_skip(reason.value)
        return ExecutionResult(
            success=False,
            path=opportunity.path,
            hops=opportunity.hops,
            skip_reason=reason,
        )
