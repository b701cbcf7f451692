"""
Quote call throttling and retry.

Wraps any quoting collaborator. At most ``max_in_flight`` quote calls run at
once, and transient network failures are retried with exponential backoff.
A ``QuoteError`` (no pool, not enough liquidity) is an answer, not a
transient failure, and is raised immediately.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from .exceptions import NetworkError
from .interfaces import QuoteProvider, QuoteResult, SystemTimeProvider, TimeProvider
from .tokens import TokenIdentifier
from .utils import get_logger

logger = get_logger(__name__)


class RetryingQuoter:
    """QuoteProvider decorator adding a concurrency cap and retries."""

    def __init__(
        self,
        inner: QuoteProvider,
        max_retries: int = 3,
        retry_delay_ms: int = 250,
        backoff_multiplier: float = 2.0,
        max_in_flight: int = 4,
        clock: Optional[TimeProvider] = None,
    ):
        self.inner = inner
        self.max_retries = max_retries
        self.retry_delay = retry_delay_ms / 1000.0
        self.backoff_multiplier = backoff_multiplier
        self.clock = clock or SystemTimeProvider()
        self._semaphore = asyncio.Semaphore(max_in_flight)

    @classmethod
    def from_settings(cls, inner: QuoteProvider, settings, clock: Optional[TimeProvider] = None):
        """Build from a ``QuotingSettings`` section."""
        return cls(
            inner,
            max_retries=settings.max_retries,
            retry_delay_ms=settings.retry_delay_ms,
            backoff_multiplier=settings.backoff_multiplier,
            max_in_flight=settings.max_in_flight,
            clock=clock,
        )

    async def quote_exact_input(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        amount_in: Decimal,
        fee_tier: Optional[int] = None,
    ) -> QuoteResult:
        attempt = 0
        while True:
            try:
                async with self._semaphore:
                    return await self.inner.quote_exact_input(
                        token_in, token_out, amount_in, fee_tier
                    )
            except NetworkError as e:
                if attempt >= self.max_retries:
                    raise
                delay = self.retry_delay * (self.backoff_multiplier**attempt)
                logger.warning(
                    f"Quote attempt {attempt + 1} for {token_in.symbol}->{token_out.symbol} "
                    f"failed: {e}; retrying in {delay:.2f}s"
                )
                attempt += 1
                await self.clock.sleep(delay)
