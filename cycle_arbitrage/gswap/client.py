"""
Async quote client for the GalaSwap DEX backend.

Quotes are plain HTTP GET calls against ``/v1/trade/quote``. Backend
answers are decoded into ``QuoteResult`` here; HTTP 4xx answers (unknown
pool, not enough liquidity) become ``QuoteError`` and transport failures
or 5xx answers become ``NetworkError`` so that only the latter are retried.
"""

import asyncio
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

import aiohttp

from ..constants import DEFAULT_FEE_TIERS, NETWORK_CONFIG
from ..exceptions import NetworkError, QuoteError, ValidationError
from ..interfaces import QuoteResult
from ..opportunity_math import format_amount
from ..tokens import TokenIdentifier
from ..utils import get_logger

logger = get_logger(__name__)


class GSwapQuoteClient:
    """
    Quoting collaborator backed by the DEX backend REST API.

    Use as an async context manager, or call ``close()`` when done. A
    session passed in by the caller is never closed by the client.
    """

    def __init__(
        self,
        base_url: str = NETWORK_CONFIG["DEX_BASE_URL"],
        timeout_seconds: float = NETWORK_CONFIG["DEFAULT_API_TIMEOUT"],
        token_format: str = "dollar",
        fee_tiers: Sequence[int] = DEFAULT_FEE_TIERS,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.quote_url = f"{self.base_url}{NETWORK_CONFIG['QUOTE_PATH']}"
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.token_format = token_format
        self.fee_tiers = tuple(fee_tiers)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, settings, fee_tiers: Sequence[int] = DEFAULT_FEE_TIERS):
        """Build from a ``QuotingSettings`` section."""
        return cls(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            token_format=settings.token_format,
            fee_tiers=fee_tiers,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    def _token_key(self, token: TokenIdentifier) -> str:
        return token.to_pipe() if self.token_format == "pipe" else token.to_dollar()

    async def quote_exact_input(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        amount_in: Decimal,
        fee_tier: Optional[int] = None,
    ) -> QuoteResult:
        """
        Quote an exact-input hop.

        With ``fee_tier=None`` every known tier is queried and the best
        output is returned.

        Raises:
            QuoteError: No pool or not enough liquidity
            NetworkError: Transport failure or server error
        """
        if fee_tier is not None:
            return await self._quote_tier(token_in, token_out, amount_in, fee_tier)
        return await self._quote_best(token_in, token_out, amount_in)

    async def _quote_best(
        self, token_in: TokenIdentifier, token_out: TokenIdentifier, amount_in: Decimal
    ) -> QuoteResult:
        best: Optional[QuoteResult] = None
        for fee in self.fee_tiers:
            try:
                result = await self._quote_tier(token_in, token_out, amount_in, fee)
            except QuoteError:
                continue
            if best is None or result.output_amount > best.output_amount:
                best = result
        if best is None:
            raise QuoteError(
                f"No fee tier quotes {token_in.symbol}->{token_out.symbol}",
                token_in=token_in.symbol,
                token_out=token_out.symbol,
            )
        return best

    async def _quote_tier(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        amount_in: Decimal,
        fee_tier: int,
    ) -> QuoteResult:
        params = {
            "tokenIn": self._token_key(token_in),
            "tokenOut": self._token_key(token_out),
            "amountIn": format_amount(amount_in),
            "fee": str(fee_tier),
        }
        body = await self._get_json(params)

        if not (200 <= body["status"] < 300):
            raise QuoteError(
                f"Quote {token_in.symbol}->{token_out.symbol} fee={fee_tier} rejected: "
                f"{body['message']}",
                token_in=token_in.symbol,
                token_out=token_out.symbol,
                fee_tier=fee_tier,
                details={"status": body["status"]},
            )

        payload = body["data"]
        try:
            result = QuoteResult.from_payload(payload)
        except ValidationError as e:
            raise QuoteError(
                f"Malformed quote {token_in.symbol}->{token_out.symbol}: {e}",
                token_in=token_in.symbol,
                token_out=token_out.symbol,
                fee_tier=fee_tier,
            )
        if result.fee_tier is None:
            result = QuoteResult(output_amount=result.output_amount, fee_tier=fee_tier)
        return result

    async def _get_json(self, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET the quote endpoint.

        Returns:
            dict with ``status``, ``message`` and ``data`` keys
        """
        session = self._get_session()
        try:
            async with session.get(self.quote_url, params=params, timeout=self.timeout) as resp:
                status = resp.status
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
        except asyncio.TimeoutError:
            raise NetworkError("Quote request timed out", endpoint=self.quote_url)
        except aiohttp.ClientError as e:
            raise NetworkError(f"Quote request failed: {e}", endpoint=self.quote_url)

        if status >= 500:
            raise NetworkError(
                f"Quote backend error HTTP {status}", endpoint=self.quote_url, status_code=status
            )

        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("error") or f"HTTP {status}"
        data = body.get("data", body)
        logger.debug(f"GET {self.quote_url} {params} -> {status}")
        return {"status": status, "message": message, "data": data}
