"""
Collaborator interfaces and dependency injection seams.

The scanner and executor talk to the outside world only through the
protocols below: a quoting collaborator, a swap collaborator and a time
provider. Boundary payloads are decoded into typed results here so that
ambiguous shapes never travel further than the adapter that received them.
"""

import asyncio
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .exceptions import ValidationError
from .tokens import TokenIdentifier


@dataclass(frozen=True)
class QuoteResult:
    """Quoted output for an exact-input hop."""

    output_amount: Decimal
    fee_tier: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "QuoteResult":
        """
        Decode a backend quote payload.

        Accepts ``amountOut`` / ``outTokenAmount`` / ``outputAmount`` for the
        output and ``fee`` / ``feeTier`` for the tier.

        Raises:
            ValidationError: If no usable output amount is present
        """
        if not isinstance(payload, dict):
            raise ValidationError(f"Quote payload is not an object: {payload!r}")

        raw_out = None
        out_key = None
        for key in ("amountOut", "outTokenAmount", "outputAmount"):
            if payload.get(key) is not None:
                raw_out, out_key = payload[key], key
                break
        if raw_out is None:
            raise ValidationError("Quote payload has no output amount", {"payload": payload})

        try:
            output_amount = Decimal(str(raw_out))
        except InvalidOperation:
            raise ValidationError(f"Quote output is not a number: {raw_out!r}")
        if not output_amount.is_finite():
            raise ValidationError(f"Quote output out of range: {raw_out!r}")
        if out_key == "amountOut":
            # Pool-side amount: leaving the pool is reported as negative
            output_amount = abs(output_amount)
        elif output_amount < 0:
            raise ValidationError(f"Quote output is negative: {out_key}={raw_out!r}")

        raw_fee = payload.get("fee", payload.get("feeTier"))
        fee_tier = None
        if raw_fee is not None:
            try:
                fee_tier = int(raw_fee)
            except (TypeError, ValueError):
                raise ValidationError(f"Quote fee tier is not an integer: {raw_fee!r}")
        return cls(output_amount=output_amount, fee_tier=fee_tier)


@dataclass(frozen=True)
class SwapRequest:
    """Exact-input swap with a minimum acceptable output."""

    exact_input: Decimal
    minimum_output: Decimal


@dataclass(frozen=True)
class SwapReceipt:
    """Confirmation returned by a pending swap."""

    transaction_hash: str


@runtime_checkable
class PendingSwap(Protocol):
    """Handle for a submitted swap."""

    tx_id: str

    async def wait(self) -> SwapReceipt:
        """Block until the backend confirms the swap."""
        ...


@runtime_checkable
class QuoteProvider(Protocol):
    """Quoting collaborator."""

    async def quote_exact_input(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        amount_in: Decimal,
        fee_tier: Optional[int] = None,
    ) -> QuoteResult:
        """Quote ``amount_in`` of ``token_in`` into ``token_out``.

        Raises QuoteError when no pool or not enough liquidity exists.
        """
        ...


@runtime_checkable
class SwapProvider(Protocol):
    """Swap collaborator."""

    async def swap(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        fee_tier: int,
        request: SwapRequest,
        wallet_address: Optional[str] = None,
    ) -> PendingSwap:
        """Submit a swap and return its pending handle."""
        ...


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        ...

    async def sleep(self, duration: float) -> None:
        """Sleep for specified duration in seconds."""
        ...


class SystemTimeProvider:
    """Production time provider using system time."""

    def current_timestamp(self) -> float:
        return time.time()

    def current_time_ms(self) -> int:
        return int(time.time() * 1000)

    async def sleep(self, duration: float) -> None:
        await asyncio.sleep(duration)


class DeterministicTimeProvider:
    """Deterministic time provider for testing."""

    def __init__(self, start_time: float = 1640995200.0):  # 2022-01-01
        self._current_time = start_time
        self.sleeps = []

    def current_timestamp(self) -> float:
        return self._current_time

    def current_time_ms(self) -> int:
        return int(self._current_time * 1000)

    async def sleep(self, duration: float) -> None:
        """Advance time by duration instead of actually sleeping."""
        self.sleeps.append(duration)
        self._current_time += duration

    def advance_time(self, seconds: float) -> None:
        """Manually advance time by specified seconds."""
        self._current_time += seconds

    def set_time(self, timestamp: float) -> None:
        """Set current time to specific timestamp."""
        self._current_time = timestamp
