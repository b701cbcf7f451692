"""
Type definitions shared by the scanner, the ranker and the executor.
Contains enums and dataclasses used throughout scanning and execution.
"""

import copy
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from .constants import MAX_HOPS, MIN_HOPS
from .exceptions import ValidationError
from .opportunity_math import bps_to_pct
from .tokens import TokenIdentifier

FeeTier = int


def path_label(tokens: Tuple[TokenIdentifier, ...]) -> str:
    """Readable route, e.g. ``GALA->FILM->GALA``."""
    return "->".join(token.symbol for token in tokens)


def path_signature(tokens: Tuple[TokenIdentifier, ...], fees: Tuple[FeeTier, ...]) -> str:
    """Order-sensitive key of a route and its fee tiers."""
    return f"{'>'.join(str(t) for t in tokens)}|{','.join(str(f) for f in fees)}"


@dataclass(frozen=True)
class Cycle:
    """
    Candidate route: ``hops + 1`` tokens returning to the start, one fee
    tier per hop.
    """

    tokens: Tuple[TokenIdentifier, ...]
    fees: Tuple[FeeTier, ...]

    def __post_init__(self):
        if len(self.fees) != len(self.tokens) - 1:
            raise ValidationError(
                f"Cycle needs one fee per hop: {len(self.tokens)} tokens, "
                f"{len(self.fees)} fees"
            )
        if not MIN_HOPS <= len(self.fees) <= MAX_HOPS:
            raise ValidationError(
                f"Cycle hop count {len(self.fees)} outside {MIN_HOPS}..{MAX_HOPS}"
            )
        if self.tokens[0] != self.tokens[-1]:
            raise ValidationError(
                f"Cycle must end where it starts: {path_label(self.tokens)}"
            )
        for fee in self.fees:
            if not isinstance(fee, int) or isinstance(fee, bool) or fee <= 0:
                raise ValidationError(f"Invalid fee tier: {fee!r}")

    @property
    def hops(self) -> int:
        return len(self.fees)

    @property
    def path(self) -> str:
        return path_label(self.tokens)

    @property
    def signature(self) -> str:
        return path_signature(self.tokens, self.fees)

    def legs(self) -> List[Tuple[TokenIdentifier, TokenIdentifier, FeeTier]]:
        """(token_in, token_out, fee) for each hop, in order."""
        return [
            (self.tokens[i], self.tokens[i + 1], self.fees[i])
            for i in range(self.hops)
        ]


@dataclass(frozen=True)
class Opportunity:
    """A fully quoted cycle with its estimated profit."""

    path: str
    tokens: Tuple[TokenIdentifier, ...]
    fees: Tuple[FeeTier, ...]
    hops: int
    amount_in: Decimal
    amount_out: Decimal
    profit_bps: Decimal

    @property
    def pct(self) -> Decimal:
        return bps_to_pct(self.profit_bps)

    @property
    def signature(self) -> str:
        return path_signature(self.tokens, self.fees)

    @property
    def cycle(self) -> Cycle:
        return Cycle(tokens=self.tokens, fees=self.fees)


@dataclass
class ScanProgress:
    """Counters for one scan session."""

    started_at: Optional[float] = None
    updated_at: Optional[float] = None
    finished_at: Optional[float] = None
    elapsed_ms: float = 0.0
    pairs_tried: int = 0
    quotes_requested: int = 0
    quotes_ok: int = 0
    quotes_err: int = 0
    total_quotes_planned: int = 0
    per_base_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def percent_complete(self) -> float:
        if not self.total_quotes_planned:
            return 0.0
        return self.quotes_requested / self.total_quotes_planned * 100

    def copy(self) -> "ScanProgress":
        return copy.deepcopy(self)


@dataclass
class PairStat:
    """Diagnostic record for one directed token pair."""

    token_in: str
    token_out: str
    attempted_fees: Set[FeeTier] = field(default_factory=set)
    ok_fees: Set[FeeTier] = field(default_factory=set)
    errors: int = 0


class ExecutionState(Enum):
    """
    Progress of one execution attempt.

    Values:
        IDLE: No attempt in flight
        HOPS_BOUND_CHECK: Checking the hop count against the execution limit
        COOLDOWN_CHECK: Checking time since the last successful execution
        DEDUPE_CHECK: Checking whether this exact path ran recently
        EXECUTING: Submitting hops in order
        COMPLETED: Every hop submitted
        ABORTED: Rejected by a check or failed part way
    """

    IDLE = "idle"
    HOPS_BOUND_CHECK = "hops_bound_check"
    COOLDOWN_CHECK = "cooldown_check"
    DEDUPE_CHECK = "dedupe_check"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class SkipReason(Enum):
    """Why an opportunity was not executed (not a failure)."""

    DISABLED = "disabled"
    TOO_MANY_HOPS = "too_many_hops"
    COOLDOWN = "cooldown"
    DUPLICATE_PATH = "duplicate_path"


@dataclass
class HopFill:
    """One submitted hop."""

    hop_index: int
    token_in: str
    token_out: str
    fee_tier: FeeTier
    amount_in: Decimal
    quoted_out: Decimal
    minimum_out: Decimal
    tx_id: Optional[str] = None
    transaction_hash: Optional[str] = None


@dataclass
class ExecutionResult:
    """
    Outcome of one execution attempt.

    ``estimated_profit_pct`` comes from quotes only and is never settled P&L.
    """

    success: bool
    path: str
    hops: int
    skip_reason: Optional[SkipReason] = None
    error: Optional[str] = None
    amount_in: Optional[Decimal] = None
    estimated_amount_out: Optional[Decimal] = None
    estimated_profit_pct: Optional[Decimal] = None
    fills: List[HopFill] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None
