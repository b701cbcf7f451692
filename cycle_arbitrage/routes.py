"""
Candidate cycle enumeration.

Builds every closed route ``A -> ... -> A`` that starts at a base token and
walks through distinct tokens of the universe, up to ``max_hops`` hops.
Routes are produced lazily so that a scan never holds more than the
candidate it is quoting.
"""

from itertools import permutations, product
from math import perm
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from .constants import MAX_HOPS, MIN_HOPS, RouteStrategy
from .exceptions import ValidationError
from .execution_types import Cycle, FeeTier
from .tokens import TokenIdentifier, normalize_all

TokenPath = Tuple[TokenIdentifier, ...]


class RouteEnumerator:
    """
    Generates candidate routes for one scan.

    ``token_paths()`` yields token sequences only; ``cycles()`` pairs each
    path with every combination of fee tiers (the full strategy). The greedy
    strategy consumes ``token_paths()`` and picks a tier per hop while
    quoting.
    """

    def __init__(
        self,
        bases: Iterable[Union[str, TokenIdentifier]],
        universe: Iterable[Union[str, TokenIdentifier]],
        fee_tiers: Sequence[FeeTier],
        max_hops: int = 3,
    ):
        if not MIN_HOPS <= max_hops <= MAX_HOPS:
            raise ValidationError(
                f"max_hops must be between {MIN_HOPS} and {MAX_HOPS}, got {max_hops}"
            )
        self.bases: List[TokenIdentifier] = normalize_all(bases)
        self.universe: List[TokenIdentifier] = normalize_all(universe)
        self.fee_tiers: Tuple[FeeTier, ...] = tuple(dict.fromkeys(fee_tiers))
        self.max_hops = max_hops

    def _intermediates(self, base: TokenIdentifier) -> List[TokenIdentifier]:
        return [token for token in self.universe if token != base]

    def token_paths(self) -> Iterator[TokenPath]:
        """Yield ``(A, X1, ..., A)`` for each base and each depth."""
        if not self.fee_tiers:
            return
        for base in self.bases:
            middle = self._intermediates(base)
            for hops in range(MIN_HOPS, self.max_hops + 1):
                for inner in permutations(middle, hops - 1):
                    yield (base, *inner, base)

    def cycles(self) -> Iterator[Cycle]:
        """Yield every token path with every fee-tier combination."""
        for path in self.token_paths():
            for fees in product(self.fee_tiers, repeat=len(path) - 1):
                yield Cycle(tokens=path, fees=fees)

    def estimate_quotes(self, strategy: RouteStrategy = RouteStrategy.FULL) -> int:
        """
        Number of quote calls a full scan issues, for progress reporting.

        For depth ``h`` and ``n`` candidate intermediates per base the full
        strategy plans ``P(n, h-1) * F**h * h`` calls; the greedy strategy
        plans ``P(n, h-1) * F * h``.
        """
        fee_count = len(self.fee_tiers)
        if not fee_count:
            return 0
        total = 0
        for base in self.bases:
            n = len(self._intermediates(base))
            for hops in range(MIN_HOPS, self.max_hops + 1):
                paths = perm(n, hops - 1)
                if strategy == RouteStrategy.GREEDY:
                    total += paths * fee_count * hops
                else:
                    total += paths * fee_count**hops * hops
        return total
