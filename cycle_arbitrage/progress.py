"""
Scan progress tracking.

The scanner owns one ``ProgressTracker``. Each scan replaces the session
object wholesale; readers only ever receive deep copies, so a reporter
polling on a timer can never observe or mutate the live counters.
"""

from typing import Dict, Iterable, List, Optional

from .execution_types import FeeTier, PairStat, ScanProgress
from .interfaces import SystemTimeProvider, TimeProvider
from .tokens import TokenIdentifier


class ProgressTracker:
    """Mutable scan-session counters with copy-on-read access."""

    def __init__(self, clock: Optional[TimeProvider] = None):
        self.clock = clock or SystemTimeProvider()
        self._session = ScanProgress()

    def reset(self, total_quotes_planned: int, bases: Iterable[str] = ()) -> None:
        """Start a new session, replacing the previous one."""
        now = self.clock.current_timestamp()
        self._session = ScanProgress(
            started_at=now,
            updated_at=now,
            total_quotes_planned=total_quotes_planned,
            per_base_counts={base: 0 for base in bases},
        )

    def record_route(self, base_symbol: str) -> None:
        session = self._session
        session.pairs_tried += 1
        session.per_base_counts[base_symbol] = session.per_base_counts.get(base_symbol, 0) + 1
        session.updated_at = self.clock.current_timestamp()

    def record_quote(self, ok: bool) -> None:
        session = self._session
        session.quotes_requested += 1
        if ok:
            session.quotes_ok += 1
        else:
            session.quotes_err += 1
        session.updated_at = self.clock.current_timestamp()

    def finish(self) -> None:
        self._session.finished_at = self.clock.current_timestamp()

    def snapshot(self) -> ScanProgress:
        """
        Deep copy of the current session.

        ``elapsed_ms`` is computed now: against the current time while a
        scan is running, against the finish time once it has ended. Before
        the first scan every field is None or zero.
        """
        snap = self._session.copy()
        if snap.started_at is not None:
            end = snap.finished_at if snap.finished_at is not None else self.clock.current_timestamp()
            snap.elapsed_ms = (end - snap.started_at) * 1000
        return snap


class PairStatsCollector:
    """Per directed pair record of tried and working fee tiers."""

    def __init__(self):
        self._stats: Dict[tuple, PairStat] = {}

    def _stat(self, token_in: TokenIdentifier, token_out: TokenIdentifier) -> PairStat:
        key = (token_in, token_out)
        stat = self._stats.get(key)
        if stat is None:
            stat = PairStat(token_in=token_in.symbol, token_out=token_out.symbol)
            self._stats[key] = stat
        return stat

    def record(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        fee_tier: FeeTier,
        ok: bool,
    ) -> None:
        stat = self._stat(token_in, token_out)
        stat.attempted_fees.add(fee_tier)
        if ok:
            stat.ok_fees.add(fee_tier)
        else:
            stat.errors += 1

    def stats(self) -> List[PairStat]:
        return list(self._stats.values())

    def summary_lines(self) -> List[str]:
        """One line per pair, pairs with working tiers first."""
        ordered = sorted(self._stats.values(), key=lambda s: (not s.ok_fees, s.token_in, s.token_out))
        lines = []
        for stat in ordered:
            tried = ",".join(str(f) for f in sorted(stat.attempted_fees))
            ok = ",".join(str(f) for f in sorted(stat.ok_fees)) or "-"
            lines.append(
                f"{stat.token_in}->{stat.token_out} tried=[{tried}] ok=[{ok}] errors={stat.errors}"
            )
        return lines
