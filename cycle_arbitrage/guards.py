"""
Execution guards for cycle arbitrage.

Prevents over-trading by:
1. A global cooldown since the last successful execution (any route)
2. A dedupe window per exact route signature (tokens and fee tiers)
"""

from typing import Dict, Optional, Tuple


class ExecutionGuard:
    """
    Tracks successful executions and decides whether a new one may start.

    All times are integer milliseconds supplied by the caller, so the guard
    itself has no clock.
    """

    def __init__(self, cooldown_ms: int = 30_000, dedupe_window_ms: int = 120_000):
        """
        Initialize guard.

        Args:
            cooldown_ms: Minimum milliseconds between any two executions
            dedupe_window_ms: Minimum milliseconds before the same route runs again
        """
        self.cooldown_ms = cooldown_ms
        self.dedupe_window_ms = dedupe_window_ms

        self.last_executed_at: Optional[int] = None

        # Route signature -> time of its last successful execution
        self.recent_paths: Dict[str, int] = {}

    def check_cooldown(self, now_ms: int) -> Tuple[bool, Optional[str]]:
        """
        Returns:
            (allowed, reason) tuple
        """
        if self.last_executed_at is None:
            return True, None
        since = now_ms - self.last_executed_at
        if since < self.cooldown_ms:
            remaining = (self.cooldown_ms - since) / 1000
            return False, f"Cooldown active ({remaining:.1f}s remaining)"
        return True, None

    def check_dedupe(self, signature: str, now_ms: int) -> Tuple[bool, Optional[str]]:
        """
        Returns:
            (allowed, reason) tuple
        """
        self.cleanup_expired(now_ms)
        executed_at = self.recent_paths.get(signature)
        if executed_at is not None:
            since = (now_ms - executed_at) / 1000
            return False, f"Same route executed {since:.1f}s ago"
        return True, None

    def record_execution(self, signature: str, now_ms: int) -> None:
        """Record a successful execution."""
        self.last_executed_at = now_ms
        self.recent_paths[signature] = now_ms

    def cleanup_expired(self, now_ms: int) -> None:
        """Forget routes whose dedupe window has elapsed."""
        expired = [
            sig
            for sig, ts in self.recent_paths.items()
            if now_ms - ts >= self.dedupe_window_ms
        ]
        for sig in expired:
            del self.recent_paths[sig]
