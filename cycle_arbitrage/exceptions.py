"""
Exception hierarchy for the cycle arbitrage system.

Provides specific exception types for the error categories the scanner,
the executor and the configuration layer distinguish between.
"""

from typing import Any, Dict, Optional


class CycleArbitrageError(Exception):
    """Base exception for all cycle arbitrage related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(CycleArbitrageError):
    """Raised when there are configuration-related issues."""

    pass


class ValidationError(CycleArbitrageError):
    """Raised when validation of data or configuration fails."""

    pass


class InvalidIdentifierError(ValidationError):
    """Raised when a token reference matches none of the accepted shapes."""

    def __init__(
        self,
        message: str,
        raw: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.raw = raw


NormalizationError = InvalidIdentifierError


class QuoteError(CycleArbitrageError):
    """Raised when a hop cannot be quoted (no pool, not enough liquidity)."""

    def __init__(
        self,
        message: str,
        token_in: Optional[str] = None,
        token_out: Optional[str] = None,
        fee_tier: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.token_in = token_in
        self.token_out = token_out
        self.fee_tier = fee_tier


class SwapError(CycleArbitrageError):
    """Raised when the swap collaborator rejects or fails a submission."""

    def __init__(
        self,
        message: str,
        tx_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.tx_id = tx_id


class ExecutionError(CycleArbitrageError):
    """Raised when replaying a cycle fails part way through."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        hop_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.path = path
        self.hop_index = hop_index


class NetworkError(CycleArbitrageError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code
