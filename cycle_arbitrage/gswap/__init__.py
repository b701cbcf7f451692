"""
Concrete collaborators for the GalaSwap DEX backend.
"""

from .client import GSwapQuoteClient
from .paper import PaperPendingSwap, PaperSwapper

__all__ = ["GSwapQuoteClient", "PaperPendingSwap", "PaperSwapper"]
