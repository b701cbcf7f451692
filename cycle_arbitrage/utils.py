"""
Common utilities and helper functions for the cycle arbitrage system.

This module provides centralized helpers for logging, duration and profit
formatting, and parsing the textual values found in environment variables.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

_TRUE_WORDS = {"yes", "y", "true", "1", "on"}
_FALSE_WORDS = {"no", "n", "false", "0", "off", ""}


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def format_profit_pct(pct: Union[Decimal, float]) -> str:
    """Format a percent value with a sign prefix, e.g. ``+1.23%``."""
    pct = float(pct)
    if pct >= 0:
        return f"+{pct:.3f}%"
    return f"{pct:.3f}%"


def parse_bool(value: Any) -> bool:
    """
    Parse YES/NO style flags.

    Raises:
        ValueError: If the text is not a recognized boolean word
    """
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def parse_list(value: str) -> List[str]:
    """Split a comma-separated list, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.NOTSET,
    extra: Optional[Dict[str, Any]] = None,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a module logger, optionally bound to extra context.

    Handlers are left to ``logging_config.setup`` so that library modules
    never print on their own.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (NOTSET inherits from the parent)
        extra: Context fields added to every record

    Returns:
        Logger, or LoggerAdapter when extra context is given
    """
    logger = logging.getLogger(name)
    if level != logging.NOTSET:
        logger.setLevel(level)
    if extra:
        return logging.LoggerAdapter(logger, extra)
    return logger
