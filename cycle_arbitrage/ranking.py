"""
Opportunity ranking.
"""

from decimal import Decimal
from typing import Iterable, List, Union

from .execution_types import Opportunity
from .opportunity_math import to_decimal


def rank(
    opportunities: Iterable[Opportunity],
    min_profit_bps: Union[Decimal, int, float, str] = 0,
) -> List[Opportunity]:
    """
    Keep opportunities at or above ``min_profit_bps`` and order them best
    first.

    The sort is stable, so equal profits keep their scan order. An empty
    list means nothing qualified.
    """
    threshold = to_decimal(min_profit_bps)
    eligible = [opp for opp in opportunities if opp.profit_bps >= threshold]
    return sorted(eligible, key=lambda opp: opp.profit_bps, reverse=True)
