"""
Dry-run swap collaborator.

Accepts swap submissions without signing or sending anything and hands back
pending handles that confirm immediately. Every request is kept so that
callers can inspect what would have been sent. Only the most recent
``max_records`` requests are kept.
"""

import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from ..interfaces import SwapReceipt, SwapRequest
from ..tokens import TokenIdentifier
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class PaperSwapRecord:
    token_in: TokenIdentifier
    token_out: TokenIdentifier
    fee_tier: int
    request: SwapRequest
    wallet_address: Optional[str]
    tx_id: str


@dataclass
class PaperPendingSwap:
    """Pending handle for a paper swap."""

    tx_id: str
    waited: bool = field(default=False)

    async def wait(self) -> SwapReceipt:
        self.waited = True
        return SwapReceipt(transaction_hash=f"paper-{self.tx_id}")


class PaperSwapper:
    """SwapProvider that records requests instead of submitting them."""

    def __init__(self, max_records: int = 1000):
        self.records: Deque[PaperSwapRecord] = deque(maxlen=max_records)

    async def swap(
        self,
        token_in: TokenIdentifier,
        token_out: TokenIdentifier,
        fee_tier: int,
        request: SwapRequest,
        wallet_address: Optional[str] = None,
    ) -> PaperPendingSwap:
        tx_id = uuid.uuid4().hex
        self.records.append(
            PaperSwapRecord(
                token_in=token_in,
                token_out=token_out,
                fee_tier=fee_tier,
                request=request,
                wallet_address=wallet_address,
                tx_id=tx_id,
            )
        )
        logger.info(
            f"[PAPER] swap {token_in.symbol}->{token_out.symbol} fee={fee_tier} "
            f"in={request.exact_input} minOut={request.minimum_output} txId={tx_id}"
        )
        return PaperPendingSwap(tx_id=tx_id)
