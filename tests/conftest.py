"""
Shared fakes for the cycle arbitrage tests.
"""

from decimal import Decimal

import pytest

from cycle_arbitrage.exceptions import QuoteError
from cycle_arbitrage.interfaces import DeterministicTimeProvider, QuoteResult, SwapReceipt


class ScriptedQuoter:
    """
    Quoting collaborator answering from a table keyed by
    ``(symbol_in, symbol_out, fee)``.

    Values are output amounts, exceptions to raise, or callables taking the
    input amount. Missing keys raise QuoteError (no pool).
    """

    def __init__(self, table=None):
        self.table = dict(table or {})
        self.calls = []

    async def quote_exact_input(self, token_in, token_out, amount_in, fee_tier=None):
        self.calls.append((token_in.symbol, token_out.symbol, Decimal(amount_in), fee_tier))
        answer = self.table.get((token_in.symbol, token_out.symbol, fee_tier))
        if answer is None:
            raise QuoteError("no pool", token_in.symbol, token_out.symbol, fee_tier)
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            answer = answer(Decimal(amount_in))
        return QuoteResult(output_amount=Decimal(str(answer)), fee_tier=fee_tier)


class FakePending:
    def __init__(self, tx_id):
        self.tx_id = tx_id
        self.waited = False

    async def wait(self):
        self.waited = True
        return SwapReceipt(transaction_hash=f"0x{self.tx_id}")


class RecordingSwapper:
    """Swap collaborator recording every submission."""

    def __init__(self, fail_on_hop=None):
        self.calls = []
        self.pending = []
        self.fail_on_hop = fail_on_hop

    async def swap(self, token_in, token_out, fee_tier, request, wallet_address=None):
        if self.fail_on_hop is not None and len(self.calls) == self.fail_on_hop:
            self.calls.append((token_in.symbol, token_out.symbol, fee_tier, request, wallet_address))
            raise RuntimeError("gateway rejected swap")
        self.calls.append((token_in.symbol, token_out.symbol, fee_tier, request, wallet_address))
        handle = FakePending(f"tx{len(self.calls)}")
        self.pending.append(handle)
        return handle


@pytest.fixture
def scripted_quoter():
    return ScriptedQuoter


@pytest.fixture
def recording_swapper():
    return RecordingSwapper


@pytest.fixture
def clock():
    return DeterministicTimeProvider()
