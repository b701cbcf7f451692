"""
Unit tests for the cycle scanner
"""

import asyncio
from decimal import Decimal
from unittest.mock import Mock

import pytest

from cycle_arbitrage.config_schema import ScanSettings
from cycle_arbitrage.constants import RouteStrategy
from cycle_arbitrage.exceptions import NetworkError
from cycle_arbitrage.metrics import ArbitrageMetrics
from cycle_arbitrage.ranking import rank
from cycle_arbitrage.scanner import CycleScanner
from prometheus_client import CollectorRegistry


def settings(**overrides):
    values = dict(
        base_symbols=["GUSDC"],
        tokens=["GUSDC", "GALA"],
        fee_tiers=[500],
        probe_amount=Decimal("100"),
        max_hops=2,
    )
    values.update(overrides)
    return ScanSettings(**values)


class SlowQuoter:
    """Delays every quote so scans interleave."""

    def __init__(self, inner, delay):
        self.inner = inner
        self.delay = delay

    async def quote_exact_input(self, token_in, token_out, amount_in, fee_tier=None):
        await asyncio.sleep(self.delay)
        return await self.inner.quote_exact_input(token_in, token_out, amount_in, fee_tier)


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_profitable_two_hop_cycle(self, scripted_quoter):
        quoter = scripted_quoter(
            {("GUSDC", "GALA", 500): "1000", ("GALA", "GUSDC", 500): "102"}
        )
        scanner = CycleScanner(quoter, settings())

        opportunities = await scanner.scan()

        assert len(opportunities) == 1
        opp = opportunities[0]
        assert opp.hops == 2
        assert opp.profit_bps == Decimal("200")
        assert [t.symbol for t in opp.tokens] == ["GUSDC", "GALA", "GUSDC"]
        assert opp.fees == (500, 500)
        assert opp.path == "GUSDC->GALA->GUSDC"
        assert opp.pct == Decimal("2")
        # hop 2 is fed hop 1's output
        assert quoter.calls == [
            ("GUSDC", "GALA", Decimal("100"), 500),
            ("GALA", "GUSDC", Decimal("1000"), 500),
        ]

    @pytest.mark.asyncio
    async def test_losing_cycle_is_found_but_not_ranked(self, scripted_quoter):
        quoter = scripted_quoter(
            {("GUSDC", "GALA", 500): "1000", ("GALA", "GUSDC", 500): "98"}
        )
        opportunities = await CycleScanner(quoter, settings()).scan()

        assert opportunities[0].profit_bps == Decimal("-200")
        assert rank(opportunities, 0) == []


class TestAbortConditions:
    @pytest.mark.asyncio
    async def test_zero_output_discards_cycle_without_error(self, scripted_quoter):
        quoter = scripted_quoter({("GUSDC", "GALA", 500): "0"})
        scanner = CycleScanner(quoter, settings())

        assert await scanner.scan() == []
        progress = scanner.get_progress()
        assert progress.quotes_requested == 1
        assert progress.quotes_ok == 1
        assert progress.quotes_err == 0

    @pytest.mark.asyncio
    async def test_quote_failure_discards_cycle_and_counts_error(self, scripted_quoter):
        quoter = scripted_quoter({("GUSDC", "GALA", 500): "1000"})
        scanner = CycleScanner(quoter, settings())

        assert await scanner.scan() == []
        progress = scanner.get_progress()
        assert progress.pairs_tried == 1
        assert progress.quotes_requested == 2
        assert progress.quotes_ok == 1
        assert progress.quotes_err == 1

    @pytest.mark.asyncio
    async def test_network_error_does_not_stop_scan(self, scripted_quoter):
        quoter = scripted_quoter(
            {
                ("GUSDC", "GALA", 500): NetworkError("boom"),
                ("GUSDC", "GALA", 3000): "1000",
                ("GALA", "GUSDC", 500): "101",
            }
        )
        scanner = CycleScanner(quoter, settings(fee_tiers=[500, 3000]))

        opportunities = await scanner.scan()

        assert [o.fees for o in opportunities] == [(3000, 500)]
        assert scanner.get_progress().pairs_tried == 4

    @pytest.mark.asyncio
    async def test_unexpected_quoter_exception_counts_as_failed_quote(self, scripted_quoter):
        quoter = scripted_quoter(
            {
                ("GUSDC", "GALA", 500): RuntimeError("boom"),
                ("GUSDC", "FILM", 500): "10",
                ("FILM", "GUSDC", 500): "101",
            }
        )
        scanner = CycleScanner(quoter, settings(tokens=["GUSDC", "GALA", "FILM"]))

        opportunities = await scanner.scan()

        assert [o.path for o in opportunities] == ["GUSDC->FILM->GUSDC"]
        progress = scanner.get_progress()
        assert progress.quotes_requested == 3
        assert progress.quotes_err == 1

    @pytest.mark.asyncio
    async def test_empty_universe(self, scripted_quoter):
        quoter = scripted_quoter()
        scanner = CycleScanner(quoter, settings(tokens=[]))
        assert await scanner.scan() == []
        assert quoter.calls == []

    @pytest.mark.asyncio
    async def test_empty_fee_tiers(self, scripted_quoter):
        quoter = scripted_quoter()
        assert await CycleScanner(quoter, settings(fee_tiers=[])).scan() == []


class TestProgress:
    @pytest.mark.asyncio
    async def test_counters_match_plan_for_full_strategy(self, scripted_quoter):
        table = {}
        for a, b in [("GUSDC", "GALA"), ("GALA", "GUSDC"), ("GUSDC", "FILM"), ("FILM", "GUSDC"),
                     ("GALA", "FILM"), ("FILM", "GALA")]:
            for fee in (500, 3000):
                table[(a, b, fee)] = "10"
        quoter = scripted_quoter(table)
        scanner = CycleScanner(
            quoter, settings(tokens=["GUSDC", "GALA", "FILM"], fee_tiers=[500, 3000], max_hops=3)
        )

        opportunities = await scanner.scan()
        progress = scanner.get_progress()

        assert progress.quotes_requested == progress.total_quotes_planned
        assert progress.quotes_ok == progress.quotes_requested
        assert progress.per_base_counts == {"GUSDC": progress.pairs_tried}
        assert progress.percent_complete == 100.0
        assert len(opportunities) == progress.pairs_tried
        assert progress.finished_at is not None

    @pytest.mark.asyncio
    async def test_snapshot_during_scan_is_consistent(self, scripted_quoter):
        snapshots = []

        class SlowQuoter:
            def __init__(self, inner):
                self.inner = inner

            async def quote_exact_input(self, *args):
                snapshots.append(scanner.get_progress())
                await asyncio.sleep(0)
                return await self.inner.quote_exact_input(*args)

        inner = scripted_quoter({("GUSDC", "GALA", 500): "1000", ("GALA", "GUSDC", 500): "102"})
        scanner = CycleScanner(SlowQuoter(inner), settings())
        await scanner.scan()

        assert [s.quotes_requested for s in snapshots] == [0, 1]
        assert all(s.quotes_ok + s.quotes_err == s.quotes_requested for s in snapshots)


class TestGreedyStrategy:
    @pytest.mark.asyncio
    async def test_best_tier_per_hop(self, scripted_quoter):
        quoter = scripted_quoter(
            {
                ("GUSDC", "GALA", 500): "990",
                ("GUSDC", "GALA", 3000): "1000",
                ("GALA", "GUSDC", 500): "101",
                ("GALA", "GUSDC", 3000): "100",
            }
        )
        scanner = CycleScanner(
            quoter, settings(fee_tiers=[500, 3000], route_strategy=RouteStrategy.GREEDY)
        )

        opportunities = await scanner.scan()

        assert len(opportunities) == 1
        assert opportunities[0].fees == (3000, 500)
        assert opportunities[0].amount_out == Decimal("101")
        progress = scanner.get_progress()
        assert progress.pairs_tried == 1
        assert progress.quotes_requested == progress.total_quotes_planned == 4

    @pytest.mark.asyncio
    async def test_hop_without_any_tier_discards(self, scripted_quoter):
        quoter = scripted_quoter({("GUSDC", "GALA", 500): "1000"})
        scanner = CycleScanner(
            quoter, settings(fee_tiers=[500, 3000], route_strategy="greedy")
        )
        assert await scanner.scan() == []
        assert scanner.get_progress().quotes_err == 3


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_results_keep_enumeration_order(self, scripted_quoter):
        table = {}
        for token, out in [("GALA", "101"), ("FILM", "103"), ("SOL", "102")]:
            table[("GUSDC", token, 500)] = "10"
            table[(token, "GUSDC", 500)] = out
        quoter = scripted_quoter(table)
        scan_settings = settings(tokens=["GUSDC", "GALA", "FILM", "SOL"])

        sequential = await CycleScanner(quoter, scan_settings).scan()
        concurrent = await CycleScanner(
            quoter, scan_settings.model_copy(update={"concurrency": 3})
        ).scan()

        assert [o.path for o in concurrent] == [o.path for o in sequential]
        assert [o.path for o in sequential] == [
            "GUSDC->GALA->GUSDC",
            "GUSDC->FILM->GUSDC",
            "GUSDC->SOL->GUSDC",
        ]

    @pytest.mark.asyncio
    async def test_failure_stops_sibling_workers(self, scripted_quoter):
        table = {}
        for token in ["GALA", "FILM", "SOL", "ETIME"]:
            table[("GUSDC", token, 500)] = "10"
            table[(token, "GUSDC", 500)] = "101"
        quoter = SlowQuoter(scripted_quoter(table), delay=0.01)
        routes = []

        def record_route():
            routes.append(1)
            if len(routes) > 1:
                raise RuntimeError("metrics backend down")

        metrics = Mock()
        metrics.record_route.side_effect = record_route
        scanner = CycleScanner(
            quoter,
            settings(tokens=["GUSDC", "GALA", "FILM", "SOL", "ETIME"], concurrency=2),
            metrics=metrics,
        )

        with pytest.raises(RuntimeError):
            await scanner.scan()
        calls = len(quoter.inner.calls)
        requested = scanner.get_progress().quotes_requested

        await asyncio.sleep(0.2)

        assert len(quoter.inner.calls) == calls
        assert scanner.get_progress().quotes_requested == requested


class TestDiagnostics:
    @pytest.mark.asyncio
    async def test_searched_labels_capped(self, scripted_quoter, caplog):
        quoter = scripted_quoter()
        scanner = CycleScanner(
            quoter,
            settings(
                tokens=["GUSDC", "GALA", "FILM", "SOL"],
                log_searched_pairs=True,
                log_searched_max=2,
            ),
        )
        with caplog.at_level("INFO"):
            await scanner.scan()

        assert scanner.searched == ["GUSDC->GALA->GUSDC [500]", "GUSDC->FILM->GUSDC [500]"]
        assert scanner.searched_total == 3
        assert "[ARB:searched] pairs checked (2/3)" in caplog.text

    @pytest.mark.asyncio
    async def test_cap_does_not_change_results(self, scripted_quoter):
        table = {("GUSDC", "GALA", 500): "10", ("GALA", "GUSDC", 500): "101"}
        plain = await CycleScanner(scripted_quoter(table), settings()).scan()
        verbose = await CycleScanner(
            scripted_quoter(table), settings(log_searched_pairs=True, log_searched_max=0)
        ).scan()
        assert plain == verbose

    @pytest.mark.asyncio
    async def test_pair_diagnostics(self, scripted_quoter):
        quoter = scripted_quoter({("GUSDC", "GALA", 500): "10"})
        scanner = CycleScanner(quoter, settings(pair_diagnostics=True))
        await scanner.scan()
        lines = scanner.pair_stats.summary_lines()
        assert "GUSDC->GALA tried=[500] ok=[500] errors=0" in lines
        assert "GALA->GUSDC tried=[500] ok=[-] errors=1" in lines


@pytest.mark.asyncio
async def test_metrics_recorded(scripted_quoter):
    registry = CollectorRegistry()
    metrics = ArbitrageMetrics(registry)
    quoter = scripted_quoter({("GUSDC", "GALA", 500): "1000", ("GALA", "GUSDC", 500): "102"})
    await CycleScanner(quoter, settings(), metrics=metrics).scan()

    assert registry.get_sample_value("cycle_arbitrage_scans_total") == 1
    assert registry.get_sample_value("cycle_arbitrage_routes_tried_total") == 1
    assert registry.get_sample_value("cycle_arbitrage_quotes_total", {"result": "ok"}) == 2
    assert registry.get_sample_value("cycle_arbitrage_opportunities_found_total") == 1
