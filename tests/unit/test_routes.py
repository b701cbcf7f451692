"""
Unit tests for candidate cycle enumeration
"""

import pytest

from cycle_arbitrage.constants import RouteStrategy
from cycle_arbitrage.exceptions import ValidationError
from cycle_arbitrage.routes import RouteEnumerator


def symbols(path):
    return [t.symbol for t in path]


class TestTokenPaths:
    def test_two_hop_paths_skip_self_loops(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC", "FILM"], [500], max_hops=2)
        paths = [symbols(p) for p in enum.token_paths()]
        assert paths == [["GALA", "GUSDC", "GALA"], ["GALA", "FILM", "GALA"]]

    def test_three_hop_paths_use_distinct_intermediates(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC", "FILM"], [500], max_hops=3)
        three_hop = [symbols(p) for p in enum.token_paths() if len(p) == 4]
        assert three_hop == [
            ["GALA", "GUSDC", "FILM", "GALA"],
            ["GALA", "FILM", "GUSDC", "GALA"],
        ]

    def test_every_path_closes_on_its_base(self):
        enum = RouteEnumerator(["GALA", "GUSDC"], ["GALA", "GUSDC", "FILM", "SOL"], [500], 4)
        for path in enum.token_paths():
            assert path[0] == path[-1]
            inner = path[1:-1]
            assert path[0] not in inner
            assert len(set(inner)) == len(inner)

    def test_empty_universe_yields_nothing(self):
        enum = RouteEnumerator(["GALA"], [], [500, 3000])
        assert list(enum.token_paths()) == []
        assert list(enum.cycles()) == []

    def test_no_fee_tiers_yields_nothing(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC"], [])
        assert list(enum.cycles()) == []
        assert enum.estimate_quotes() == 0

    def test_mixed_token_formats_collapse(self):
        enum = RouteEnumerator(["GALA$Unit$none$none"], ["GALA", "$GUSDC", "GUSDC"], [500], 2)
        assert [symbols(p) for p in enum.token_paths()] == [["GALA", "GUSDC", "GALA"]]


class TestCycles:
    def test_two_hop_fee_combinations(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC"], [500, 3000, 10000], max_hops=2)
        cycles = list(enum.cycles())
        assert len(cycles) == 9
        assert cycles[0].fees == (500, 500)
        assert cycles[-1].fees == (10000, 10000)
        assert {c.path for c in cycles} == {"GALA->GUSDC->GALA"}

    def test_three_hop_fee_combinations(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC", "FILM"], [500, 3000], max_hops=3)
        three_hop = [c for c in enum.cycles() if c.hops == 3]
        # 2 orderings x 2**3 fee combinations
        assert len(three_hop) == 16

    def test_cycles_are_lazy(self):
        enum = RouteEnumerator(
            ["GALA"], ["GALA"] + [f"T{i}" for i in range(20)], [500, 3000, 10000], max_hops=5
        )
        first = next(enum.cycles())
        assert first.hops == 2


class TestEstimate:
    def test_full_matches_closed_form(self):
        bases = ["GUSDC", "GALA"]
        universe = ["GUSDC", "GALA", "GMUSIC", "FILM"]
        fees = [500, 3000, 10000]
        enum = RouteEnumerator(bases, universe, fees, max_hops=3)
        n, f = len(universe), len(fees)
        two_hop = len(bases) * (n - 1) * f**2 * 2
        three_hop = len(bases) * (n - 1) * (n - 2) * f**3 * 3
        assert enum.estimate_quotes(RouteStrategy.FULL) == two_hop + three_hop

    def test_full_estimate_counts_every_quote(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC", "FILM"], [500, 3000], max_hops=3)
        assert enum.estimate_quotes() == sum(c.hops for c in enum.cycles())

    def test_greedy_estimate_is_linear_in_fee_tiers(self):
        enum = RouteEnumerator(["GALA"], ["GALA", "GUSDC", "FILM"], [500, 3000, 10000], 3)
        paths = list(enum.token_paths())
        expected = sum((len(p) - 1) * 3 for p in paths)
        assert enum.estimate_quotes(RouteStrategy.GREEDY) == expected


@pytest.mark.parametrize("max_hops", [1, 6])
def test_hop_bound_enforced(max_hops):
    with pytest.raises(ValidationError):
        RouteEnumerator(["GALA"], ["GALA", "GUSDC"], [500], max_hops=max_hops)
