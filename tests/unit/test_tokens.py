"""
Unit tests for token identifier normalization
"""

import pytest

from cycle_arbitrage.exceptions import InvalidIdentifierError, ValidationError
from cycle_arbitrage.tokens import TokenIdentifier, normalize, normalize_all


class TestNormalize:
    def test_pipe_form_is_parsed_structurally(self):
        token = normalize("GALA|Unit|none|none")
        assert token == TokenIdentifier("GALA", "Unit", "none", "none")
        assert str(token) == "GALA|Unit|none|none"

    def test_dollar_form(self):
        assert str(normalize("GUSDC$Unit$none$none")) == "GUSDC|Unit|none|none"

    def test_marker_prefixed_dollar_form(self):
        assert str(normalize("$GMUSIC$Unit$none$none")) == "GMUSIC|Unit|none|none"

    def test_bare_symbol_gets_defaults(self):
        token = normalize("FILM")
        assert token.symbol == "FILM"
        assert token.token_class == "Unit"
        assert token.subclass == "none"
        assert token.network == "none"

    def test_marker_prefixed_bare_symbol(self):
        assert normalize("$GMUSIC") == normalize("GMUSIC")

    def test_surrounding_whitespace_ignored(self):
        assert normalize("  GALA ") == normalize("GALA")

    def test_non_default_fields_survive(self):
        token = normalize("GWETH|Unit|eth|bridge")
        assert token.subclass == "eth"
        assert token.network == "bridge"

    @pytest.mark.parametrize(
        "raw", ["GALA|Unit|none|none", "GALA$Unit$none$none", "$GALA", "GALA"]
    )
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(str(once)) == once
        assert normalize(once) is once

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "GALA|Unit|none",
            "GALA|Token|none|none",
            "GALA$Unit$none",
            "GA LA",
            "GALA/USDC",
            "$",
        ],
    )
    def test_invalid_shapes_raise(self, raw):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            normalize(raw)
        assert exc_info.value.raw == raw

    def test_invalid_identifier_is_validation_error(self):
        with pytest.raises(ValidationError):
            normalize("bad token")

    def test_non_text_rejected(self):
        with pytest.raises(InvalidIdentifierError):
            normalize(42)

    def test_structural_equality_and_hashing(self):
        assert normalize("GALA") == TokenIdentifier("GALA")
        assert len({normalize("GALA"), normalize("GALA|Unit|none|none")}) == 1

    def test_dollar_rendering(self):
        assert normalize("GALA").to_dollar() == "GALA$Unit$none$none"


def test_normalize_all_dedupes_in_order():
    tokens = normalize_all(["GALA", "GUSDC", "GALA$Unit$none$none", "$FILM"])
    assert [t.symbol for t in tokens] == ["GALA", "GUSDC", "FILM"]
