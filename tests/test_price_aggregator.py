# tests/test_price_aggregator.py
"""
Price Aggregator Tests - Unit Tests for Cross-Source Validation

This module tests mean computation, the 1% deviation check (including the
exclusive boundary), single-source acceptance and display formatting.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- pricing_oracle.application.price_aggregator (aggregate_quotes)
- pricing_oracle.domain (SourceQuote, NoSourcesAvailable)
- pytest (testing framework)
"""
from decimal import Decimal  # Exact prices for test data
from itertools import permutations  # Query-order independence checks

import pytest  # Testing framework for writing and running tests

from pricing_oracle.application.price_aggregator import aggregate_quotes  # Function under test
from pricing_oracle.domain.errors import NoSourcesAvailable
from pricing_oracle.domain.models import SourceQuote


def quote(price, source="a", entity_id=0, volume=None, change=None):
    return SourceQuote(
        entity_id=entity_id,
        price=Decimal(price),
        source_name=source,
        volume=None if volume is None else Decimal(volume),
        net_change_pct=None if change is None else Decimal(change),
    )


class TestEmptyAndSingle:
    def test_no_quotes_raises(self):
        with pytest.raises(NoSourcesAvailable) as exc:
            aggregate_quotes(3, [])
        assert exc.value.entity_id == 3

    @pytest.mark.parametrize("price", ["0.00000001", "1", "65000.5", "123456789.123"])
    def test_single_quote_is_valid_at_any_magnitude(self, price):
        result = aggregate_quotes(0, [quote(price, "geckoterminal")])
        assert result.valid is True
        assert result.price == Decimal(price)
        assert result.contributing_sources == ("geckoterminal",)


class TestDeviationCheck:
    def test_identical_quotes_are_valid(self):
        result = aggregate_quotes(0, [quote("2.5", "a"), quote("2.5", "b"), quote("2.5", "c")])
        assert result.valid is True
        assert result.price == Decimal("2.5")

    def test_small_spread_is_valid(self):
        result = aggregate_quotes(0, [quote("1.00", "a"), quote("1.005", "b")])
        assert result.valid is True
        assert result.price == Decimal("1.0025")

    def test_just_under_one_percent_is_valid(self):
        # mean 1.01, 1.00 deviates 0.99%
        result = aggregate_quotes(0, [quote("1.00", "a"), quote("1.02", "b")])
        assert result.valid is True
        assert result.price == Decimal("1.01")

    def test_exactly_one_percent_is_valid(self):
        # mean 1.00, both quotes deviate exactly 1%
        result = aggregate_quotes(0, [quote("0.99", "a"), quote("1.01", "b")])
        assert result.valid is True

    def test_above_one_percent_is_invalid(self):
        # mean 1.025, 1.00 deviates ~2.4%
        result = aggregate_quotes(0, [quote("1.00", "a"), quote("1.05", "b")])
        assert result.valid is False
        assert result.price == Decimal("1.025")

    def test_single_outlier_invalidates_group(self):
        quotes = [quote("1.00", "a"), quote("1.00", "b"), quote("1.10", "c")]
        assert aggregate_quotes(0, quotes).valid is False

    def test_verdict_independent_of_query_order(self):
        quotes = [quote("1.00", "a"), quote("1.004", "b"), quote("0.998", "c")]
        outcomes = {
            (r.valid, r.price)
            for r in (aggregate_quotes(0, list(p)) for p in permutations(quotes))
        }
        assert len(outcomes) == 1

    def test_sources_keep_query_order(self):
        quotes = [quote("1", "coinmarketcap"), quote("1", "geckoterminal"), quote("1", "coingecko")]
        result = aggregate_quotes(0, quotes)
        assert result.contributing_sources == ("coinmarketcap", "geckoterminal", "coingecko")


class TestDisplayFields:
    def test_volume_and_change_from_first_quote_that_has_them(self):
        quotes = [
            quote("1", "geckoterminal", volume="1000"),
            quote("1", "coingecko", volume="5000", change="-1.23456"),
        ]
        result = aggregate_quotes("weth", quotes)
        assert result.entity_id == "weth"
        assert result.volume == "1000.00"
        assert result.net_change == "-1.2346"

    def test_missing_volume_and_change_are_empty_strings(self):
        result = aggregate_quotes(0, [quote("1", "a")])
        assert result.volume == ""
        assert result.net_change == ""
