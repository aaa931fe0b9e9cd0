# tests/test_forex_aggregator.py
"""
Forex Aggregator Tests - Batching, Averaging and Quota Handling

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- pricing_oracle.application.forex_aggregator (ForexAggregator)
- pricing_oracle.adapters.providers.base (ForexSource interface for fakes)
- pricing_oracle.shared.batching (BatchPolicy)
- pytest, unittest.mock (testing framework and mocks)
"""
import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from pricing_oracle.adapters.providers.base import ForexSource
from pricing_oracle.application.forex_aggregator import ForexAggregator
from pricing_oracle.domain.errors import ForexQuotaExceeded, ProviderUnavailableError
from pricing_oracle.domain.models import ForexQuote
from pricing_oracle.shared.batching import BatchPolicy


class FakeForexSource(ForexSource):
    """Returns canned rates; raises for symbols mapped to an exception."""

    def __init__(self, name, rates):
        self.name = name
        self.rates = rates
        self.calls = []

    def fetch_rate(self, symbol):
        self.calls.append(symbol)
        value = self.rates.get(symbol)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise ProviderUnavailableError(f"{self.name}: no rate for {symbol}")
        return ForexQuote(symbol=symbol, rate=Decimal(value), provider_name=self.name)


def run(coro):
    return asyncio.run(coro)


class TestReconcile:
    def test_two_providers_are_averaged(self):
        agg = ForexAggregator([
            FakeForexSource("twelve_data", {"EUR": "1.10"}),
            FakeForexSource("coinapi", {"EUR": "1.12"}),
        ])
        rates = run(agg.aggregate(["EUR"]))
        assert len(rates) == 1
        assert rates[0].symbol == "EUR"
        assert rates[0].name == "Euro"
        assert rates[0].rate == Decimal("1.11")

    def test_single_provider_value_is_used(self):
        agg = ForexAggregator([
            FakeForexSource("twelve_data", {"EUR": "1.10"}),
            FakeForexSource("coinapi", {}),
        ])
        rates = run(agg.aggregate(["EUR"]))
        assert rates[0].rate == Decimal("1.10")

    def test_symbol_without_any_rate_is_omitted(self):
        agg = ForexAggregator([FakeForexSource("twelve_data", {"EUR": "0.92"})])
        rates = run(agg.aggregate(["EUR", "XYZ"]))
        assert [r.symbol for r in rates] == ["EUR"]

    def test_output_keeps_configured_order(self):
        source = FakeForexSource("twelve_data", {"JPY": "150", "EUR": "0.92", "GBP": "0.79"})
        rates = run(ForexAggregator([source]).aggregate(["JPY", "EUR", "GBP"]))
        assert [r.symbol for r in rates] == ["JPY", "EUR", "GBP"]

    def test_large_disagreement_is_still_averaged(self):
        agg = ForexAggregator([
            FakeForexSource("twelve_data", {"EUR": "1.00"}),
            FakeForexSource("coinapi", {"EUR": "1.20"}),
        ])
        assert run(agg.aggregate(["EUR"]))[0].rate == Decimal("1.10")

    @pytest.mark.parametrize("bad", ["0", "-1", "NaN"])
    def test_unusable_rates_are_ignored(self, bad):
        agg = ForexAggregator([
            FakeForexSource("twelve_data", {"EUR": bad}),
            FakeForexSource("coinapi", {"EUR": "0.90"}),
        ])
        assert run(agg.aggregate(["EUR"]))[0].rate == Decimal("0.90")

    def test_unknown_currency_name(self):
        agg = ForexAggregator([FakeForexSource("coinapi", {"ZZZ": "2"})])
        assert run(agg.aggregate(["ZZZ"]))[0].name == "Unknown Currency"


class TestEmptyInputs:
    def test_no_symbols_makes_no_calls(self):
        source = FakeForexSource("twelve_data", {"EUR": "1"})
        assert run(ForexAggregator([source]).aggregate([])) == []
        assert source.calls == []

    def test_no_sources_yields_nothing(self):
        assert run(ForexAggregator([]).aggregate(["EUR"])) == []


class TestBatching:
    def test_ten_symbols_split_eight_then_two(self):
        symbols = ["EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD", "SEK", "NOK", "DKK"]
        source = FakeForexSource("twelve_data", {s: "1.5" for s in symbols})
        calls_before_pause = []

        async def record_pause(delay):
            calls_before_pause.append(list(source.calls))

        sleep = AsyncMock(side_effect=record_pause)
        agg = ForexAggregator([source], policy=BatchPolicy(max_items=8, delay_seconds=60), sleep=sleep)
        rates = run(agg.aggregate(symbols))

        assert len(rates) == 10
        sleep.assert_awaited_once_with(60)
        assert sorted(calls_before_pause[0]) == sorted(symbols[:8])
        assert sorted(source.calls[8:]) == sorted(symbols[8:])

    def test_no_pause_when_delay_is_zero(self):
        symbols = ["EUR", "GBP", "JPY"]
        sleep = AsyncMock()
        agg = ForexAggregator(
            [FakeForexSource("twelve_data", {s: "1" for s in symbols})],
            policy=BatchPolicy(max_items=1, delay_seconds=0),
            sleep=sleep,
        )
        assert len(run(agg.aggregate(symbols))) == 3
        sleep.assert_not_awaited()

    def test_no_pause_after_single_batch(self):
        sleep = AsyncMock()
        agg = ForexAggregator(
            [FakeForexSource("twelve_data", {"EUR": "1"})],
            policy=BatchPolicy(max_items=8, delay_seconds=30),
            sleep=sleep,
        )
        run(agg.aggregate(["EUR"]))
        sleep.assert_not_awaited()


class TestQuota:
    def test_exhausted_provider_is_skipped_for_later_batches(self):
        limited = FakeForexSource("twelve_data", {
            "EUR": ForexQuotaExceeded("Twelve Data quota reached"),
            "GBP": "0.79",
            "JPY": "150",
        })
        backup = FakeForexSource("coinapi", {"EUR": "0.92", "GBP": "0.80", "JPY": "151"})
        agg = ForexAggregator(
            [limited, backup],
            policy=BatchPolicy(max_items=1, delay_seconds=0),
        )
        rates = run(agg.aggregate(["EUR", "GBP", "JPY"]))

        assert limited.calls == ["EUR"]
        assert [r.symbol for r in rates] == ["EUR", "GBP", "JPY"]
        assert rates[1].rate == Decimal("0.80")

    def test_exhaustion_is_reset_between_runs(self):
        limited = FakeForexSource("twelve_data", {"EUR": ForexQuotaExceeded("quota")})
        agg = ForexAggregator([limited])
        run(agg.aggregate(["EUR"]))
        run(agg.aggregate(["EUR"]))
        assert limited.calls == ["EUR", "EUR"]
