# src/pricing_oracle/application/forex_aggregator.py
"""
Forex Aggregator - Batched, Multi-Provider USD Forex Rates

Forex providers meter requests per time window, so configured symbols are
queried in fixed-size batches with a pause between batches. Inside a batch
every (symbol, provider) pair is fetched concurrently. Per symbol the rate
is the mean of the providers that answered, or the single answer when only
one did; symbols nobody answered for are left out with a warning.

There is no deviation threshold for forex: a provider that disagrees by
more than 1% is logged, but still averaged in.

Files that USE this module:
- pricing_oracle.application.pricing_service (ForexAggregator)
- tests.test_forex_aggregator (unit tests)

Files that this module USES:
- pricing_oracle.adapters.providers.base (ForexSource interface)
- pricing_oracle.domain (ForexQuote, ForexRate, currency names, errors)
- pricing_oracle.shared.batching (BatchPolicy, iter_batches)
"""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Sequence

from pricing_oracle.adapters.providers.base import ForexSource
from pricing_oracle.domain.currencies import currency_name
from pricing_oracle.domain.errors import ForexQuotaExceeded
from pricing_oracle.domain.models import ForexQuote, ForexRate
from pricing_oracle.shared.batching import BatchPolicy, iter_batches

log = logging.getLogger(__name__)

FOREX_DEVIATION_WARNING = Decimal("0.01")


class ForexAggregator:
    """
    Reconciles forex quotes from zero or more providers across batches.
    """

    def __init__(
        self,
        sources: Sequence[ForexSource],
        policy: Optional[BatchPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            sources: Enabled forex sources, in query order
            policy: Batch size and inter-batch delay (defaults: 8 symbols, no delay)
            sleep: Coroutine used for the inter-batch pause
        """
        self.sources = list(sources)
        self.policy = policy or BatchPolicy()
        self._sleep = sleep
        self._exhausted: set[str] = set()

    async def aggregate(self, symbols: Sequence[str]) -> list[ForexRate]:
        """
        Fetch and reconcile rates for every symbol.

        Args:
            symbols: Configured symbols; output keeps this order

        Returns:
            One ForexRate per symbol that at least one provider answered
        """
        symbols = list(symbols)
        if not symbols:
            return []
        if not self.sources:
            log.warning("No forex sources enabled; %d symbol(s) omitted from ConversionTable", len(symbols))
            return []

        self._exhausted.clear()
        batches = list(iter_batches(symbols, self.policy.max_items))
        rates: list[ForexRate] = []

        for number, batch in enumerate(batches, start=1):
            log.info("Forex batch %d/%d: %s", number, len(batches), ", ".join(batch))
            quotes = await self._fetch_batch(batch)
            for symbol in batch:
                rate = self._reconcile(symbol, quotes.get(symbol, []))
                if rate is not None:
                    rates.append(rate)

            if number < len(batches) and self.policy.delay_seconds > 0:
                log.info("Waiting %.1fs before next forex batch", self.policy.delay_seconds)
                await self._sleep(self.policy.delay_seconds)

        return rates

    async def _fetch_batch(self, batch: list[str]) -> dict[str, list[ForexQuote]]:
        loop = asyncio.get_running_loop()
        pairs = [
            (symbol, source)
            for symbol in batch
            for source in self.sources
            if source.name not in self._exhausted
        ]
        results = await asyncio.gather(
            *(loop.run_in_executor(None, source.fetch_rate, symbol) for symbol, source in pairs),
            return_exceptions=True,
        )

        quotes: dict[str, list[ForexQuote]] = {symbol: [] for symbol in batch}
        for (symbol, source), result in zip(pairs, results):
            if isinstance(result, ForexQuotaExceeded):
                if source.name not in self._exhausted:
                    log.warning(
                        "forex source '%s' quota reached at %s - skipped for the rest of this run",
                        source.name, symbol,
                    )
                self._exhausted.add(source.name)
                continue
            if isinstance(result, Exception):
                log.warning("forex source '%s' failed for %s: %s", source.name, symbol, result)
                continue
            if not result.rate.is_finite() or result.rate <= 0:
                log.warning("forex source '%s' returned unusable rate %s for %s", source.name, result.rate, symbol)
                continue
            quotes[symbol].append(result)
        return quotes

    def _reconcile(self, symbol: str, quotes: list[ForexQuote]) -> Optional[ForexRate]:
        if not quotes:
            log.warning("forex symbol '%s' failed (missing from all sources) - omitted from ConversionTable", symbol)
            return None

        mean = sum((q.rate for q in quotes), Decimal(0)) / len(quotes)
        if len(quotes) > 1:
            for q in quotes:
                deviation = abs(q.rate - mean) / mean
                if deviation > FOREX_DEVIATION_WARNING:
                    log.warning(
                        "forex %s source '%s' deviates %.2f%% from average %.8f",
                        symbol, q.provider_name, deviation * 100, mean,
                    )

        return ForexRate(symbol=symbol, name=currency_name(symbol), rate=mean)
