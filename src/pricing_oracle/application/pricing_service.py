# src/pricing_oracle/application/pricing_service.py
"""
Pricing Service - One Complete Pricing Run

Orchestrates a run from configuration to ConversionTable:

1. Fetch every non-proxy unit and every price reference from every price
   source concurrently (sources are blocking requests clients, so each call
   runs in the default executor).
2. Aggregate each entity's quotes; entities without a single quote are
   dropped.
3. Resolve proxy units against those results.
4. Fetch forex rates in batches, concurrently with steps 1-3.
5. Build the ConversionTable from valid results.

Per-entity failures never abort the run; they are logged and the entity is
left out of the table.

Files that USE this module:
- pricing_oracle.app (PricingService.run and build_table)
- tests.test_pricing_service (end-to-end tests with mocked sources)

Files that this module USES:
- pricing_oracle.application.price_aggregator (aggregate_quotes)
- pricing_oracle.application.proxy_resolver (resolve_proxies)
- pricing_oracle.application.forex_aggregator (ForexAggregator)
- pricing_oracle.application.table_builder (build_conversion_table)
- pricing_oracle.config.loader (RunConfig)
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pricing_oracle.adapters.providers.base import PriceSource
from pricing_oracle.application.forex_aggregator import ForexAggregator
from pricing_oracle.application.price_aggregator import aggregate_quotes
from pricing_oracle.application.proxy_resolver import ProxyResolution, resolve_proxies
from pricing_oracle.application.table_builder import build_conversion_table
from pricing_oracle.config.loader import RunConfig
from pricing_oracle.domain.errors import NoSourcesAvailable
from pricing_oracle.domain.models import (
    AggregatedResult,
    ConversionTable,
    FetchTarget,
    ForexRate,
    SourceQuote,
    UseUnit,
)

log = logging.getLogger(__name__)


@dataclass
class PricingRun:
    """Everything one run produced, before it is turned into a table."""
    unit_results: dict[int, AggregatedResult] = field(default_factory=dict)
    reference_results: dict[str, AggregatedResult] = field(default_factory=dict)
    proxies: ProxyResolution = field(default_factory=ProxyResolution)
    forex_rates: list[ForexRate] = field(default_factory=list)
    unit_filter: Optional[int] = None

    @property
    def results(self) -> dict[int, AggregatedResult]:
        """Direct and proxied unit results, restricted to the unit filter."""
        merged = {**self.unit_results, **self.proxies.resolved}
        if self.unit_filter is not None:
            merged = {k: v for k, v in merged.items() if k == self.unit_filter}
        return dict(sorted(merged.items()))


class PricingService:
    """
    High-level service producing a ConversionTable from configured sources.
    """

    def __init__(self, price_sources: Sequence[PriceSource], forex: Optional[ForexAggregator] = None):
        """
        Args:
            price_sources: Enabled price sources in query order
            forex: Forex aggregator; None skips forex entirely
        """
        self.price_sources = list(price_sources)
        self.forex = forex

    async def fetch_quotes(self, target: FetchTarget) -> list[SourceQuote]:
        """
        Query every price source for one entity.

        Returns:
            Successful quotes in source order; failed sources are logged
        """
        loop = asyncio.get_running_loop()
        results = await asyncio.gather(
            *(loop.run_in_executor(None, source.fetch, target) for source in self.price_sources),
            return_exceptions=True,
        )
        quotes: list[SourceQuote] = []
        for source, result in zip(self.price_sources, results):
            if isinstance(result, Exception):
                log.warning("  [%s] %s (%s) failed: %s", source.name, target.entity_id, target.name, result)
                continue
            log.info("  [%s] %s (%s) price=%.8f USD", source.name, target.entity_id, target.name, result.price)
            quotes.append(result)
        return quotes

    async def price_entity(self, target: FetchTarget) -> Optional[AggregatedResult]:
        """Fetch and aggregate one entity; None when no source answered."""
        quotes = await self.fetch_quotes(target)
        try:
            return aggregate_quotes(target.entity_id, quotes)
        except NoSourcesAvailable as e:
            log.warning("%s (%s) excluded: %s", target.entity_id, target.name, e)
            return None

    async def _price_all(self, targets: list[FetchTarget]) -> list[Optional[AggregatedResult]]:
        return list(await asyncio.gather(*(self.price_entity(t) for t in targets)))

    async def _forex_rates(self, symbols: Sequence[str]) -> list[ForexRate]:
        if self.forex is None or not symbols:
            return []
        return await self.forex.aggregate(symbols)

    async def run(self, config: RunConfig, unit_filter: Optional[int] = None) -> PricingRun:
        """
        Execute one pricing run.

        Args:
            config: Validated run configuration
            unit_filter: Optional unit index; only that unit is priced (plus
                whatever it proxies from)

        Returns:
            PricingRun with direct, reference, proxy and forex results
        """
        real_units = config.real_units()
        proxy_units = config.proxy_units()

        if unit_filter is not None:
            wanted = {unit_filter}
            for unit in proxy_units:
                if unit.unit_index == unit_filter and isinstance(unit.price_proxy, UseUnit):
                    wanted.add(unit.price_proxy.unit_index)
            real_units = [u for u in real_units if u.unit_index in wanted]
            proxy_units = [u for u in proxy_units if u.unit_index == unit_filter]
            if not real_units and not proxy_units:
                log.warning("unit %d is not configured", unit_filter)

        references = list(config.price_references)
        targets = [FetchTarget.for_reference(r) for r in references]
        targets += [FetchTarget.for_unit(u) for u in real_units]
        log.info(
            "Fetching %d price reference(s) and %d unit(s) from %d source(s)",
            len(references), len(real_units), len(self.price_sources),
        )

        aggregated, forex_rates = await asyncio.gather(
            self._price_all(targets),
            self._forex_rates(config.forex.symbols),
        )

        run = PricingRun(forex_rates=forex_rates, unit_filter=unit_filter)
        for target, result in zip(targets, aggregated):
            if result is None:
                continue
            if isinstance(target.entity_id, str):
                run.reference_results[target.entity_id] = result
            else:
                run.unit_results[target.entity_id] = result

        run.proxies = resolve_proxies(
            config.units,
            run.unit_results,
            run.reference_results,
            only=[u.unit_index for u in proxy_units],
        )
        return run

    @staticmethod
    def build_table(run: PricingRun, config: RunConfig, global_definition: Optional[str] = None) -> ConversionTable:
        """Build the ConversionTable for a finished run."""
        return build_conversion_table(run.results, config.units, run.forex_rates, global_definition)
