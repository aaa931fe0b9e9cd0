# src/pricing_oracle/application/price_aggregator.py
"""
Price Aggregator - Cross-Source Validation of Token Quotes

Reduces the quotes several sources returned for one entity to a single
AggregatedResult. The price is always the arithmetic mean; the result is
only valid when every quote is within 1% of that mean. A lone quote cannot
be cross-checked and is accepted as is.

Files that USE this module:
- pricing_oracle.application.pricing_service (aggregates every fetched entity)
- tests.test_price_aggregator (unit tests)

Files that this module USES:
- pricing_oracle.domain.models (SourceQuote, AggregatedResult)
- pricing_oracle.domain.errors (NoSourcesAvailable)
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Sequence

from pricing_oracle.domain.errors import NoSourcesAvailable
from pricing_oracle.domain.models import AggregatedResult, EntityId, SourceQuote

log = logging.getLogger(__name__)

DEVIATION_THRESHOLD = Decimal("0.01")  # 1%, exclusive


def relative_deviation(price: Decimal, mean: Decimal) -> Decimal:
    return abs(price - mean) / mean


def format_volume(volume: Optional[Decimal]) -> str:
    return "" if volume is None else f"{volume:.2f}"


def format_net_change(net_change: Optional[Decimal]) -> str:
    return "" if net_change is None else f"{net_change:.4f}"


def aggregate_quotes(
    entity_id: EntityId,
    quotes: Sequence[SourceQuote],
    threshold: Decimal = DEVIATION_THRESHOLD,
) -> AggregatedResult:
    """
    Merge one entity's quotes into an AggregatedResult.

    Args:
        entity_id: Unit index or price reference id the quotes belong to
        quotes: Successful quotes in query order
        threshold: Maximum allowed relative deviation from the mean

    Returns:
        AggregatedResult; valid=False when 2+ quotes disagree beyond threshold

    Raises:
        NoSourcesAvailable: If quotes is empty
    """
    if not quotes:
        raise NoSourcesAvailable(entity_id)

    prices = [q.price for q in quotes]
    mean = sum(prices, Decimal(0)) / len(prices)

    if len(quotes) == 1:
        log.warning("%s: only 1 source (%s) - skipping cross-check", entity_id, quotes[0].source_name)
        valid = True
    else:
        valid = True
        for q in quotes:
            deviation = relative_deviation(q.price, mean)
            if deviation > threshold:
                valid = False
                log.warning(
                    "%s: source '%s' price %.8f deviates %.2f%% from average %.8f",
                    entity_id, q.source_name, q.price, deviation * 100, mean,
                )
        if valid:
            log.info("%s: all %d sources within 1%% - valid (avg %.8f)", entity_id, len(quotes), mean)

    volume = next((q.volume for q in quotes if q.volume is not None), None)
    net_change = next((q.net_change_pct for q in quotes if q.net_change_pct is not None), None)

    return AggregatedResult(
        entity_id=entity_id,
        price=mean,
        contributing_sources=tuple(q.source_name for q in quotes),
        volume=format_volume(volume),
        net_change=format_net_change(net_change),
        valid=valid,
    )
