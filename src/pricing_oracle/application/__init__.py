"""
Application Layer - Use Cases and Services

This package contains the aggregation, proxy resolution and table building
logic, plus the PricingService that runs them in order.
"""

from pricing_oracle.application.price_aggregator import DEVIATION_THRESHOLD, aggregate_quotes
from pricing_oracle.application.forex_aggregator import ForexAggregator
from pricing_oracle.application.proxy_resolver import ProxyResolution, resolve_proxies, resolve_proxy
from pricing_oracle.application.table_builder import PREVIEW_GLOBAL_DEFINITION, build_conversion_table
from pricing_oracle.application.pricing_service import PricingRun, PricingService

__all__ = [
    "DEVIATION_THRESHOLD",
    "aggregate_quotes",
    "ForexAggregator",
    "ProxyResolution",
    "resolve_proxies",
    "resolve_proxy",
    "PREVIEW_GLOBAL_DEFINITION",
    "build_conversion_table",
    "PricingRun",
    "PricingService",
]
