# src/pricing_oracle/adapters/providers/registry.py
"""
Source Registry - Enabled Price and Forex Sources

Builds the ordered lists of enabled sources. Order matters only for the
`sources` column of the ConversionTable, which lists providers in query
order. Sources whose API key is missing are skipped with a warning.

Files that USE this module:
- pricing_oracle.app (composition root)

Files that this module USES:
- pricing_oracle.adapters.providers.* (concrete sources)
- pricing_oracle.config (Settings)
"""
from __future__ import annotations

import logging
from typing import Optional

from pricing_oracle.adapters.providers.base import ForexSource, PriceSource
from pricing_oracle.adapters.providers.coinapi import CoinApiSource
from pricing_oracle.adapters.providers.coingecko import CoinGeckoSource
from pricing_oracle.adapters.providers.coinmarketcap import CoinMarketCapSource
from pricing_oracle.adapters.providers.geckoterminal import GeckoTerminalSource
from pricing_oracle.adapters.providers.twelve_data import TwelveDataSource
from pricing_oracle.config import Settings, settings as default_settings

log = logging.getLogger(__name__)


def build_price_sources(cfg: Optional[Settings] = None) -> list[PriceSource]:
    """GeckoTerminal always, then CoinGecko and CoinMarketCap when keyed."""
    cfg = cfg or default_settings
    common = dict(timeout=cfg.http_timeout_seconds, user_agent=cfg.http_user_agent)

    sources: list[PriceSource] = [GeckoTerminalSource(**common)]

    if cfg.coingecko_key:
        sources.append(CoinGeckoSource(api_key=cfg.coingecko_key, **common))
    else:
        log.warning("COINGECKO_API_KEY not set; CoinGecko source disabled")

    if cfg.coinmarketcap_key:
        sources.append(CoinMarketCapSource(api_key=cfg.coinmarketcap_key, **common))
    else:
        log.warning("COINMARKETCAP_API_KEY not set; CoinMarketCap source disabled")

    log.info("Registered %d price source(s): %s", len(sources), ", ".join(s.name for s in sources))
    return sources


def build_forex_sources(
    use_twelve_data: bool = True,
    use_coinapi: bool = True,
    cfg: Optional[Settings] = None,
) -> list[ForexSource]:
    """Twelve Data then CoinAPI, each when enabled in config and keyed."""
    cfg = cfg or default_settings
    common = dict(timeout=cfg.http_timeout_seconds, user_agent=cfg.http_user_agent)

    sources: list[ForexSource] = []
    if use_twelve_data:
        if cfg.twelve_data_key:
            sources.append(TwelveDataSource(api_key=cfg.twelve_data_key, **common))
        else:
            log.warning("TWELVE_DATA_API_KEY not set; Twelve Data forex source disabled")

    if use_coinapi:
        if cfg.coinapi_key:
            sources.append(CoinApiSource(api_key=cfg.coinapi_key, **common))
        else:
            log.warning("COINAPI_API_KEY not set; CoinAPI forex source disabled")

    log.info("Registered %d forex source(s)", len(sources))
    return sources
