"""
Provider Adapters - External API Clients

This package contains adapters for external token price and forex APIs.
Price sources implement PriceSource, forex sources implement ForexSource.
"""

from pricing_oracle.adapters.providers.base import ForexSource, HttpSource, PriceSource
from pricing_oracle.adapters.providers.coinapi import CoinApiSource
from pricing_oracle.adapters.providers.coingecko import CoinGeckoSource
from pricing_oracle.adapters.providers.coinmarketcap import CoinMarketCapSource
from pricing_oracle.adapters.providers.geckoterminal import GeckoTerminalSource
from pricing_oracle.adapters.providers.twelve_data import TwelveDataSource

__all__ = [
    "ForexSource",
    "HttpSource",
    "PriceSource",
    "CoinApiSource",
    "CoinGeckoSource",
    "CoinMarketCapSource",
    "GeckoTerminalSource",
    "TwelveDataSource",
]
