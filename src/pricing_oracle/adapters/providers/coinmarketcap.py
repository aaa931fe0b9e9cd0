# src/pricing_oracle/adapters/providers/coinmarketcap.py
"""
CoinMarketCap Price Source

Queries quotes/latest by contract address. The v2 endpoint returns either a
list or a mapping of id -> token (or id -> [tokens]); the entry whose
contract and platform match is preferred, otherwise the first entry is used.
Requires COINMARKETCAP_API_KEY.

Files that USE this module:
- pricing_oracle.adapters.providers.registry (enabled when the key is set)
- tests.test_providers (unit tests)

Files that this module USES:
- pricing_oracle.adapters.providers.base (HttpSource, PriceSource)
- pricing_oracle.config (settings for the API key)
"""
import logging
from typing import Any, Iterator, Optional

from pricing_oracle.adapters.providers.base import HttpSource, PriceSource
from pricing_oracle.config import settings
from pricing_oracle.domain.errors import ProviderUnavailableError
from pricing_oracle.domain.models import FetchTarget, SourceQuote
from pricing_oracle.shared.validators import parse_optional_decimal, parse_positive_decimal

log = logging.getLogger(__name__)

PLATFORM_SLUGS = {
    "ethereum": "ethereum",
    "sepolia": "ethereum",
}


def _iter_tokens(data: Any) -> Iterator[dict]:
    if isinstance(data, list):
        yield from (t for t in data if isinstance(t, dict))
    elif isinstance(data, dict):
        for value in data.values():
            if isinstance(value, list):
                yield from (t for t in value if isinstance(t, dict))
            elif isinstance(value, dict):
                yield value


def _token_contract(token: dict) -> Optional[str]:
    address = token.get("contract_address")
    if not isinstance(address, str):
        platform = token.get("platform") or {}
        address = platform.get("token_address") or platform.get("contract_address")
    return address.lower() if isinstance(address, str) else None


def _token_platform(token: dict) -> Optional[str]:
    platform = token.get("platform")
    if isinstance(platform, dict) and isinstance(platform.get("slug"), str):
        return platform["slug"]
    return None


def extract_best_token(data: Any, contract: str, expected_platform: str) -> Optional[dict]:
    """
    Pick the token entry matching contract (and platform, when reported).

    Returns:
        The matching entry, the first entry as a fallback, or None if empty
    """
    contract = contract.lower()
    fallback = None
    for token in _iter_tokens(data):
        if fallback is None:
            fallback = token
        if _token_contract(token) != contract:
            continue
        platform = _token_platform(token)
        if platform is None or platform.lower() == expected_platform.lower():
            return token
    return fallback


class CoinMarketCapSource(HttpSource, PriceSource):
    name = "coinmarketcap"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://pro-api.coinmarketcap.com",
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.api_key = api_key or settings.coinmarketcap_key
        if not self.api_key:
            raise ValueError("CoinMarketCap API key not configured")
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def platform_slug(chain: str) -> str:
        return PLATFORM_SLUGS.get(chain, chain)

    def fetch(self, target: FetchTarget) -> SourceQuote:
        body = self._get_json(
            f"{self.base_url}/v2/cryptocurrency/quotes/latest",
            params={"address": target.contract, "skip_invalid": "true"},
            headers={"X-CMC_PRO_API_KEY": self.api_key},
        )
        data = body.get("data") if isinstance(body, dict) else None
        token = extract_best_token(data, target.contract, self.platform_slug(target.chain))
        if token is None:
            raise ProviderUnavailableError("CoinMarketCap: no matching token for contract")

        quote = token.get("quote") or {}
        usd = quote.get("USD") or quote.get("usd")
        if not isinstance(usd, dict):
            raise ProviderUnavailableError("CoinMarketCap: missing USD quote")

        price = parse_positive_decimal(usd.get("price"))
        if price is None:
            raise ProviderUnavailableError("CoinMarketCap: missing USD price")

        return SourceQuote(
            entity_id=target.entity_id,
            price=price,
            source_name=self.name,
            volume=parse_optional_decimal(usd.get("volume_24h")),
            net_change_pct=parse_optional_decimal(usd.get("percent_change_24h")),
        )
