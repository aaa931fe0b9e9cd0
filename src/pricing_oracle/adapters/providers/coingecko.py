# src/pricing_oracle/adapters/providers/coingecko.py
"""
CoinGecko Price Source

Looks tokens up by contract address with the simple/token_price endpoint,
including 24h volume and 24h change. Requires COINGECKO_API_KEY (demo key).

Files that USE this module:
- pricing_oracle.adapters.providers.registry (enabled when the key is set)
- tests.test_providers (unit tests)

Files that this module USES:
- pricing_oracle.adapters.providers.base (HttpSource, PriceSource)
- pricing_oracle.config (settings for the API key)
"""
import logging
from typing import Optional

from pricing_oracle.adapters.providers.base import HttpSource, PriceSource
from pricing_oracle.config import settings
from pricing_oracle.domain.errors import ProviderUnavailableError
from pricing_oracle.domain.models import FetchTarget, SourceQuote
from pricing_oracle.shared.validators import parse_optional_decimal, parse_positive_decimal

log = logging.getLogger(__name__)

PLATFORM_IDS = {
    "ethereum": "ethereum",
    "sepolia": "ethereum",
}


class CoinGeckoSource(HttpSource, PriceSource):
    name = "coingecko"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize CoinGecko price source.

        Args:
            api_key: Optional API key (defaults to settings.coingecko_key)
            base_url: API base URL
            timeout: Optional HTTP timeout in seconds

        Raises:
            ValueError: If no API key is configured
        """
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.api_key = api_key or settings.coingecko_key
        if not self.api_key:
            raise ValueError("CoinGecko API key not configured")
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def platform_id(chain: str) -> str:
        return PLATFORM_IDS.get(chain, chain)

    def fetch(self, target: FetchTarget) -> SourceQuote:
        url = f"{self.base_url}/simple/token_price/{self.platform_id(target.chain)}"
        body = self._get_json(
            url,
            params={
                "contract_addresses": target.contract,
                "vs_currencies": "usd",
                "include_market_cap": "true",
                "include_24hr_vol": "true",
                "include_24hr_change": "true",
            },
            headers={"x-cg-demo-api-key": self.api_key},
        )

        # Response is keyed by the lower-cased contract address
        token = body.get(target.contract.lower()) if isinstance(body, dict) else None
        if not isinstance(token, dict):
            raise ProviderUnavailableError(f"CoinGecko: no data for contract {target.contract.lower()}")

        price = parse_positive_decimal(token.get("usd"))
        if price is None:
            raise ProviderUnavailableError("CoinGecko: missing usd price")

        return SourceQuote(
            entity_id=target.entity_id,
            price=price,
            source_name=self.name,
            volume=parse_optional_decimal(token.get("usd_24h_vol")),
            net_change_pct=parse_optional_decimal(token.get("usd_24h_change")),
        )
