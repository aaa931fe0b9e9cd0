# src/pricing_oracle/adapters/providers/geckoterminal.py
"""
GeckoTerminal Price Source

Keyless on-chain DEX price source. Prices and volume come back as strings;
GeckoTerminal does not report a 24h change for tokens.

Files that USE this module:
- pricing_oracle.adapters.providers.registry (always enabled)
- tests.test_providers (unit tests)

Files that this module USES:
- pricing_oracle.adapters.providers.base (HttpSource, PriceSource)
- pricing_oracle.shared.validators (decimal parsing)
"""
import logging
from typing import Optional

from pricing_oracle.adapters.providers.base import HttpSource, PriceSource
from pricing_oracle.domain.errors import ProviderUnavailableError
from pricing_oracle.domain.models import FetchTarget, SourceQuote
from pricing_oracle.shared.validators import parse_optional_decimal, parse_positive_decimal

log = logging.getLogger(__name__)

NETWORK_IDS = {
    "ethereum": "eth",
    "sepolia": "eth",
}


class GeckoTerminalSource(HttpSource, PriceSource):
    name = "geckoterminal"

    def __init__(
        self,
        base_url: str = "https://api.geckoterminal.com/api/v2",
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def network_id(chain: str) -> str:
        return NETWORK_IDS.get(chain, chain)

    def fetch(self, target: FetchTarget) -> SourceQuote:
        url = f"{self.base_url}/networks/{self.network_id(target.chain)}/tokens/{target.contract}"
        body = self._get_json(url)

        try:
            attrs = body["data"]["attributes"]
        except (KeyError, TypeError) as e:
            raise ProviderUnavailableError(f"GeckoTerminal: unexpected schema for {target.contract}") from e

        price = parse_positive_decimal(attrs.get("price_usd"))
        if price is None:
            raise ProviderUnavailableError(f"GeckoTerminal: missing price_usd for {target.contract}")

        volume_usd = attrs.get("volume_usd") or {}
        volume = parse_optional_decimal(volume_usd.get("h24")) if isinstance(volume_usd, dict) else None

        return SourceQuote(
            entity_id=target.entity_id,
            price=price,
            source_name=self.name,
            volume=volume,
        )
