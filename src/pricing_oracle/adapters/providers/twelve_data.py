# src/pricing_oracle/adapters/providers/twelve_data.py
"""
Twelve Data Forex Source

Fetches USD/<symbol> from the /price endpoint. Twelve Data reports errors,
including exhausted credits, as a JSON body with a "message" field, even
on HTTP 200.

Files that USE this module:
- pricing_oracle.adapters.providers.registry (enabled by config + key)
- tests.test_providers (unit tests)

Files that this module USES:
- pricing_oracle.adapters.providers.base (HttpSource, ForexSource)
- pricing_oracle.config (settings for the API key)
"""
import logging
from decimal import Decimal
from typing import Optional

from pricing_oracle.adapters.providers.base import ForexSource, HttpSource
from pricing_oracle.config import settings
from pricing_oracle.domain.errors import ForexQuotaExceeded, ProviderUnavailableError
from pricing_oracle.domain.models import ForexQuote
from pricing_oracle.shared.validators import parse_positive_decimal

log = logging.getLogger(__name__)

QUOTA_MARKERS = ("run out of api credits", "current limit", "quota", "credits")


def is_quota_error(message: str) -> bool:
    msg = message.lower()
    return any(marker in msg for marker in QUOTA_MARKERS)


class TwelveDataSource(HttpSource, ForexSource):
    name = "twelve_data"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.twelvedata.com",
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.api_key = api_key or settings.twelve_data_key
        if not self.api_key:
            raise ValueError("Twelve Data API key not configured")
        self.base_url = base_url.rstrip("/")

    def fetch_rate(self, symbol: str) -> ForexQuote:
        if symbol == "USD":
            return ForexQuote(symbol=symbol, rate=Decimal(1), provider_name=self.name)

        pair = f"USD/{symbol}"
        resp = self._get(f"{self.base_url}/price", params={"symbol": pair, "apikey": self.api_key})

        if resp.status_code >= 400:
            body = resp.text or ""
            if is_quota_error(body):
                log.warning("Twelve Data quota reached at %s", pair)
                raise ForexQuotaExceeded(f"Twelve Data quota reached at {pair}")
            raise ProviderUnavailableError(f"Twelve Data {pair} failed (HTTP {resp.status_code}): {body[:200]}")

        data = self._json(resp)
        if not isinstance(data, dict):
            raise ProviderUnavailableError(f"Twelve Data {pair} returned non-dict JSON")

        message = data.get("message")
        if isinstance(message, str):
            if is_quota_error(message):
                log.warning("Twelve Data quota reached at %s", pair)
                raise ForexQuotaExceeded(f"Twelve Data quota reached at {pair}: {message}")
            raise ProviderUnavailableError(f"Twelve Data {pair} failed (API error): {message}")

        if "price" not in data:
            raise ProviderUnavailableError(f"Twelve Data {pair} failed (missing price)")
        rate = parse_positive_decimal(data["price"])
        if rate is None:
            raise ProviderUnavailableError(f"Twelve Data {pair} failed (invalid rate {data['price']!r})")

        return ForexQuote(symbol=symbol, rate=rate, provider_name=self.name)
