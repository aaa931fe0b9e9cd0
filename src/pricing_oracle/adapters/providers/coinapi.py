# src/pricing_oracle/adapters/providers/coinapi.py
"""
CoinAPI Forex Source

Fetches USD/<symbol> from the exchangerate endpoint. An exhausted plan is
reported through the error body of a non-2xx response.

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

QUOTA_MARKERS = ("quota exceeded", "insufficient usage credits", "subscription", "forbidden")


def is_quota_error(message: str) -> bool:
    msg = message.lower()
    return any(marker in msg for marker in QUOTA_MARKERS)


class CoinApiSource(HttpSource, ForexSource):
    name = "coinapi"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://rest.coinapi.io/v1",
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.api_key = api_key or settings.coinapi_key
        if not self.api_key:
            raise ValueError("CoinAPI API key not configured")
        self.base_url = base_url.rstrip("/")

    def fetch_rate(self, symbol: str) -> ForexQuote:
        if symbol == "USD":
            return ForexQuote(symbol=symbol, rate=Decimal(1), provider_name=self.name)

        resp = self._get(
            f"{self.base_url}/exchangerate/USD/{symbol}",
            headers={"X-CoinAPI-Key": self.api_key},
        )
        if resp.status_code >= 400:
            body = resp.text or ""
            if is_quota_error(body):
                log.warning("CoinAPI quota reached at USD/%s", symbol)
                raise ForexQuotaExceeded(f"CoinAPI quota reached at USD/{symbol}")
            raise ProviderUnavailableError(f"CoinAPI USD/{symbol} failed (HTTP {resp.status_code}): {body[:200]}")

        data = self._json(resp)
        rate = parse_positive_decimal(data.get("rate")) if isinstance(data, dict) else None
        if rate is None:
            raise ProviderUnavailableError(f"CoinAPI USD/{symbol} failed (missing rate)")

        return ForexQuote(symbol=symbol, rate=rate, provider_name=self.name)
