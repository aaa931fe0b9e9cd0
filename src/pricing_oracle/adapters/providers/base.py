# src/pricing_oracle/adapters/providers/base.py
"""
Base Provider Interfaces for Price and Forex Sources

This module defines the abstract base classes every provider implements
and the shared HTTP plumbing (timeouts, error mapping, JSON decoding).
Any failure surfaces as ProviderUnavailableError so callers can treat it
as "no quote" without knowing which HTTP library is underneath.

Files that USE this module:
- pricing_oracle.adapters.providers.geckoterminal / coingecko / coinmarketcap (PriceSource)
- pricing_oracle.adapters.providers.twelve_data / coinapi (ForexSource)
- pricing_oracle.application.pricing_service (PriceSource protocol)
- pricing_oracle.application.forex_aggregator (ForexSource protocol)

Files that this module USES:
- pricing_oracle.config (settings for timeout and user agent)
- pricing_oracle.domain (FetchTarget, SourceQuote, ForexQuote, ProviderUnavailableError)
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

import requests

from pricing_oracle.config import settings
from pricing_oracle.domain.errors import ProviderUnavailableError
from pricing_oracle.domain.models import FetchTarget, ForexQuote, SourceQuote

log = logging.getLogger(__name__)


class HttpSource:
    """Shared requests handling for all providers."""

    name = "http"

    def __init__(self, timeout: Optional[int] = None, user_agent: Optional[str] = None):
        self.timeout = timeout or settings.http_timeout_seconds
        self.user_agent = user_agent or settings.http_user_agent

    def _get(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """
        Issue a GET request.

        Returns:
            The response, whatever its status code

        Raises:
            ProviderUnavailableError: On timeout or network/connection error
        """
        all_headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        if headers:
            all_headers.update(headers)
        try:
            return requests.get(url, params=params, headers=all_headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            log.warning("%s request timed out after %d seconds", self.name, self.timeout)
            raise ProviderUnavailableError(f"{self.name} timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            log.warning("%s request failed (network/connection error): %s", self.name, e)
            raise ProviderUnavailableError(f"{self.name} request failed: {e}") from e

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            log.error("%s returned invalid JSON: %s", self.name, e)
            raise ProviderUnavailableError(f"{self.name} returned invalid JSON: {e}") from e

    def _get_json(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET and decode JSON, treating any 4xx/5xx status as a failure."""
        resp = self._get(url, params=params, headers=headers)
        if resp.status_code >= 400:
            body = (resp.text or "")[:200]
            log.warning("%s HTTP %d: %s", self.name, resp.status_code, body)
            raise ProviderUnavailableError(f"{self.name} HTTP {resp.status_code}: {body}")
        return self._json(resp)


class PriceSource(ABC):
    """A token price provider."""

    name: str

    @abstractmethod
    def fetch(self, target: FetchTarget) -> SourceQuote:
        """
        Return this provider's USD quote for a token.

        Raises:
            ProviderUnavailableError: If no usable quote could be obtained
        """
        raise NotImplementedError


class ForexSource(ABC):
    """A forex provider quoting foreign units per 1 USD."""

    name: str

    @abstractmethod
    def fetch_rate(self, symbol: str) -> ForexQuote:
        """
        Return the USD/<symbol> rate.

        Raises:
            ForexQuotaExceeded: If the provider's quota is spent
            ProviderUnavailableError: If no usable rate could be obtained
        """
        raise NotImplementedError
