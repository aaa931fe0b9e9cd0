# src/pricing_oracle/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions raised while aggregating
quotes, resolving proxies, loading configuration and submitting tables.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class NoSourcesAvailable(DomainError):
    """Raised when not a single source returned a quote for an entity."""

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(f"no source returned a quote for {entity_id!r}")


class ProxyError(DomainError):
    """Base exception for proxy units that cannot be resolved."""

    def __init__(self, unit_index: int, message: str):
        self.unit_index = unit_index
        super().__init__(f"unit {unit_index}: {message}")


class ProxyTargetInvalid(ProxyError):
    """Raised when a proxy target is missing or failed the deviation check."""
    pass


class MalformedProxy(ProxyError):
    """Raised when a price_proxy is neither UseUnit nor UseReference."""
    pass


class ProxyChainUnsupported(ProxyError):
    """Raised when a proxy unit targets another proxy unit."""
    pass


class ProviderUnavailableError(DomainError):
    """Raised when a provider is unavailable or returned unusable data."""
    pass


class ForexQuotaExceeded(ProviderUnavailableError):
    """Raised when a forex provider reports its request quota is spent."""
    pass


class ConfigError(DomainError):
    """Raised when the run configuration is structurally invalid."""
    pass


class SubmissionError(DomainError):
    """Raised when the ledger rejects or cannot receive a ConversionTable."""
    pass
