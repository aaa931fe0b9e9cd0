"""
Domain Layer - Pure Business Objects

This package contains domain models and business rules.
No dependencies on infrastructure or external systems.
"""

from pricing_oracle.domain.models import (
    AggregatedResult,
    ConversionData,
    ConversionTable,
    EntityId,
    FetchTarget,
    ForexQuote,
    ForexRate,
    PriceProxy,
    PriceReference,
    ReferenceUnit,
    SourceQuote,
    UnitConfig,
    UseReference,
    UseUnit,
)
from pricing_oracle.domain.errors import (
    ConfigError,
    DomainError,
    ForexQuotaExceeded,
    MalformedProxy,
    NoSourcesAvailable,
    ProviderUnavailableError,
    ProxyChainUnsupported,
    ProxyError,
    ProxyTargetInvalid,
    SubmissionError,
)
from pricing_oracle.domain.currencies import currency_name

__all__ = [
    "AggregatedResult",
    "ConversionData",
    "ConversionTable",
    "EntityId",
    "FetchTarget",
    "ForexQuote",
    "ForexRate",
    "PriceProxy",
    "PriceReference",
    "ReferenceUnit",
    "SourceQuote",
    "UnitConfig",
    "UseReference",
    "UseUnit",
    "ConfigError",
    "DomainError",
    "ForexQuotaExceeded",
    "MalformedProxy",
    "NoSourcesAvailable",
    "ProviderUnavailableError",
    "ProxyChainUnsupported",
    "ProxyError",
    "ProxyTargetInvalid",
    "SubmissionError",
    "currency_name",
]
