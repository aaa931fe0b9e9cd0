"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Request batching
- Logging configuration
"""

from pricing_oracle.shared.validators import (
    parse_optional_decimal,
    parse_positive_decimal,
    validate_api_key,
    validate_contract_address,
    validate_currency_symbol,
)
from pricing_oracle.shared.batching import BatchPolicy, iter_batches

__all__ = [
    "validate_api_key",
    "validate_contract_address",
    "validate_currency_symbol",
    "parse_optional_decimal",
    "parse_positive_decimal",
    "BatchPolicy",
    "iter_batches",
]
