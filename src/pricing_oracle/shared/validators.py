# src/pricing_oracle/shared/validators.py
"""
Input Validation Utilities - Configuration and Data Validation

This module provides validation functions for API keys, forex symbols,
contract addresses and numeric provider payloads, so that bad settings
fail at load time and bad provider values are treated as "no quote".

Files that USE this module:
- pricing_oracle.config.settings (validate_api_key in Settings field validators)
- pricing_oracle.config.loader (validate_currency_symbol, validate_contract_address)
- pricing_oracle.adapters.providers.* (parse_positive_decimal, parse_optional_decimal)

Files that this module USES:
- None (pure utility functions)
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def validate_api_key(api_key: str, min_length: int = 10) -> bool:
    """
    Validate API key format.
    
    Args:
        api_key: API key to validate
        min_length: Minimum length requirement
        
    Returns:
        True if valid, False otherwise
    """
    if not api_key:
        return False
    
    return len(api_key) >= min_length and not api_key.isspace()


def validate_currency_symbol(symbol: str) -> bool:
    """
    Validate an ISO 4217 style currency code (three letters).
    
    Args:
        symbol: Currency symbol to validate (case-insensitive)
        
    Returns:
        True if valid, False otherwise
    """
    if not symbol:
        return False
    return bool(re.match(r'^[A-Za-z]{3}$', symbol))


def validate_contract_address(contract: str) -> bool:
    """
    Validate a token contract address.

    EVM chains use 0x-prefixed 40 hex digit addresses; other chains
    (e.g. base58 on Solana) are accepted when they are non-empty and
    free of whitespace.
    
    Args:
        contract: Contract address to validate
        
    Returns:
        True if valid, False otherwise
    """
    if not contract or re.search(r'\s', contract):
        return False
    if contract.lower().startswith('0x'):
        return bool(re.match(r'^0[xX][0-9a-fA-F]{40}$', contract))
    return True


def parse_optional_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a JSON number or numeric string to Decimal.
    
    Floats go through str() so that 1.1 becomes Decimal('1.1') rather
    than its binary expansion.
    
    Args:
        value: Raw value from a provider payload (None, str, int, float)
        
    Returns:
        Finite Decimal, or None if missing or not numeric
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_positive_decimal(value: Any) -> Optional[Decimal]:
    """
    Same as parse_optional_decimal, but only accepts values > 0.
    """
    result = parse_optional_decimal(value)
    if result is None or result <= 0:
        return None
    return result
