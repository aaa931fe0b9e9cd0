# src/pricing_oracle/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (price and forex APIs)
- Ledger (ConversionTable submission)
- Formatting (output)
"""

__all__ = []
