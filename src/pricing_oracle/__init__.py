"""
Pricing Oracle - Validated Conversion Tables from Multiple Price Sources

Fetches token prices and forex rates from several independent providers,
cross-checks them, resolves proxy units and builds the ConversionTable
consumed by the ledger.
"""

__version__ = "0.1.0"
