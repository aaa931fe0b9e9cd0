"""
Ledger Adapter - ConversionTable submission client.
"""

from pricing_oracle.adapters.ledger.client import LedgerClient, LedgerGatewayClient

__all__ = ["LedgerClient", "LedgerGatewayClient"]
