"""
Formatting Adapter - Output Formatting

This package handles operator-facing tables and the ConversionTable JSON.
"""

from pricing_oracle.adapters.formatting.formatter import (
    format_forex_table,
    format_results_table,
    table_to_dict,
    table_to_json,
)

__all__ = [
    "format_forex_table",
    "format_results_table",
    "table_to_dict",
    "table_to_json",
]
