# src/pricing_oracle/adapters/formatting/formatter.py
"""
Output Formatter - Operator Tables and the ConversionTable JSON Artifact

This module handles all presentation: the plain-text table an operator
reads after a run, and the JSON shape of the ConversionTable that the
ledger receives (and that --dry-run prints).

Files that USE this module:
- pricing_oracle.app (prints tables and JSON)
- pricing_oracle.adapters.ledger.client (table_to_dict for the submit payload)
- tests.test_formatter (unit tests)

Files that this module USES:
- pricing_oracle.domain.models (AggregatedResult, ConversionTable, ForexRate)
"""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from pricing_oracle.domain.models import AggregatedResult, ConversionTable, ForexRate

MISSING = "—"


def _fmt_decimal(value: Decimal) -> str:
    """Plain (never scientific) decimal string."""
    return format(value, "f")


def _fmt_change(net_change: str) -> str:
    if not net_change:
        return MISSING
    sign = "" if net_change.startswith("-") else "+"
    return f"{sign}{net_change}%"


def table_to_dict(table: ConversionTable) -> dict[str, Any]:
    """
    Convert a ConversionTable to its JSON-serializable shape.

    Decimal values become strings and `data` keys become string-encoded
    unit indices in ascending numeric order. `sources` keeps query order.

    Args:
        table: ConversionTable to convert

    Returns:
        Dictionary ready for json.dumps
    """
    return {
        "reference_unit": {
            "symbol": table.reference_unit.symbol,
            "name": table.reference_unit.name,
        },
        "data": {
            str(index): {
                "current_price": _fmt_decimal(row.current_price),
                "volume": row.volume,
                "net_change": row.net_change,
                "sources": list(row.sources),
                "contract": row.contract,
            }
            for index, row in sorted(table.data.items())
        },
        "forex_rates": [
            {"symbol": r.symbol, "name": r.name, "rate": _fmt_decimal(r.rate)}
            for r in table.forex_rates
        ],
        "additional_data": None if table.additional_data is None else list(table.additional_data),
        "global_definition": table.global_definition,
    }


def table_to_json(table: ConversionTable, indent: Optional[int] = 2) -> str:
    return json.dumps(table_to_dict(table), indent=indent, ensure_ascii=False)


def format_results_table(
    results: Iterable[AggregatedResult],
    names: Optional[Mapping[Any, str]] = None,
) -> str:
    """
    Format aggregated results as a fixed-width operator table.

    Invalid results are listed too (Valid = NO) so the operator can see
    what the ConversionTable will leave out.

    Args:
        results: Aggregated results, direct and proxied
        names: Optional entity_id -> name mapping for the Name column

    Returns:
        Multi-line string with a header, a rule and one line per result
    """
    names = names or {}
    header = (
        f"{'Index':<8} {'Name':<12} {'Price (USD)':<16} {'Volume 24h':<14} "
        f"{'Change 24h%':<14} {'Valid':<8} Sources"
    )
    lines = [header, "-" * 90]
    for r in results:
        price = f"{r.price:.8f}"
        lines.append(
            f"{str(r.entity_id):<8} {names.get(r.entity_id, ''):<12} {price:<16} "
            f"{r.volume or MISSING:<14} {_fmt_change(r.net_change):<14} "
            f"{'yes' if r.valid else 'NO':<8} {', '.join(r.contributing_sources)}"
        )
    return "\n".join(lines)


def format_forex_table(rates: Iterable[ForexRate]) -> str:
    """
    Format forex rates as "SYMBOL  name  rate per USD" lines.

    Returns:
        Multi-line string, or a single "no forex rates" line when empty
    """
    rates = list(rates)
    if not rates:
        return "No forex rates resolved"
    lines = [f"{'Symbol':<8} {'Name':<24} Per 1 USD", "-" * 50]
    for r in rates:
        lines.append(f"{r.symbol:<8} {r.name:<24} {_fmt_decimal(r.rate)}")
    return "\n".join(lines)
