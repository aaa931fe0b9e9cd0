# src/pricing_oracle/application/table_builder.py
"""
ConversionTable Builder - Final Table Assembly

Turns aggregated (direct and proxied) unit results plus forex rates into
the ConversionTable. Only units with a valid result become rows; anything
else is left out silently from the caller's point of view and explained
in the log.

Files that USE this module:
- pricing_oracle.application.pricing_service (build_conversion_table)
- tests.test_table_builder (unit tests)

Files that this module USES:
- pricing_oracle.domain.models (AggregatedResult, ConversionData, ConversionTable, ...)
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from pricing_oracle.domain.models import (
    AggregatedResult,
    ConversionData,
    ConversionTable,
    ForexRate,
    ReferenceUnit,
    UnitConfig,
)

log = logging.getLogger(__name__)

# Zeroed 36-byte ledger identifier, hex encoded, used when only previewing
PREVIEW_GLOBAL_DEFINITION = "00" * 36


def build_conversion_table(
    results: Mapping[int, AggregatedResult],
    units: Iterable[UnitConfig],
    forex_rates: Sequence[ForexRate] = (),
    global_definition: Optional[str] = None,
) -> ConversionTable:
    """
    Assemble the ConversionTable.

    Args:
        results: unit_index -> AggregatedResult (direct and proxy-resolved)
        units: Configured units; supplies contract metadata and the row set
        forex_rates: ForexAggregator output, copied in order
        global_definition: Ledger reference; None means preview mode

    Returns:
        ConversionTable whose data holds only valid units
    """
    data: dict[int, ConversionData] = {}
    for unit in units:
        result = results.get(unit.unit_index)
        if result is None:
            log.debug("unit %d (%s) has no aggregated result - omitting from ConversionTable",
                      unit.unit_index, unit.name)
            continue
        if not result.valid:
            log.warning("unit %d (%s) is invalid - omitting from ConversionTable", unit.unit_index, unit.name)
            continue
        data[unit.unit_index] = ConversionData(
            current_price=result.price,
            volume=result.volume,
            net_change=result.net_change,
            sources=tuple(result.contributing_sources),
            contract=unit.contract,
        )

    if global_definition is None:
        global_definition = PREVIEW_GLOBAL_DEFINITION

    log.info("ConversionTable built: %d unit(s), %d forex rate(s)", len(data), len(forex_rates))
    return ConversionTable(
        reference_unit=ReferenceUnit(symbol="USD", name="US Dollar"),
        data=data,
        forex_rates=tuple(forex_rates),
        additional_data=None,
        global_definition=global_definition,
    )
