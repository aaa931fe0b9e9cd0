# tests/test_table_builder.py
"""
ConversionTable Builder Tests

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- pricing_oracle.application.table_builder (build_conversion_table)
- pricing_oracle.domain.models (AggregatedResult, ForexRate, UnitConfig)
"""
from decimal import Decimal

from pricing_oracle.application.table_builder import PREVIEW_GLOBAL_DEFINITION, build_conversion_table
from pricing_oracle.domain.models import AggregatedResult, ForexRate, UnitConfig, UseUnit


def unit(index, proxy=None):
    return UnitConfig(
        unit_index=index,
        name=f"unit{index}",
        chain="ethereum",
        contract="0x" + str(index) * 40,
        price_proxy=proxy,
    )


def result(entity_id, price, valid=True):
    return AggregatedResult(
        entity_id=entity_id,
        price=Decimal(price),
        contributing_sources=("geckoterminal",),
        volume="12.00",
        valid=valid,
    )


def test_only_valid_units_with_results_become_rows():
    units = [unit(0), unit(1), unit(2), unit(3, UseUnit(0))]
    results = {0: result(0, "1.5"), 1: result(1, "2", valid=False), 3: result(3, "1.5")}

    table = build_conversion_table(results, units, global_definition="gd-hash")

    assert set(table.data) == {0, 3}
    row = table.data[0]
    assert row.current_price == Decimal("1.5")
    assert row.volume == "12.00"
    assert row.net_change == ""
    assert row.sources == ("geckoterminal",)
    assert row.contract == "0x" + "0" * 40
    assert table.data[3].contract == "0x" + "3" * 40
    assert table.global_definition == "gd-hash"


def test_fixed_fields():
    table = build_conversion_table({}, [unit(0)])
    assert table.reference_unit.symbol == "USD"
    assert table.reference_unit.name == "US Dollar"
    assert table.additional_data is None
    assert table.data == {}


def test_preview_uses_zeroed_global_definition():
    table = build_conversion_table({0: result(0, "1")}, [unit(0)])
    assert table.global_definition == PREVIEW_GLOBAL_DEFINITION
    assert table.global_definition == "0" * 72


def test_forex_rates_copied_in_order():
    rates = [
        ForexRate(symbol="JPY", name="Japanese Yen", rate=Decimal("150")),
        ForexRate(symbol="EUR", name="Euro", rate=Decimal("0.92")),
    ]
    table = build_conversion_table({}, [], rates)
    assert [r.symbol for r in table.forex_rates] == ["JPY", "EUR"]
