# src/pricing_oracle/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Tracked units, price references and their proxy definitions
- Per-source price and forex quotes
- Aggregated (reconciled) results
- The ConversionTable handed to the ledger

Files that USE this module:
- pricing_oracle.application.* (all services use domain models)
- pricing_oracle.adapters.* (adapters create and use domain models)
- pricing_oracle.config.loader (builds UnitConfig / PriceReference)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import dataclass, field  # Decorators for creating data classes
from decimal import Decimal  # Exact decimal arithmetic for prices and rates
from typing import Mapping, Optional, Union  # Type hints

EntityId = Union[int, str]  # unit_index for units, id for price references


@dataclass(frozen=True)
class UseUnit:
    """Proxy arm: take the price of another unit."""
    unit_index: int


@dataclass(frozen=True)
class UseReference:
    """Proxy arm: take the price of a price reference."""
    reference_id: str


PriceProxy = Union[UseUnit, UseReference]


@dataclass(frozen=True)
class UnitConfig:
    """
    Tracked entity that appears as a row of the ConversionTable.

    Attributes:
        unit_index: Unique, non-negative index assigned in configuration
        name: Human readable name (e.g., "USDC")
        chain: Chain the token lives on (e.g., "ethereum")
        contract: Token contract address
        decimals: Optional token decimals (informational)
        price_proxy: Optional proxy definition; the unit is not fetched itself
    """
    unit_index: int
    name: str
    chain: str
    contract: str
    decimals: Optional[int] = None
    price_proxy: Optional[PriceProxy] = None

    @property
    def is_proxy(self) -> bool:
        return self.price_proxy is not None


@dataclass(frozen=True)
class PriceReference:
    """
    Entity fetched for pricing only; never emitted as a table row.

    Attributes:
        id: Unique string key that proxies refer to
        name: Human readable name
        chain: Chain the token lives on
        contract: Token contract address
        decimals: Optional token decimals (informational)
    """
    id: str
    name: str
    chain: str
    contract: str
    decimals: Optional[int] = None


@dataclass(frozen=True)
class FetchTarget:
    """What a price source needs to look a token up."""
    entity_id: EntityId
    name: str
    chain: str
    contract: str

    @classmethod
    def for_unit(cls, unit: UnitConfig) -> "FetchTarget":
        return cls(unit.unit_index, unit.name, unit.chain, unit.contract)

    @classmethod
    def for_reference(cls, ref: PriceReference) -> "FetchTarget":
        return cls(ref.id, ref.name, ref.chain, ref.contract)


@dataclass(frozen=True)
class SourceQuote:
    """
    One provider's observation for one entity.

    Attributes:
        entity_id: Unit index or price reference id
        price: USD price (> 0)
        source_name: Name of the provider that produced the quote
        volume: Optional 24h volume in USD
        net_change_pct: Optional 24h price change in percent
    """
    entity_id: EntityId
    price: Decimal
    source_name: str
    volume: Optional[Decimal] = None
    net_change_pct: Optional[Decimal] = None


@dataclass(frozen=True)
class AggregatedResult:
    """
    One entity's reconciled value.

    Attributes:
        entity_id: Unit index or price reference id
        price: Arithmetic mean of the contributing quotes
        contributing_sources: Source names in query order
        volume: Display string from the first quote supplying a volume
        net_change: Display string from the first quote supplying a change
        valid: False when two or more quotes disagree by more than 1%
    """
    entity_id: EntityId
    price: Decimal
    contributing_sources: tuple[str, ...]
    volume: str = ""
    net_change: str = ""
    valid: bool = True


@dataclass(frozen=True)
class ForexQuote:
    """One forex provider's observation: foreign units per 1 USD."""
    symbol: str
    rate: Decimal
    provider_name: str


@dataclass(frozen=True)
class ForexRate:
    """Reconciled forex rate: foreign units per 1 USD."""
    symbol: str
    name: str
    rate: Decimal


@dataclass(frozen=True)
class ReferenceUnit:
    symbol: str = "USD"
    name: str = "US Dollar"


@dataclass(frozen=True)
class ConversionData:
    """One valid unit's row in the ConversionTable."""
    current_price: Decimal
    volume: str
    net_change: str
    sources: tuple[str, ...]
    contract: Optional[str] = None


@dataclass(frozen=True)
class ConversionTable:
    """
    Final artifact submitted to (or previewed for) the ledger.

    Attributes:
        reference_unit: Always USD
        data: unit_index -> ConversionData, valid units only
        forex_rates: One ForexRate per resolved configured symbol, in order
        global_definition: Opaque ledger reference or zeroed placeholder
        additional_data: Always None
    """
    data: Mapping[int, ConversionData]
    forex_rates: tuple[ForexRate, ...]
    global_definition: str
    reference_unit: ReferenceUnit = field(default_factory=ReferenceUnit)
    additional_data: Optional[bytes] = None
