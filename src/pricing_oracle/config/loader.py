# src/pricing_oracle/config/loader.py
"""
Run Configuration Loader - YAML Units, References and Forex Settings

Reads the YAML run configuration, validates its shape with Pydantic and
its cross-references (unique indices and ids, well-formed proxies that
point at something that exists) before any provider is contacted.
Structural problems raise ConfigError and stop the run.

Files that USE this module:
- pricing_oracle.app (load_config for the --config file)
- tests.test_config_loader (unit tests)

Files that this module USES:
- pricing_oracle.domain.models (UnitConfig, PriceReference, UseUnit, UseReference)
- pricing_oracle.domain.errors (ConfigError)
- pricing_oracle.shared.batching (BatchPolicy)
- pricing_oracle.shared.validators (symbol and contract validation)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pricing_oracle.domain.errors import ConfigError
from pricing_oracle.domain.models import PriceReference, UnitConfig, UseReference, UseUnit
from pricing_oracle.shared.batching import DEFAULT_MAX_SYMBOLS_PER_RUN, BatchPolicy
from pricing_oracle.shared.validators import validate_contract_address, validate_currency_symbol

log = logging.getLogger(__name__)


class PriceProxyModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    use_unit: Optional[int] = Field(default=None, ge=0)
    use_reference: Optional[str] = None


class _TokenModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    chain: str
    contract: str
    decimals: Optional[int] = Field(default=None, ge=0, le=255)

    @field_validator("chain")
    @classmethod
    def normalize_chain(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("contract")
    @classmethod
    def validate_contract(cls, v: str) -> str:
        v = v.strip()
        if not validate_contract_address(v):
            raise ValueError(f"invalid contract address {v!r}")
        return v


class PriceReferenceModel(_TokenModel):
    id: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("price reference id must not be empty")
        return v


class UnitModel(_TokenModel):
    unit_index: int = Field(ge=0)
    price_proxy: Optional[PriceProxyModel] = None


class ForexModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbols: list[str] = Field(default_factory=list)
    max_symbols_per_run: int = Field(default=DEFAULT_MAX_SYMBOLS_PER_RUN, ge=1)
    delay_between_runs_seconds: float = Field(default=0.0, ge=0)
    use_twelve_data: bool = True
    use_coinapi: bool = True

    @field_validator("symbols")
    @classmethod
    def validate_symbols(cls, v: list[str]) -> list[str]:
        symbols = []
        for raw in v:
            symbol = str(raw).strip().upper()
            if not validate_currency_symbol(symbol):
                raise ValueError(f"invalid forex symbol {raw!r}")
            if symbol in symbols:
                raise ValueError(f"duplicate forex symbol {symbol!r}")
            symbols.append(symbol)
        return symbols


class ConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    price_references: list[PriceReferenceModel] = Field(default_factory=list)
    units: list[UnitModel]
    forex: ForexModel = Field(default_factory=ForexModel)


@dataclass(frozen=True)
class ForexConfig:
    symbols: tuple[str, ...] = ()
    batch_policy: BatchPolicy = field(default_factory=BatchPolicy)
    use_twelve_data: bool = True
    use_coinapi: bool = True


@dataclass(frozen=True)
class RunConfig:
    """Validated run configuration."""
    units: tuple[UnitConfig, ...]
    price_references: tuple[PriceReference, ...] = ()
    forex: ForexConfig = field(default_factory=ForexConfig)

    def real_units(self) -> list[UnitConfig]:
        """Units that are fetched from price sources directly."""
        return [u for u in self.units if not u.is_proxy]

    def proxy_units(self) -> list[UnitConfig]:
        """Units whose price is borrowed from another unit or reference."""
        return [u for u in self.units if u.is_proxy]


def _validate_references(models: list[PriceReferenceModel]) -> None:
    seen: dict[str, str] = {}
    for ref in models:
        if ref.id in seen:
            raise ConfigError(
                f"duplicate price_reference id '{ref.id}': '{seen[ref.id]}' and '{ref.name}'"
            )
        seen[ref.id] = ref.name


def _build_proxy(unit: UnitModel, unit_indices: set[int], reference_ids: set[str]) -> Union[UseUnit, UseReference, None]:
    proxy = unit.price_proxy
    if proxy is None:
        return None

    has_unit = proxy.use_unit is not None
    has_ref = proxy.use_reference is not None
    if has_unit == has_ref:
        raise ConfigError(
            f"unit '{unit.name}' price_proxy must have exactly one of use_unit or use_reference"
        )

    if has_unit:
        if proxy.use_unit == unit.unit_index:
            raise ConfigError(f"unit '{unit.name}' has price_proxy pointing to itself")
        if proxy.use_unit not in unit_indices:
            raise ConfigError(
                f"unit '{unit.name}' has price_proxy.use_unit {proxy.use_unit} which does not exist in units"
            )
        return UseUnit(proxy.use_unit)

    if proxy.use_reference not in reference_ids:
        raise ConfigError(
            f"unit '{unit.name}' has price_proxy.use_reference '{proxy.use_reference}' "
            "which does not exist in price_references"
        )
    return UseReference(proxy.use_reference)


def parse_config(data: Any) -> RunConfig:
    """
    Validate an already-parsed YAML document and build a RunConfig.

    Args:
        data: Mapping produced by yaml.safe_load

    Returns:
        RunConfig with domain UnitConfig / PriceReference objects

    Raises:
        ConfigError: If the document is malformed or inconsistent
    """
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping with a 'units' list")
    try:
        model = ConfigModel.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e

    _validate_references(model.price_references)

    seen: dict[int, str] = {}
    for unit in model.units:
        if unit.unit_index in seen:
            raise ConfigError(
                f"duplicate unit_index {unit.unit_index}: '{seen[unit.unit_index]}' and '{unit.name}'"
            )
        seen[unit.unit_index] = unit.name

    unit_indices = set(seen)
    reference_ids = {r.id for r in model.price_references}

    units = tuple(
        UnitConfig(
            unit_index=u.unit_index,
            name=u.name,
            chain=u.chain,
            contract=u.contract,
            decimals=u.decimals,
            price_proxy=_build_proxy(u, unit_indices, reference_ids),
        )
        for u in model.units
    )
    references = tuple(
        PriceReference(id=r.id, name=r.name, chain=r.chain, contract=r.contract, decimals=r.decimals)
        for r in model.price_references
    )
    forex = ForexConfig(
        symbols=tuple(model.forex.symbols),
        batch_policy=BatchPolicy(
            max_items=model.forex.max_symbols_per_run,
            delay_seconds=model.forex.delay_between_runs_seconds,
        ),
        use_twelve_data=model.forex.use_twelve_data,
        use_coinapi=model.forex.use_coinapi,
    )
    return RunConfig(units=units, price_references=references, forex=forex)


def load_config(path: Union[str, Path]) -> RunConfig:
    """
    Load and validate the YAML run configuration.

    Args:
        path: Path to the YAML file

    Returns:
        Validated RunConfig

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"reading {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"parsing {path}: {e}") from e

    config = parse_config(data)
    log.info(
        "Loaded %d units (%d proxied), %d price reference(s) and %d forex symbol(s) from %s",
        len(config.units),
        len(config.proxy_units()),
        len(config.price_references),
        len(config.forex.symbols),
        path,
    )
    return config
