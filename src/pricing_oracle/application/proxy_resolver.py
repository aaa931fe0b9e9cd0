# src/pricing_oracle/application/proxy_resolver.py
"""
Proxy Resolver - Units That Borrow Another Entity's Price

A proxy unit is never fetched; it copies the aggregated result of another
unit (UseUnit) or of a price reference (UseReference) and re-keys it under
its own unit_index. Resolution is a single pass over results that already
exist, so proxy units may only target directly fetched entities.

A proxy whose target is missing or invalid fails instead of inheriting
stale data. Failures are collected per unit, logged, and never abort the
remaining units.

Files that USE this module:
- pricing_oracle.application.pricing_service (resolve_proxies)
- tests.test_proxy_resolver (unit tests)

Files that this module USES:
- pricing_oracle.domain.models (UnitConfig, AggregatedResult, UseUnit, UseReference)
- pricing_oracle.domain.errors (ProxyError and subclasses)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional

from pricing_oracle.domain.errors import (
    MalformedProxy,
    ProxyChainUnsupported,
    ProxyError,
    ProxyTargetInvalid,
)
from pricing_oracle.domain.models import AggregatedResult, UnitConfig, UseReference, UseUnit

log = logging.getLogger(__name__)


@dataclass
class ProxyResolution:
    """Outcome of one resolution pass."""
    resolved: dict[int, AggregatedResult] = field(default_factory=dict)
    failures: dict[int, ProxyError] = field(default_factory=dict)


def _copy_from(unit: UnitConfig, target: Optional[AggregatedResult], label: str) -> AggregatedResult:
    if target is None:
        raise ProxyTargetInvalid(unit.unit_index, f"proxy {label} not found or not fetched")
    if not target.valid:
        raise ProxyTargetInvalid(unit.unit_index, f"proxy {label} failed validation")
    return replace(target, entity_id=unit.unit_index)


def resolve_proxy(
    unit: UnitConfig,
    units_by_index: Mapping[int, UnitConfig],
    unit_results: Mapping[int, AggregatedResult],
    reference_results: Mapping[str, AggregatedResult],
) -> AggregatedResult:
    """
    Resolve a single proxy unit.

    Args:
        unit: Unit carrying a price_proxy
        units_by_index: All configured units, to detect proxy chains
        unit_results: Aggregated results of directly fetched units
        reference_results: Aggregated results of price references

    Returns:
        The target's result re-keyed to unit.unit_index

    Raises:
        ProxyChainUnsupported: Target unit is itself a proxy
        ProxyTargetInvalid: Target is missing or invalid
        MalformedProxy: price_proxy is neither UseUnit nor UseReference
    """
    proxy = unit.price_proxy

    if isinstance(proxy, UseUnit):
        target_unit = units_by_index.get(proxy.unit_index)
        if target_unit is not None and target_unit.is_proxy:
            raise ProxyChainUnsupported(
                unit.unit_index, f"proxy target unit {proxy.unit_index} is itself a proxy"
            )
        return _copy_from(unit, unit_results.get(proxy.unit_index), f"unit {proxy.unit_index}")

    if isinstance(proxy, UseReference):
        return _copy_from(
            unit, reference_results.get(proxy.reference_id), f"reference '{proxy.reference_id}'"
        )

    raise MalformedProxy(unit.unit_index, f"price_proxy must be use_unit or use_reference, got {proxy!r}")


def resolve_proxies(
    units: Iterable[UnitConfig],
    unit_results: Mapping[int, AggregatedResult],
    reference_results: Mapping[str, AggregatedResult],
    only: Optional[Iterable[int]] = None,
) -> ProxyResolution:
    """
    Resolve every proxy unit in one pass.

    Args:
        units: All configured units (proxy and non-proxy)
        unit_results: Aggregated results of directly fetched units
        reference_results: Aggregated results of price references
        only: Optional unit indices to restrict resolution to

    Returns:
        ProxyResolution with resolved results and per-unit failures
    """
    units = list(units)
    units_by_index = {u.unit_index: u for u in units}
    wanted = set(only) if only is not None else None
    resolution = ProxyResolution()

    for unit in units:
        if not unit.is_proxy or (wanted is not None and unit.unit_index not in wanted):
            continue
        try:
            result = resolve_proxy(unit, units_by_index, unit_results, reference_results)
        except ProxyError as e:
            log.warning("unit %d (%s) excluded: %s", unit.unit_index, unit.name, e)
            resolution.failures[unit.unit_index] = e
            continue

        log.info(
            "Proxying unit %d (%s) - price=%.8f sources=%s",
            unit.unit_index, unit.name, result.price, ", ".join(result.contributing_sources),
        )
        resolution.resolved[unit.unit_index] = result

    return resolution
