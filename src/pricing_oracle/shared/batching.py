# src/pricing_oracle/shared/batching.py
"""
Batching - Request Pacing for Quota-Limited Providers

Forex providers allow only a handful of symbol lookups per time window.
This module splits a symbol list into fixed-size batches and describes
how long to pause between them.

Files that USE this module:
- pricing_oracle.application.forex_aggregator (BatchPolicy and iter_batches)
- pricing_oracle.config.loader (builds BatchPolicy from the forex section)

Files that this module USES:
- None (pure utility implementation)
"""
from dataclasses import dataclass
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_MAX_SYMBOLS_PER_RUN = 8


@dataclass(frozen=True)
class BatchPolicy:
    """Configuration for batched requests."""
    max_items: int = DEFAULT_MAX_SYMBOLS_PER_RUN
    delay_seconds: float = 0.0  # pause after every batch but the last

    def __post_init__(self):
        if self.max_items < 1:
            raise ValueError(f"max_items must be >= 1, got {self.max_items}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")


def iter_batches(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """
    Split items into consecutive batches of at most `size`, keeping order.
    
    Args:
        items: Items to split
        size: Maximum batch size (>= 1)
        
    Yields:
        Lists of items; only the last one may be shorter than `size`
    """
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
