"""Human-readable value formatting.

Fixed unit ladders used by metric grids, chart legends and axis labels:

- count: plain integer below 1000, then K / M / B (powers of 1000, one decimal)
- bytes: B below 1024, then KB / MB / GB / TB (powers of 1024, two decimals)
- throughput: Mbps input, shown as Gbps from 1000 upward (two decimals)
- percentage: ratio in [0, 1] shown with two decimals
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from report_engine.observability import get_logger

logger = get_logger(__name__)


class UnitKind(str, Enum):
    """Unit ladder applied by the formatter."""

    COUNT = "count"
    BYTES = "bytes"
    THROUGHPUT = "throughput"
    PERCENTAGE = "percentage"


_COUNT_LADDER = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)

_BYTES_LADDER = (
    (1024**4, "TB"),
    (1024**3, "GB"),
    (1024**2, "MB"),
    (1024, "KB"),
)


def to_fixed(value: float, digits: int) -> str:
    """Fixed-point rendering with ties rounded away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    result = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    if result == 0:
        result = abs(result)
    return f"{result:.{digits}f}"


def format_count(value: float) -> str:
    for threshold, suffix in _COUNT_LADDER:
        if value >= threshold:
            return to_fixed(value / threshold, 1) + suffix
    return to_fixed(value, 0)


def format_bytes(value: float) -> str:
    for threshold, suffix in _BYTES_LADDER:
        if value >= threshold:
            return f"{to_fixed(value / threshold, 2)} {suffix}"
    return f"{to_fixed(value, 0)} B"


def format_throughput(value: float) -> str:
    if value >= 1000:
        return f"{to_fixed(value / 1000, 2)} Gbps"
    return f"{to_fixed(value, 2)} Mbps"


def format_percentage(ratio: float) -> str:
    return to_fixed(ratio * 100, 2) + "%"


_FORMATTERS = {
    UnitKind.COUNT: format_count,
    UnitKind.BYTES: format_bytes,
    UnitKind.THROUGHPUT: format_throughput,
    UnitKind.PERCENTAGE: format_percentage,
}


def format_value(value: float, kind: UnitKind | str = UnitKind.COUNT) -> str:
    """Format a value without caching."""
    return _FORMATTERS[UnitKind(kind)](value)


class FormatCache:
    """Memoizes formatted strings keyed by (kind, value).

    Owned by a single document build and cleared when that build starts.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[UnitKind, float], str] = {}
        self.hits = 0
        self.misses = 0

    def format(self, value: float, kind: UnitKind | str = UnitKind.COUNT) -> str:
        key = (UnitKind(kind), value)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = format_value(value, key[0])
        self._entries[key] = result
        return result

    def count(self, value: float) -> str:
        return self.format(value, UnitKind.COUNT)

    def bytes(self, value: float) -> str:
        return self.format(value, UnitKind.BYTES)

    def throughput(self, value: float) -> str:
        return self.format(value, UnitKind.THROUGHPUT)

    def percentage(self, ratio: float) -> str:
        return self.format(ratio, UnitKind.PERCENTAGE)

    def clear(self) -> None:
        if self._entries:
            logger.debug(
                "Format cache cleared",
                entries=len(self._entries),
                hits=self.hits,
                misses=self.misses,
            )
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
