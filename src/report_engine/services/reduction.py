"""Dataset reduction before chart rendering.

Two deterministic policies keep oversized inputs bounded:

- top-N by value for distributions (stable for equal values)
- even-interval sampling for time series
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from report_engine.models import DistributionPoint, ReductionResult, TimeSeriesPoint

MAX_DISTRIBUTION_ITEMS = 50
MAX_TIMESERIES_POINTS = 100


def top_n_by_value(
    points: Sequence[DistributionPoint],
    cap: int = MAX_DISTRIBUTION_ITEMS,
) -> ReductionResult[DistributionPoint]:
    """Keep the ``cap`` largest items, largest first.

    Inputs at or below the cap are returned unchanged (original order).
    Equal values keep their original relative order.
    """
    data = list(points)
    if len(data) <= cap:
        return ReductionResult[DistributionPoint](
            data=data, truncated=False, original_count=len(data)
        )

    ranked = sorted(data, key=lambda point: point.value, reverse=True)
    return ReductionResult[DistributionPoint](
        data=ranked[:cap], truncated=True, original_count=len(data)
    )


def sample_evenly(
    points: Sequence[TimeSeriesPoint],
    cap: int = MAX_TIMESERIES_POINTS,
) -> ReductionResult[TimeSeriesPoint]:
    """Keep every ``ceil(n / cap)``-th point starting with the first.

    The result has at most ``cap`` points in original order. It is not
    always exactly ``cap`` long and may not include the final point.
    """
    data = list(points)
    if len(data) <= cap:
        return ReductionResult[TimeSeriesPoint](
            data=data, truncated=False, original_count=len(data)
        )

    step = math.ceil(len(data) / cap)
    return ReductionResult[TimeSeriesPoint](
        data=data[::step], truncated=True, original_count=len(data)
    )


def truncation_note(result: ReductionResult) -> str | None:
    """Sentence describing how much of a dataset is shown, if truncated."""
    if not result.truncated:
        return None
    return (
        f"Showing top {result.displayed_count} of {result.original_count} items. "
        "Data has been truncated for optimal PDF performance."
    )
