"""Chart input models.

Generic point shapes that every category record is mapped into before
reduction and rendering.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import ConfigDict, Field, model_validator

from .base import ReportBaseModel

T = TypeVar("T")


class DistributionPoint(ReportBaseModel):
    """One labelled share of a distribution."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: float


class TimeSeriesPoint(ReportBaseModel):
    """One value of an ordered series; ``label`` is the axis text."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: float


class ReductionResult(ReportBaseModel, Generic[T]):
    """Bounded view of a dataset.

    ``len(data) == min(original_count, cap)`` for top-N reduction and
    ``truncated == (original_count > cap)`` for both policies.
    """

    data: list[T]
    truncated: bool = False
    original_count: int = Field(ge=0)

    @property
    def displayed_count(self) -> int:
        return len(self.data)


class ChartKind(str, Enum):
    """Supported vector chart types."""

    PIE = "pie"
    LINE = "line"


DEFAULT_DIMENSIONS: dict[ChartKind, tuple[int, int]] = {
    ChartKind.PIE: (400, 400),
    ChartKind.LINE: (600, 300),
}


class ChartSpec(ReportBaseModel):
    """Everything the renderer needs to draw one chart."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    kind: ChartKind
    points: tuple[DistributionPoint | TimeSeriesPoint, ...] = ()
    title: str = ""
    palette: tuple[str, ...] | None = None
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @model_validator(mode="before")
    @classmethod
    def fill_dimensions(cls, data: Any) -> Any:
        """Missing or null dimensions take the per-kind default size."""
        if isinstance(data, dict) and "kind" in data:
            default_width, default_height = DEFAULT_DIMENSIONS[ChartKind(data["kind"])]
            data = dict(data)
            if data.get("width") is None:
                data["width"] = default_width
            if data.get("height") is None:
                data["height"] = default_height
        return data
