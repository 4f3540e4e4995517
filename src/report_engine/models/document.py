"""Document models.

A document is an ordered list of sections, each either a metric grid or a
rendered chart, framed by a header and a footer.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field

from .base import ReportBaseModel
from .reports import ThemeColors


class MetricItem(ReportBaseModel):
    """One labelled fact in a metric grid."""

    label: str
    value: str
    unit: str = ""


class MetricGridSection(ReportBaseModel):
    """Section made of labelled metric cards."""

    kind: Literal["grid"] = "grid"
    title: str
    metrics: list[MetricItem] = Field(min_length=1)


class ChartSection(ReportBaseModel):
    """Section holding one rendered chart."""

    kind: Literal["chart"] = "chart"
    title: str
    markup: str
    truncation_note: str | None = None


Section = Annotated[MetricGridSection | ChartSection, Field(discriminator="kind")]


class DocumentHeader(ReportBaseModel):
    title: str
    zone_id: str
    zone_name: str
    period: str
    generated_at: datetime


class Document(ReportBaseModel):
    """Assembled report ready for serialisation."""

    header: DocumentHeader
    sections: list[Section] = Field(default_factory=list)
    theme: ThemeColors = Field(default_factory=ThemeColors)

    @property
    def chart_sections(self) -> list[ChartSection]:
        return [s for s in self.sections if isinstance(s, ChartSection)]
