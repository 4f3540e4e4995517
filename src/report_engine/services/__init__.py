"""Report generation services."""

from .charts import ChartCache, ChartRenderer, RenderContext, line_geometry, pie_geometry
from .document import DocumentAssembler, format_period
from .errors import classify_error, redact_secrets
from .export import SLOW_EXPORT_MESSAGE, ExportService
from .formatting import FormatCache, UnitKind, format_value
from .mapping import CategoryView, ChartSource, map_category
from .naming import generate_file_name, sanitize_file_name
from .reduction import (
    MAX_DISTRIBUTION_ITEMS,
    MAX_TIMESERIES_POINTS,
    sample_evenly,
    top_n_by_value,
    truncation_note,
)

__all__ = [
    "MAX_DISTRIBUTION_ITEMS",
    "MAX_TIMESERIES_POINTS",
    "SLOW_EXPORT_MESSAGE",
    "CategoryView",
    "ChartCache",
    "ChartRenderer",
    "ChartSource",
    "DocumentAssembler",
    "ExportService",
    "FormatCache",
    "RenderContext",
    "UnitKind",
    "classify_error",
    "format_period",
    "format_value",
    "generate_file_name",
    "line_geometry",
    "map_category",
    "pie_geometry",
    "redact_secrets",
    "sample_evenly",
    "sanitize_file_name",
    "top_n_by_value",
    "truncation_note",
]
