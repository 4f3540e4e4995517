"""Report export models.

Request, theme, per-export data bundle and the typed outcome of an export.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from .base import MetricRecord, ReportBaseModel
from .metrics import (
    BotAnalysisData,
    ContentTypeData,
    FirewallAnalysisData,
    GeoData,
    ProtocolData,
    SecurityMetrics,
    StatusCodeData,
    TLSData,
    TrafficMetrics,
)

# Progress value used for advisory notifications outside the 0-100 range
PROGRESS_WARNING = -1

ProgressCallback = Callable[[float, str], None]


class ExportCategory(str, Enum):
    """Which analytics categories an export covers."""

    FULL = "full"
    TRAFFIC = "traffic"
    SECURITY = "security"
    STATUS_CODES = "status-codes"
    GEO = "geo"
    PROTOCOL = "protocol"
    TLS = "tls"
    CONTENT_TYPE = "content-type"
    BOT = "bot"
    FIREWALL = "firewall"

    @property
    def field_name(self) -> str:
        """Attribute name of this category on AnalyticsBundle."""
        return self.value.replace("-", "_")

    @property
    def display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self]


# Fixed section and aggregation order
CATEGORY_ORDER: tuple[ExportCategory, ...] = (
    ExportCategory.TRAFFIC,
    ExportCategory.SECURITY,
    ExportCategory.STATUS_CODES,
    ExportCategory.GEO,
    ExportCategory.PROTOCOL,
    ExportCategory.TLS,
    ExportCategory.CONTENT_TYPE,
    ExportCategory.BOT,
    ExportCategory.FIREWALL,
)

CATEGORY_DISPLAY_NAMES: dict[ExportCategory, str] = {
    ExportCategory.FULL: "all analytics",
    ExportCategory.TRAFFIC: "traffic metrics",
    ExportCategory.SECURITY: "security metrics",
    ExportCategory.STATUS_CODES: "status codes",
    ExportCategory.GEO: "geographic distribution",
    ExportCategory.PROTOCOL: "protocol distribution",
    ExportCategory.TLS: "TLS distribution",
    ExportCategory.CONTENT_TYPE: "content type distribution",
    ExportCategory.BOT: "bot analysis",
    ExportCategory.FIREWALL: "firewall analysis",
}

CATEGORY_RECORD_TYPES: dict[ExportCategory, type[MetricRecord]] = {
    ExportCategory.TRAFFIC: TrafficMetrics,
    ExportCategory.SECURITY: SecurityMetrics,
    ExportCategory.STATUS_CODES: StatusCodeData,
    ExportCategory.GEO: GeoData,
    ExportCategory.PROTOCOL: ProtocolData,
    ExportCategory.TLS: TLSData,
    ExportCategory.CONTENT_TYPE: ContentTypeData,
    ExportCategory.BOT: BotAnalysisData,
    ExportCategory.FIREWALL: FirewallAnalysisData,
}


def categories_for(category: ExportCategory | str) -> tuple[ExportCategory, ...]:
    """Categories fetched for an export selector, in fixed order."""
    category = ExportCategory(category)
    if category == ExportCategory.FULL:
        return CATEGORY_ORDER
    return (category,)


DEFAULT_CHART_COLORS = [
    "#2280b0",
    "#f6821f",
    "#2ecc71",
    "#e74c3c",
    "#9b59b6",
    "#3498db",
]


class ThemeColors(ReportBaseModel):
    """Named colours used by the document styles and charts."""

    primary: str = "#f6821f"
    background: str = "#ffffff"
    text: str = "#333333"
    border: str = "#e0e0e0"
    success: str = "#2ecc71"
    warning: str = "#f39c12"
    error: str = "#e74c3c"
    chart_colors: list[str] = Field(default_factory=lambda: list(DEFAULT_CHART_COLORS))
    chart_background: str = "#ffffff"
    chart_grid: str = "#e3e3e3"
    chart_label: str = "#333333"

    @field_validator("chart_colors")
    @classmethod
    def validate_chart_colors(cls, v: list[str]) -> list[str]:
        """An empty palette falls back to the default palette."""
        return v or list(DEFAULT_CHART_COLORS)


class ReportRequest(ReportBaseModel):
    """Request to export a zone report."""

    zone_id: str
    zone_name: str
    account_tag: str | None = None
    start_date: datetime
    end_date: datetime
    category: ExportCategory = ExportCategory.FULL
    theme: ThemeColors | None = None
    on_progress: ProgressCallback | None = Field(default=None, exclude=True)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are interpreted as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class AnalyticsBundle(ReportBaseModel):
    """Per-export container with one optional record per category."""

    traffic: TrafficMetrics | None = None
    security: SecurityMetrics | None = None
    status_codes: StatusCodeData | None = None
    geo: GeoData | None = None
    protocol: ProtocolData | None = None
    tls: TLSData | None = None
    content_type: ContentTypeData | None = None
    bot: BotAnalysisData | None = None
    firewall: FirewallAnalysisData | None = None

    def get(self, category: ExportCategory | str) -> MetricRecord | None:
        return getattr(self, ExportCategory(category).field_name)

    def set(self, category: ExportCategory | str, record: MetricRecord | None) -> None:
        setattr(self, ExportCategory(category).field_name, record)

    def has(self, category: ExportCategory | str) -> bool:
        """Whether a category is present and non-empty."""
        record = self.get(category)
        return record is not None and record.has_data

    def populated(self) -> list[ExportCategory]:
        """Present, non-empty categories in section order."""
        return [c for c in CATEGORY_ORDER if self.has(c)]


class ExportErrorCode(str, Enum):
    """Failure taxonomy for report exports."""

    STORAGE_FULL = "STORAGE_FULL"
    NETWORK_ERROR = "NETWORK_ERROR"
    GENERATION_FAILED = "GENERATION_FAILED"
    INVALID_DATA = "INVALID_DATA"
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"


ERROR_MESSAGES: dict[ExportErrorCode, str] = {
    ExportErrorCode.INVALID_TIME_RANGE: (
        "Invalid time range: End date must be after start date "
        "and dates cannot be in the future"
    ),
    ExportErrorCode.STORAGE_FULL: (
        "Insufficient storage space. Please free up space and try again."
    ),
    ExportErrorCode.INVALID_DATA: (
        "Unable to export data. Some required information is missing."
    ),
    ExportErrorCode.NETWORK_ERROR: (
        "Unable to fetch analytics data. Please check your connection and try again."
    ),
    ExportErrorCode.GENERATION_FAILED: "Failed to generate PDF. Please try again.",
}


class ExportError(ReportBaseModel):
    """Structured export failure.

    ``details`` must already be free of credentials when constructed.
    """

    code: ExportErrorCode
    message: str
    details: Any | None = None

    @classmethod
    def from_code(cls, code: ExportErrorCode, details: Any | None = None) -> "ExportError":
        return cls(code=code, message=ERROR_MESSAGES[code], details=details)


class ExportOutcome(ReportBaseModel):
    """Result of one export run."""

    success: bool
    file_path: str | None = None
    file_name: str | None = None
    categories: list[ExportCategory] = Field(default_factory=list)
    error: ExportError | None = None

    @classmethod
    def failed(cls, code: ExportErrorCode, details: Any | None = None) -> "ExportOutcome":
        return cls(success=False, error=ExportError.from_code(code, details))
