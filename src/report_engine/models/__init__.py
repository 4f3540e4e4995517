"""Data models for the report engine.

All models follow these conventions:
- Timestamps: timezone-aware datetimes (UTC preferred)
- Field names: lowercase snake_case (records also accept camelCase)
- Enums: uppercase SNAKE_CASE members
"""

# Base
from .base import MetricRecord, ReportBaseModel

# Chart inputs
from .charts import (
    ChartKind,
    ChartSpec,
    DistributionPoint,
    ReductionResult,
    TimeSeriesPoint,
)

# Documents
from .document import (
    ChartSection,
    Document,
    DocumentHeader,
    MetricGridSection,
    MetricItem,
)

# Category records
from .metrics import (
    BotAnalysisData,
    BotScoreBucket,
    BotScoreRange,
    BotScoreSummary,
    CacheStatus,
    ContentTypeData,
    ContentTypeTraffic,
    CountryTraffic,
    FirewallAnalysisData,
    FirewallEventCounts,
    FirewallRule,
    GeoData,
    ProtocolData,
    SecurityEventTimePoint,
    SecurityMetrics,
    StatusCodeData,
    ThreatScoreSummary,
    TLSData,
    TrafficMetrics,
    TrafficTimePoint,
)

# Export request and outcome
from .reports import (
    CATEGORY_ORDER,
    CATEGORY_RECORD_TYPES,
    DEFAULT_CHART_COLORS,
    ERROR_MESSAGES,
    PROGRESS_WARNING,
    AnalyticsBundle,
    ExportCategory,
    ExportError,
    ExportErrorCode,
    ExportOutcome,
    ProgressCallback,
    ReportRequest,
    ThemeColors,
    categories_for,
)

__all__ = [
    # Base
    "MetricRecord",
    "ReportBaseModel",
    # Charts
    "ChartKind",
    "ChartSpec",
    "DistributionPoint",
    "ReductionResult",
    "TimeSeriesPoint",
    # Documents
    "ChartSection",
    "Document",
    "DocumentHeader",
    "MetricGridSection",
    "MetricItem",
    # Records
    "BotAnalysisData",
    "BotScoreBucket",
    "BotScoreRange",
    "BotScoreSummary",
    "CacheStatus",
    "ContentTypeData",
    "ContentTypeTraffic",
    "CountryTraffic",
    "FirewallAnalysisData",
    "FirewallEventCounts",
    "FirewallRule",
    "GeoData",
    "ProtocolData",
    "SecurityEventTimePoint",
    "SecurityMetrics",
    "StatusCodeData",
    "ThreatScoreSummary",
    "TLSData",
    "TrafficMetrics",
    "TrafficTimePoint",
    # Reports
    "CATEGORY_ORDER",
    "CATEGORY_RECORD_TYPES",
    "DEFAULT_CHART_COLORS",
    "ERROR_MESSAGES",
    "PROGRESS_WARNING",
    "AnalyticsBundle",
    "ExportCategory",
    "ExportError",
    "ExportErrorCode",
    "ExportOutcome",
    "ProgressCallback",
    "ReportRequest",
    "ThemeColors",
    "categories_for",
]
