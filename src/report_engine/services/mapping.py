"""Category record to generic view mapping.

One explicit function per category turns its record into metric-grid items
and chart sources made of generic points. Every function is total: any valid
record maps to a view, and empty lists simply produce no chart source.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from report_engine.models import (
    BotAnalysisData,
    ChartKind,
    ContentTypeData,
    DistributionPoint,
    ExportCategory,
    FirewallAnalysisData,
    GeoData,
    MetricItem,
    MetricRecord,
    ProtocolData,
    SecurityMetrics,
    StatusCodeData,
    TimeSeriesPoint,
    TLSData,
    TrafficMetrics,
)

from .formatting import FormatCache

BLOCK_ACTIONS = frozenset({"block", "drop"})
ALLOW_ACTIONS = frozenset({"allow", "skip", "bypass"})


class ChartSource(BaseModel):
    """Points for one chart before reduction."""

    title: str
    kind: ChartKind
    points: list[DistributionPoint | TimeSeriesPoint]


class CategoryView(BaseModel):
    """Grid and chart content for one category, in display order."""

    category: ExportCategory
    grid_title: str | None = None
    metrics: list[MetricItem] = Field(default_factory=list)
    charts: list[ChartSource] = Field(default_factory=list)


def series_label(timestamp: datetime) -> str:
    """Axis label for a time bucket, in UTC."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(UTC)
    return f"{timestamp:%m/%d %H:%M}"


def _distribution(title: str, pairs: list[tuple[str, float]]) -> list[ChartSource]:
    if not pairs:
        return []
    return [
        ChartSource(
            title=title,
            kind=ChartKind.PIE,
            points=[DistributionPoint(label=label, value=value) for label, value in pairs],
        )
    ]


def _series(title: str, pairs: list[tuple[datetime, float]]) -> list[ChartSource]:
    if not pairs:
        return []
    return [
        ChartSource(
            title=title,
            kind=ChartKind.LINE,
            points=[
                TimeSeriesPoint(label=series_label(ts), value=value) for ts, value in pairs
            ],
        )
    ]


def map_traffic(record: TrafficMetrics, fmt: FormatCache) -> CategoryView:
    return CategoryView(
        category=ExportCategory.TRAFFIC,
        grid_title="Traffic Metrics",
        metrics=[
            MetricItem(label="Total Requests", value=fmt.count(record.requests)),
            MetricItem(label="Data Transfer", value=fmt.bytes(record.bytes)),
            MetricItem(label="Bandwidth", value=fmt.throughput(record.bandwidth)),
            MetricItem(label="Page Views", value=fmt.count(record.page_views)),
            MetricItem(label="Unique Visits", value=fmt.count(record.visits)),
        ],
        charts=_series(
            "Requests Over Time",
            [(point.timestamp, point.requests) for point in record.time_series],
        ),
    )


def map_security(record: SecurityMetrics, fmt: FormatCache) -> CategoryView:
    events = record.firewall_events
    cache = record.cache_status
    hit_rate = cache.hit / ((cache.hit + cache.miss) or 1)
    return CategoryView(
        category=ExportCategory.SECURITY,
        grid_title="Security Metrics",
        metrics=[
            MetricItem(label="Total Firewall Events", value=fmt.count(events.total)),
            MetricItem(label="Blocked Requests", value=fmt.count(events.blocked)),
            MetricItem(label="Challenged Requests", value=fmt.count(events.challenged)),
            MetricItem(label="Cache Hit Rate", value=fmt.percentage(hit_rate)),
        ],
        charts=_series(
            "Security Events Over Time",
            [(point.timestamp, point.total) for point in record.time_series],
        ),
    )


def map_status_codes(record: StatusCodeData, fmt: FormatCache) -> CategoryView:
    if record.breakdown:
        pairs = [(code, count) for code, count in sorted(record.breakdown.items())]
    else:
        pairs = [
            ("2xx", record.status_2xx),
            ("3xx", record.status_3xx),
            ("4xx", record.status_4xx),
            ("5xx", record.status_5xx),
        ]
    return CategoryView(
        category=ExportCategory.STATUS_CODES,
        charts=_distribution("Status Code Distribution", pairs),
    )


def map_geo(record: GeoData, fmt: FormatCache) -> CategoryView:
    return CategoryView(
        category=ExportCategory.GEO,
        charts=_distribution(
            "Geographic Distribution",
            [
                (country.name or country.code or "Unknown", country.requests)
                for country in record.countries
            ],
        ),
    )


def map_protocol(record: ProtocolData, fmt: FormatCache) -> CategoryView:
    return CategoryView(
        category=ExportCategory.PROTOCOL,
        charts=_distribution(
            "Protocol Distribution",
            [
                ("HTTP/1.0", record.http1_0),
                ("HTTP/1.1", record.http1_1),
                ("HTTP/2", record.http2),
                ("HTTP/3", record.http3),
            ],
        ),
    )


def map_tls(record: TLSData, fmt: FormatCache) -> CategoryView:
    total = record.total or (record.tls1_0 + record.tls1_1 + record.tls1_2 + record.tls1_3)
    return CategoryView(
        category=ExportCategory.TLS,
        grid_title="TLS Overview",
        metrics=[
            MetricItem(label="Total Requests", value=fmt.count(total)),
            MetricItem(
                label="Insecure TLS Traffic",
                value=fmt.percentage(record.insecure_percentage / 100),
            ),
        ],
        charts=_distribution(
            "TLS Version Distribution",
            [
                ("TLS 1.0", record.tls1_0),
                ("TLS 1.1", record.tls1_1),
                ("TLS 1.2", record.tls1_2),
                ("TLS 1.3", record.tls1_3),
            ],
        ),
    )


def map_content_type(record: ContentTypeData, fmt: FormatCache) -> CategoryView:
    return CategoryView(
        category=ExportCategory.CONTENT_TYPE,
        charts=_distribution(
            "Content Type Distribution",
            [(entry.content_type, entry.requests) for entry in record.types],
        ),
    )


def map_bot(record: BotAnalysisData, fmt: FormatCache) -> CategoryView:
    human = max(record.total_requests - record.bot_requests, 0)
    return CategoryView(
        category=ExportCategory.BOT,
        grid_title="Bot Analysis",
        metrics=[
            MetricItem(label="Total Requests", value=fmt.count(record.total_requests)),
            MetricItem(label="Bot Requests", value=fmt.count(record.bot_requests)),
            MetricItem(label="Human Requests", value=fmt.count(human)),
            MetricItem(
                label="Bot Traffic Percentage",
                value=fmt.percentage(record.bot_percentage / 100),
            ),
        ],
        charts=_distribution(
            "Bot Score Distribution",
            [(bucket.range, bucket.count) for bucket in record.score_distribution],
        ),
    )


def map_firewall(record: FirewallAnalysisData, fmt: FormatCache) -> CategoryView:
    by_action: dict[str, int] = {}
    blocked = challenged = allowed = 0
    for rule in record.rules:
        action = rule.action.lower()
        by_action[action] = by_action.get(action, 0) + rule.count
        if action in BLOCK_ACTIONS:
            blocked += rule.count
        elif "challenge" in action:
            challenged += rule.count
        elif action in ALLOW_ACTIONS:
            allowed += rule.count

    charts = _distribution("Firewall Action Distribution", list(by_action.items()))
    charts += _distribution(
        "Top Firewall Rules",
        [
            (rule.rule_name or rule.rule_id or "Unnamed rule", rule.count)
            for rule in record.top_rules
        ],
    )
    return CategoryView(
        category=ExportCategory.FIREWALL,
        grid_title="Firewall Analysis",
        metrics=[
            MetricItem(label="Total Firewall Events", value=fmt.count(record.total_events)),
            MetricItem(label="Blocked Requests", value=fmt.count(blocked)),
            MetricItem(label="Challenged Requests", value=fmt.count(challenged)),
            MetricItem(label="Allowed Requests", value=fmt.count(allowed)),
        ],
        charts=charts,
    )


CATEGORY_MAPPERS: dict[ExportCategory, Callable[[MetricRecord, FormatCache], CategoryView]] = {
    ExportCategory.TRAFFIC: map_traffic,
    ExportCategory.SECURITY: map_security,
    ExportCategory.STATUS_CODES: map_status_codes,
    ExportCategory.GEO: map_geo,
    ExportCategory.PROTOCOL: map_protocol,
    ExportCategory.TLS: map_tls,
    ExportCategory.CONTENT_TYPE: map_content_type,
    ExportCategory.BOT: map_bot,
    ExportCategory.FIREWALL: map_firewall,
}


def map_category(
    category: ExportCategory | str,
    record: MetricRecord,
    fmt: FormatCache,
) -> CategoryView:
    """Dispatch a record to its category mapper."""
    return CATEGORY_MAPPERS[ExportCategory(category)](record, fmt)
