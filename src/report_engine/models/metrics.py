"""Analytics category records.

One record type per export category. Each concept has a single canonical
field; alternate key names seen in older payloads are accepted through
``AliasChoices`` as compatibility shims only.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, model_validator

from .base import MetricRecord

# =============================================================================
# Traffic
# =============================================================================


class TrafficTimePoint(MetricRecord):
    """Traffic totals for one time bucket."""

    timestamp: datetime
    requests: int = 0
    bytes: int = 0
    bandwidth: float = 0.0


class TrafficMetrics(MetricRecord):
    """Zone traffic totals for the requested window."""

    zone_id: str | None = None
    requests: int = 0
    bytes: int = 0
    bandwidth: float = Field(default=0.0, description="Average throughput in Mbps")
    page_views: int = 0
    visits: int = 0
    time_series: list[TrafficTimePoint] = Field(default_factory=list)


# =============================================================================
# Security
# =============================================================================


class CacheStatus(MetricRecord):
    hit: int = 0
    miss: int = 0
    expired: int = 0
    stale: int = 0


class FirewallEventCounts(MetricRecord):
    total: int = 0
    blocked: int = 0
    challenged: int = 0
    allowed: int = 0


class BotScoreBucket(MetricRecord):
    range: str
    count: int = 0


class BotScoreSummary(MetricRecord):
    average: float = 0.0
    distribution: list[BotScoreBucket] = Field(default_factory=list)


class ThreatScoreSummary(MetricRecord):
    average: float = 0.0
    high: int = 0
    medium: int = 0
    low: int = 0


class SecurityEventTimePoint(MetricRecord):
    """Firewall outcomes for one time bucket."""

    timestamp: datetime
    blocked: int = 0
    challenged: int = 0
    allowed: int = 0
    total: int = 0


class SecurityMetrics(MetricRecord):
    """Cache and firewall summary for the requested window."""

    cache_status: CacheStatus = Field(default_factory=CacheStatus)
    firewall_events: FirewallEventCounts = Field(default_factory=FirewallEventCounts)
    bot_score: BotScoreSummary = Field(default_factory=BotScoreSummary)
    threat_score: ThreatScoreSummary = Field(default_factory=ThreatScoreSummary)
    time_series: list[SecurityEventTimePoint] = Field(default_factory=list)


# =============================================================================
# Distributions
# =============================================================================


class StatusCodeData(MetricRecord):
    """HTTP status code totals, by class and by individual code."""

    total: int = 0
    status_2xx: int = Field(default=0, validation_alias=AliasChoices("status_2xx", "status2xx"))
    status_3xx: int = Field(default=0, validation_alias=AliasChoices("status_3xx", "status3xx"))
    status_4xx: int = Field(default=0, validation_alias=AliasChoices("status_4xx", "status4xx"))
    status_5xx: int = Field(default=0, validation_alias=AliasChoices("status_5xx", "status5xx"))
    breakdown: dict[str, int] = Field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        classes = (self.status_2xx, self.status_3xx, self.status_4xx, self.status_5xx)
        return bool(self.breakdown) or self.total > 0 or any(classes)


class CountryTraffic(MetricRecord):
    code: str = ""
    name: str = Field(
        default="Unknown",
        validation_alias=AliasChoices(
            "name", "country", "countryName", "country_name", "clientCountryName"
        ),
    )
    requests: int = Field(default=0, validation_alias=AliasChoices("requests", "count"))
    bytes: int = 0
    percentage: float = 0.0


class GeoData(MetricRecord):
    """Requests per client country."""

    countries: list[CountryTraffic] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, data: Any) -> Any:
        """Accept a bare list of countries (legacy payload shape)."""
        if isinstance(data, list):
            return {"countries": data}
        return data

    @property
    def has_data(self) -> bool:
        return bool(self.countries)


class ProtocolData(MetricRecord):
    """Requests per HTTP protocol version."""

    http1_0: int = 0
    http1_1: int = 0
    http2: int = 0
    http3: int = 0
    total: int = 0

    @property
    def has_data(self) -> bool:
        return self.total > 0 or any(
            (self.http1_0, self.http1_1, self.http2, self.http3)
        )


class TLSData(MetricRecord):
    """Requests per TLS protocol version."""

    tls1_0: int = 0
    tls1_1: int = 0
    tls1_2: int = 0
    tls1_3: int = 0
    total: int = 0
    insecure_percentage: float = Field(
        default=0.0, description="Share of TLS 1.0/1.1 traffic, 0-100"
    )

    @property
    def has_data(self) -> bool:
        return self.total > 0 or any((self.tls1_0, self.tls1_1, self.tls1_2, self.tls1_3))


class ContentTypeTraffic(MetricRecord):
    content_type: str = Field(
        default="Unknown",
        validation_alias=AliasChoices(
            "content_type", "contentType", "edgeResponseContentType"
        ),
    )
    requests: int = Field(default=0, validation_alias=AliasChoices("requests", "count"))
    bytes: int = 0
    percentage: float = 0.0


class ContentTypeData(MetricRecord):
    """Requests per response content type."""

    types: list[ContentTypeTraffic] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, data: Any) -> Any:
        """Accept a bare list of content types (legacy payload shape)."""
        if isinstance(data, list):
            return {"types": data}
        return data

    @property
    def has_data(self) -> bool:
        return bool(self.types)


# =============================================================================
# Bot and firewall analysis
# =============================================================================


class BotScoreRange(MetricRecord):
    range: str = Field(
        default="Unknown",
        validation_alias=AliasChoices("range", "botScore", "score"),
    )
    count: int = Field(default=0, validation_alias=AliasChoices("count", "requests"))
    percentage: float = 0.0


class BotAnalysisData(MetricRecord):
    """Automated traffic summary."""

    total_requests: int = 0
    bot_requests: int = 0
    bot_percentage: float = Field(default=0.0, description="Share of bot traffic, 0-100")
    score_distribution: list[BotScoreRange] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.total_requests > 0 or bool(self.score_distribution)


class FirewallRule(MetricRecord):
    rule_id: str = ""
    rule_name: str = ""
    action: str = Field(
        default="unknown",
        validation_alias=AliasChoices("action", "firewallAction"),
    )
    count: int = Field(default=0, validation_alias=AliasChoices("count", "requests"))
    percentage: float = 0.0


class FirewallAnalysisData(MetricRecord):
    """Firewall rule activity summary."""

    total_events: int = 0
    rules: list[FirewallRule] = Field(default_factory=list)
    top_rules: list[FirewallRule] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.total_events > 0 or bool(self.rules) or bool(self.top_rules)
