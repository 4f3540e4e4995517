"""Report Document Assembly.

Builds one self-contained HTML document (inline styles, inline SVG) from an
AnalyticsBundle:
- Header with zone and period
- Metric grids and chart sections per populated category, in fixed order
- Footer with a page-number placeholder

Assembly performs no I/O.
"""

from __future__ import annotations

from datetime import UTC, datetime
from html import escape

from report_engine.config import ExportSettings, get_settings
from report_engine.models import (
    AnalyticsBundle,
    ChartKind,
    ChartSection,
    ChartSpec,
    Document,
    DocumentHeader,
    MetricGridSection,
    MetricItem,
    ThemeColors,
)
from report_engine.observability import get_logger

from .charts import ChartRenderer, RenderContext
from .mapping import ChartSource, map_category
from .reduction import sample_evenly, top_n_by_value, truncation_note

logger = get_logger(__name__)


def format_period(start: datetime, end: datetime) -> str:
    """Human date range, e.g. ``Jan 5, 2026 - Jan 12, 2026``."""
    return f"{_short_date(start)} - {_short_date(end)}"


def _short_date(value: datetime) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _long_timestamp(value: datetime) -> str:
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%B} {value.day}, {value.year} at {hour:02d}:{value:%M} {meridiem}"


class DocumentAssembler:
    """Assembles and serialises report documents."""

    def __init__(self, settings: ExportSettings | None = None):
        """Initialize the assembler.

        Args:
            settings: Export settings (defaults to application settings)
        """
        self.settings = settings or get_settings().export

    def assemble(
        self,
        bundle: AnalyticsBundle,
        zone_id: str,
        zone_name: str,
        start: datetime,
        end: datetime,
        theme: ThemeColors | None = None,
        context: RenderContext | None = None,
        generated_at: datetime | None = None,
    ) -> str:
        """Build and serialise a document in one step."""
        document = self.build(
            bundle,
            zone_id=zone_id,
            zone_name=zone_name,
            start=start,
            end=end,
            theme=theme,
            context=context,
            generated_at=generated_at,
        )
        return self.serialize(document)

    def build(
        self,
        bundle: AnalyticsBundle,
        zone_id: str,
        zone_name: str,
        start: datetime,
        end: datetime,
        theme: ThemeColors | None = None,
        context: RenderContext | None = None,
        generated_at: datetime | None = None,
    ) -> Document:
        """Build the section list for a bundle.

        Args:
            bundle: Per-category records; absent or empty categories are skipped
            zone_id: Zone identifier shown in the header
            zone_name: Zone display name
            start: Period start
            end: Period end
            theme: Colours (defaults to the stock theme)
            context: Memo caches for this build; cleared before use
            generated_at: Timestamp shown in the header (defaults to now)

        Returns:
            Document ready for serialisation
        """
        theme = theme or ThemeColors()
        context = context or RenderContext()
        context.clear()

        renderer = ChartRenderer(theme=theme, context=context)
        sections: list[MetricGridSection | ChartSection] = []

        for category in bundle.populated():
            view = map_category(category, bundle.get(category), context.formats)
            if view.metrics and view.grid_title:
                sections.append(MetricGridSection(title=view.grid_title, metrics=view.metrics))
            for source in view.charts:
                sections.append(self._chart_section(source, renderer, theme))

        header = DocumentHeader(
            title=self.settings.report_title,
            zone_id=zone_id,
            zone_name=zone_name,
            period=format_period(start, end),
            generated_at=generated_at or datetime.now(UTC),
        )

        logger.debug(
            "Document built",
            sections=len(sections),
            categories=[c.value for c in bundle.populated()],
            chart_cache_entries=len(context.charts),
            format_cache_entries=len(context.formats),
        )

        return Document(header=header, sections=sections, theme=theme)

    def _chart_section(
        self,
        source: ChartSource,
        renderer: ChartRenderer,
        theme: ThemeColors,
    ) -> ChartSection:
        """Reduce, render and wrap one chart."""
        if source.kind == ChartKind.PIE:
            reduced = top_n_by_value(source.points, self.settings.max_distribution_items)
        else:
            reduced = sample_evenly(source.points, self.settings.max_timeseries_points)

        spec = ChartSpec(
            kind=source.kind,
            points=tuple(reduced.data),
            title=source.title,
            palette=tuple(theme.chart_colors),
        )
        return ChartSection(
            title=source.title,
            markup=renderer.render(spec),
            truncation_note=truncation_note(reduced),
        )

    # =========================================================================
    # Serialisation
    # =========================================================================

    def serialize(self, document: Document) -> str:
        """Serialise a document to a complete HTML string."""
        header = document.header
        body = "\n".join(self._section_html(section) for section in document.sections)

        return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(header.title)} - {escape(header.zone_name)}</title>
  <style>{self._styles(document.theme)}</style>
</head>
<body>
{self._header_html(header)}
<div class="content">
{body}
</div>
{self._footer_html(header.title)}
</body>
</html>"""

    def _header_html(self, header: DocumentHeader) -> str:
        return (
            '<div class="header">'
            f"<h1>{escape(header.title)}</h1>"
            f'<div class="zone-info">Zone: {escape(header.zone_name)} '
            f"({escape(header.zone_id)})</div>"
            f'<div class="time-range">Period: {header.period}</div>'
            f'<div class="time-range">Generated: {_long_timestamp(header.generated_at)}</div>'
            "</div>"
        )

    def _footer_html(self, title: str) -> str:
        return (
            '<div class="footer">'
            f"<p>{escape(title)}</p>"
            '<p>Page <span class="page-number"></span></p>'
            "</div>"
        )

    def _section_html(self, section: MetricGridSection | ChartSection) -> str:
        if isinstance(section, MetricGridSection):
            inner = self.metrics_grid_html(section.metrics)
        else:
            inner = section.markup
            if section.truncation_note:
                inner += self._truncation_html(section.truncation_note)
        return f'<div class="section"><h2>{escape(section.title)}</h2>{inner}</div>'

    def metrics_grid_html(self, metrics: list[MetricItem]) -> str:
        cards = []
        for metric in metrics:
            unit = (
                f'<span class="metric-unit">{escape(metric.unit)}</span>' if metric.unit else ""
            )
            cards.append(
                '<div class="metric-card">'
                f'<div class="metric-label">{escape(metric.label)}</div>'
                f'<div class="metric-value">{escape(metric.value)}{unit}</div>'
                "</div>"
            )
        return f'<div class="metrics-grid">{"".join(cards)}</div>'

    def _truncation_html(self, note: str) -> str:
        return (
            '<div class="truncation-note">'
            f"<p><strong>Note:</strong> {escape(note)}</p>"
            "</div>"
        )

    def _styles(self, theme: ThemeColors) -> str:
        """CSS for the printable document."""
        return f"""
    @page {{ size: letter; margin: 0; }}
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto',
        'Helvetica', 'Arial', sans-serif;
      font-size: 14px; line-height: 1.6; color: {theme.text}; background: {theme.background};
    }}
    .header {{
      background: {theme.primary}; color: white; padding: 30px 20px; margin-bottom: 30px;
    }}
    .header h1 {{ font-size: 24px; font-weight: 600; margin-bottom: 10px; }}
    .header .zone-info {{ font-size: 14px; opacity: 0.9; margin-bottom: 5px; }}
    .header .time-range {{ font-size: 14px; opacity: 0.9; }}
    .content {{ padding: 0 20px 20px; }}
    .section {{ margin-bottom: 30px; page-break-inside: avoid; }}
    .section h2 {{
      font-size: 20px; font-weight: 600; margin-bottom: 15px; color: {theme.text};
      border-bottom: 2px solid {theme.border}; padding-bottom: 8px;
    }}
    .metrics-grid {{
      display: grid; grid-template-columns: repeat(2, 1fr); gap: 15px; margin-bottom: 20px;
    }}
    .metric-card {{
      background: white; border: 1px solid {theme.border}; border-radius: 8px; padding: 15px;
    }}
    .metric-label {{
      font-size: 12px; color: #666; margin-bottom: 5px;
      text-transform: uppercase; letter-spacing: 0.5px;
    }}
    .metric-value {{ font-size: 24px; font-weight: 600; color: {theme.text}; }}
    .metric-unit {{ font-size: 14px; color: #666; margin-left: 4px; }}
    .chart-container {{ margin: 20px 0; page-break-inside: avoid; }}
    .chart-title {{ font-size: 16px; font-weight: 600; margin-bottom: 15px; color: {theme.text}; }}
    .chart-legend {{
      margin-top: 15px; display: grid; grid-template-columns: repeat(2, 1fr); gap: 10px;
    }}
    .legend-item {{ display: flex; align-items: center; font-size: 12px; gap: 8px; }}
    .legend-color {{ width: 16px; height: 16px; border-radius: 3px; flex-shrink: 0; }}
    .legend-label {{ flex: 1; color: {theme.text}; }}
    .legend-value {{ font-weight: 600; color: {theme.text}; }}
    .truncation-note {{
      margin-top: 15px; padding: 10px; background-color: #fff3cd;
      border: 1px solid #ffc107; border-radius: 4px;
    }}
    .truncation-note p {{ margin: 0; font-size: 12px; color: #856404; }}
    .footer {{
      margin-top: 40px; padding: 20px; text-align: center; font-size: 12px; color: #666;
      border-top: 1px solid {theme.border};
    }}
    @media print {{ .section {{ page-break-inside: avoid; }} }}
  """
