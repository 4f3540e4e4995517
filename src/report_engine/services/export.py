"""Report Export Service.

Runs one export as a strictly sequential pipeline:
1. Validate the time range
2. Check free storage
3. Fetch each selected category from the data source, one at a time
4. Check the fetched data is sufficient
5. Assemble the document and hand it to the file renderer
6. Report completion

Progress is reported through the request's callback. A one-shot timer emits
a sentinel progress notification when an export runs longer than expected.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any
from uuid import uuid4

from report_engine.adapters import AnalyticsDataSource, FileRenderer, StorageChecker
from report_engine.config import ExportSettings, get_settings
from report_engine.models import (
    CATEGORY_RECORD_TYPES,
    PROGRESS_WARNING,
    AnalyticsBundle,
    ExportCategory,
    ExportErrorCode,
    ExportOutcome,
    MetricRecord,
    ProgressCallback,
    ReportRequest,
    ThemeColors,
    categories_for,
)
from report_engine.observability import ExportLogContext, external_call, get_logger

from .charts import RenderContext
from .document import DocumentAssembler
from .errors import classify_error
from .naming import generate_file_name

logger = get_logger(__name__)

SLOW_EXPORT_MESSAGE = (
    "This is taking longer than expected. "
    "Large datasets may take a few minutes to process. Please wait..."
)

# Progress share of the fetch stage, spread across the selected categories
FETCH_PROGRESS_START = 20
FETCH_PROGRESS_SPAN = 35


def fetch_progress(index: int, total: int) -> int:
    """Progress reported after fetching the ``index``-th of ``total`` categories."""
    return FETCH_PROGRESS_START + round(FETCH_PROGRESS_SPAN * (index + 1) / total)


def is_valid_time_range(start: datetime, end: datetime, now: datetime | None = None) -> bool:
    """Start must not follow end, and neither bound may be in the future."""
    now = now or datetime.now(UTC)
    return start <= end and start <= now and end <= now


def coerce_record(
    category: ExportCategory,
    payload: MetricRecord | Mapping[str, Any] | list | None,
) -> MetricRecord | None:
    """Validate a data-source result into the category's record model."""
    if payload is None:
        return None
    record_type = CATEGORY_RECORD_TYPES[category]
    if isinstance(payload, record_type):
        return payload
    return record_type.model_validate(payload)


def has_sufficient_data(category: ExportCategory, bundle: AnalyticsBundle) -> bool:
    """Whether the bundle can produce a report for the selector.

    Full exports need traffic or security; single-category exports need that
    category present and non-empty.
    """
    if category == ExportCategory.FULL:
        return bundle.has(ExportCategory.TRAFFIC) or bundle.has(ExportCategory.SECURITY)
    return bundle.has(category)


class ExportService:
    """Orchestrates report exports against injected collaborators."""

    def __init__(
        self,
        data_source: AnalyticsDataSource,
        storage_checker: StorageChecker,
        file_renderer: FileRenderer,
        settings: ExportSettings | None = None,
    ):
        """Initialize the export service.

        Args:
            data_source: Supplies category records
            storage_checker: Reports whether enough free space exists
            file_renderer: Converts the document into the output file
            settings: Export settings (defaults to application settings)
        """
        self.data_source = data_source
        self.storage_checker = storage_checker
        self.file_renderer = file_renderer
        self.settings = settings or get_settings().export
        self.assembler = DocumentAssembler(self.settings)

    async def export(self, request: ReportRequest) -> ExportOutcome:
        """Run one export.

        Failures are returned as a typed error in the outcome, never raised.
        """
        async with ExportLogContext(export_id=uuid4().hex, zone_id=request.zone_id):
            category = ExportCategory(request.category)
            logger.info(
                "Export started",
                category=category.value,
                start_date=request.start_date.isoformat(),
                end_date=request.end_date.isoformat(),
            )

            warning_task = asyncio.create_task(self._slow_warning(request.on_progress))
            started = time.perf_counter()
            try:
                outcome = await self._run(request, category)
            except Exception as e:
                error = classify_error(e)
                logger.error(
                    "Export failed",
                    error_code=error.code,
                    error_type=type(e).__name__,
                    details=error.details,
                )
                outcome = ExportOutcome(success=False, error=error)
            finally:
                warning_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await warning_task

            duration_ms = (time.perf_counter() - started) * 1000
            if outcome.success:
                logger.info(
                    "Export completed",
                    file_name=outcome.file_name,
                    categories=outcome.categories,
                    duration_ms=round(duration_ms, 2),
                )
            return outcome

    async def _run(self, request: ReportRequest, category: ExportCategory) -> ExportOutcome:
        notify = request.on_progress

        # Stage 1: time range
        self._emit(notify, 5, "Validating time range...")
        if not is_valid_time_range(request.start_date, request.end_date):
            logger.warning("Export rejected: invalid time range")
            return ExportOutcome.failed(ExportErrorCode.INVALID_TIME_RANGE)

        # Stage 2: storage
        self._emit(notify, 10, "Checking storage space...")
        required = self.settings.storage_estimate_bytes
        if not await self.storage_checker.has_free_space(required):
            logger.warning("Export rejected: insufficient storage", required_bytes=required)
            return ExportOutcome.failed(ExportErrorCode.STORAGE_FULL)

        # Stage 3: sequential fetch
        self._emit(notify, FETCH_PROGRESS_START, "Fetching analytics data...")
        bundle = await self._aggregate(request, category, notify)

        # Stage 4: sufficiency
        self._emit(notify, 60, "Validating data...")
        if not has_sufficient_data(category, bundle):
            logger.warning(
                "Export rejected: insufficient data",
                populated=[c.value for c in bundle.populated()],
            )
            return ExportOutcome.failed(ExportErrorCode.INVALID_DATA)

        # Stage 5: assemble and render
        self._emit(notify, 70, "Generating PDF...")
        now = datetime.now(UTC)
        html = self.assembler.assemble(
            bundle,
            zone_id=request.zone_id,
            zone_name=request.zone_name,
            start=request.start_date,
            end=request.end_date,
            theme=request.theme or ThemeColors(),
            context=RenderContext(),
            generated_at=now,
        )
        file_name = generate_file_name(
            request.zone_name,
            timestamp=now,
            prefix=self.settings.file_prefix,
            extension=self.settings.file_extension,
        )

        self._emit(notify, 85, "Rendering PDF...")
        file_path = await self._render(html, file_name)

        # Stage 6: done
        self._emit(notify, 100, "Export complete!")
        return ExportOutcome(
            success=True,
            file_path=file_path,
            file_name=PurePath(file_path).name,
            categories=bundle.populated(),
        )

    async def _aggregate(
        self,
        request: ReportRequest,
        category: ExportCategory,
        notify: ProgressCallback | None,
    ) -> AnalyticsBundle:
        """Fetch the selected categories strictly one after another."""
        bundle = AnalyticsBundle()
        selected = categories_for(category)
        for index, item in enumerate(selected):
            payload = await self._fetch(item, request)
            bundle.set(item, coerce_record(item, payload))
            progress = fetch_progress(index, len(selected))
            self._emit(notify, progress, f"Fetched {item.display_name}")
        return bundle

    async def _fetch(
        self,
        category: ExportCategory,
        request: ReportRequest,
    ) -> MetricRecord | Mapping[str, Any] | None:
        with external_call(logger, "data_source", f"fetch:{category.value}"):
            return await self.data_source.fetch(
                category,
                request.zone_id,
                request.account_tag,
                request.start_date,
                request.end_date,
            )

    async def _render(self, document: str, file_name: str) -> str:
        with external_call(logger, "file_renderer", "render"):
            return await self.file_renderer.render(document, file_name)

    async def _slow_warning(self, notify: ProgressCallback | None) -> None:
        """Emit the sentinel notification once, unless cancelled first."""
        await asyncio.sleep(self.settings.slow_warning_seconds)
        logger.warning(
            "Export running longer than expected",
            threshold_seconds=self.settings.slow_warning_seconds,
        )
        self._emit(notify, PROGRESS_WARNING, SLOW_EXPORT_MESSAGE)

    def _emit(self, notify: ProgressCallback | None, progress: float, message: str) -> None:
        """Invoke the progress callback; its failures never abort an export."""
        logger.debug("Export progress", progress=progress, status=message)
        if notify is None:
            return
        try:
            notify(progress, message)
        except Exception as e:
            logger.warning("Progress callback failed", progress=progress, error=str(e))
