"""Unit tests for file naming and local collaborators."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from report_engine.adapters import (
    AnalyticsDataSource,
    DiskStorageChecker,
    FileRenderer,
    HTMLFileRenderer,
    PDFFileRenderer,
    ReportRenderError,
    StorageChecker,
)
from report_engine.config import ExportSettings
from report_engine.models import ExportCategory, ReportRequest
from report_engine.services.export import ExportService
from report_engine.services.naming import (
    file_timestamp,
    generate_file_name,
    sanitize_file_name,
)

TIMESTAMP = datetime(2026, 1, 5, 10, 30, 15, 123000, tzinfo=UTC)


class TestNaming:
    """Test output file naming."""

    def test_sanitize_strips_invalid_characters(self) -> None:
        assert sanitize_file_name('a/b\\c:d*e?f"g<h>i|j') == "abcdefghij"

    def test_sanitize_keeps_dots_and_dashes(self) -> None:
        assert sanitize_file_name("shop.example-1.com") == "shop.example-1.com"

    def test_timestamp_separators_replaced(self) -> None:
        assert file_timestamp(TIMESTAMP) == "2026-01-05T10-30-15-123Z"

    def test_timestamp_converted_to_utc(self) -> None:
        local = datetime(2026, 1, 5, 12, 30, 15, 123000, tzinfo=timezone(timedelta(hours=2)))
        assert file_timestamp(local) == "2026-01-05T10-30-15-123Z"

    def test_generate_file_name(self) -> None:
        name = generate_file_name("example.com", TIMESTAMP)
        assert name == "cloudflare-analytics-example.com-2026-01-05T10-30-15-123Z.pdf"

    def test_generate_file_name_custom_prefix_and_extension(self) -> None:
        name = generate_file_name("a:b", TIMESTAMP, prefix="zone-report", extension=".html")
        assert name == "zone-report-ab-2026-01-05T10-30-15-123Z.html"


class TestDiskStorageChecker:
    """Test the local free-space check."""

    async def test_reports_available_space(self, tmp_path) -> None:
        checker = DiskStorageChecker(tmp_path)
        assert await checker.has_free_space(1) is True

    async def test_reports_insufficient_space(self, tmp_path) -> None:
        checker = DiskStorageChecker(tmp_path)
        assert await checker.has_free_space(10**20) is False

    async def test_missing_directory_checks_parent(self, tmp_path) -> None:
        checker = DiskStorageChecker(tmp_path / "not" / "yet" / "created")
        assert await checker.has_free_space(1) is True

    async def test_failed_check_assumes_space(self, tmp_path) -> None:
        checker = DiskStorageChecker(tmp_path)
        with patch(
            "report_engine.adapters.storage.shutil.disk_usage",
            side_effect=OSError("not supported"),
        ):
            assert await checker.has_free_space(10**20) is True

    def test_satisfies_protocol(self, tmp_path) -> None:
        assert isinstance(DiskStorageChecker(tmp_path), StorageChecker)


class TestHTMLFileRenderer:
    async def test_writes_document(self, tmp_path) -> None:
        renderer = HTMLFileRenderer(tmp_path / "out")

        path = await renderer.render("<html>report</html>", "report-1.pdf")

        assert path.endswith("report-1.html")
        assert (tmp_path / "out" / "report-1.html").read_text(encoding="utf-8") == (
            "<html>report</html>"
        )

    async def test_file_name_follows_written_path(
        self, tmp_path, mock_data_source, mock_storage_checker, period
    ) -> None:
        service = ExportService(
            data_source=mock_data_source,
            storage_checker=mock_storage_checker,
            file_renderer=HTMLFileRenderer(tmp_path),
            settings=ExportSettings(output_dir=tmp_path),
        )
        start, end = period
        request = ReportRequest(
            zone_id="zone-123",
            zone_name="example.com",
            start_date=start,
            end_date=end,
            category=ExportCategory.TRAFFIC,
        )

        outcome = await service.export(request)

        assert outcome.success is True
        assert outcome.file_name.endswith(".html")
        assert (tmp_path / outcome.file_name).is_file()
        assert outcome.file_path == str(tmp_path / outcome.file_name)

    async def test_write_failure_wrapped(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        renderer = HTMLFileRenderer(blocker)

        with pytest.raises(ReportRenderError, match="Failed to render PDF"):
            await renderer.render("<html/>", "report.pdf")

    def test_satisfies_protocol(self, tmp_path) -> None:
        assert isinstance(HTMLFileRenderer(tmp_path), FileRenderer)
        assert isinstance(PDFFileRenderer(tmp_path), FileRenderer)


class TestPDFFileRenderer:
    @pytest.mark.pdf
    async def test_writes_pdf(self, tmp_path) -> None:
        pytest.importorskip("weasyprint")
        renderer = PDFFileRenderer(tmp_path)

        path = await renderer.render("<html><body><p>report</p></body></html>", "report.pdf")

        assert (tmp_path / "report.pdf").read_bytes().startswith(b"%PDF")
        assert path == str(tmp_path / "report.pdf")

    async def test_conversion_failure_wrapped(self, tmp_path) -> None:
        renderer = PDFFileRenderer(tmp_path)
        with patch.object(renderer, "_write", side_effect=RuntimeError("cairo missing")):
            with pytest.raises(ReportRenderError) as exc_info:
                await renderer.render("<html/>", "report.pdf")

        assert str(exc_info.value) == "Failed to render PDF: cairo missing"


class TestProtocols:
    def test_data_source_protocol(self) -> None:
        class StaticSource:
            async def fetch(self, category, zone_id, account_tag, start_date, end_date):
                return None

        assert isinstance(StaticSource(), AnalyticsDataSource)
