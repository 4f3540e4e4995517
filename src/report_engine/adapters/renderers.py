"""Local file renderers.

HTMLFileRenderer writes the document unchanged. PDFFileRenderer converts it
with WeasyPrint (install the ``pdf`` extra).
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from report_engine.config import get_settings
from report_engine.observability import get_logger

logger = get_logger(__name__)

LETTER_PAGE_CSS = "@page { size: letter; margin: 0; }"


class ReportRenderError(Exception):
    """Raised when a document cannot be converted into an output file."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to render PDF: {reason}")


class HTMLFileRenderer:
    """Writes the serialised document as an ``.html`` file."""

    def __init__(self, output_dir: Path | str | None = None):
        self.output_dir = Path(output_dir or get_settings().output_dir)

    def _write(self, document: str, file_name: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / Path(file_name).with_suffix(".html").name
        path.write_text(document, encoding="utf-8")
        return path

    async def render(self, document: str, file_name: str) -> str:
        try:
            path = await asyncio.to_thread(self._write, document, file_name)
        except OSError as e:
            raise ReportRenderError(str(e)) from e

        logger.info("HTML report written", path=str(path), size_bytes=len(document.encode()))
        return str(path)


class PDFFileRenderer:
    """Converts the serialised document to a Letter-size PDF."""

    def __init__(self, output_dir: Path | str | None = None):
        self.output_dir = Path(output_dir or get_settings().output_dir)

    def _write(self, document: str, file_name: str) -> Path:
        from weasyprint import CSS, HTML

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / Path(file_name).name
        HTML(string=document).write_pdf(
            str(path),
            stylesheets=[CSS(string=LETTER_PAGE_CSS)],
        )
        return path

    async def render(self, document: str, file_name: str) -> str:
        try:
            path = await asyncio.to_thread(self._write, document, file_name)
        except Exception as e:
            raise ReportRenderError(str(e)) from e

        logger.info("PDF report written", path=str(path))
        return str(path)
