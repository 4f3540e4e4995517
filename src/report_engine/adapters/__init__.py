"""Collaborator interfaces and local implementations."""

from .protocols import AnalyticsDataSource, FileRenderer, StorageChecker
from .renderers import HTMLFileRenderer, PDFFileRenderer, ReportRenderError
from .storage import DiskStorageChecker

__all__ = [
    "AnalyticsDataSource",
    "DiskStorageChecker",
    "FileRenderer",
    "HTMLFileRenderer",
    "PDFFileRenderer",
    "ReportRenderError",
    "StorageChecker",
]
