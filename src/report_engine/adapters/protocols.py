"""Collaborator interfaces consumed by the export service."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from report_engine.models import ExportCategory, MetricRecord


@runtime_checkable
class AnalyticsDataSource(Protocol):
    """Supplies one category record per call.

    Implementations may return a record model, a raw mapping (validated into
    the category's record model) or ``None`` when nothing is available. Any
    exception propagates to the export service for classification.
    """

    async def fetch(
        self,
        category: ExportCategory,
        zone_id: str,
        account_tag: str | None,
        start_date: datetime,
        end_date: datetime,
    ) -> MetricRecord | Mapping[str, Any] | None: ...


@runtime_checkable
class StorageChecker(Protocol):
    async def has_free_space(self, required_bytes: int) -> bool: ...


@runtime_checkable
class FileRenderer(Protocol):
    """Converts a serialised document into an output file."""

    async def render(self, document: str, file_name: str) -> str:
        """Write the artifact and return its path."""
        ...
