"""Observability module for structured logging."""

from .logging import (
    ExportLogContext,
    current_export_context,
    external_call,
    get_logger,
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Context
    "ExportLogContext",
    "current_export_context",
    # Collaborator calls
    "external_call",
]
