"""Export failure classification and credential redaction."""

from __future__ import annotations

import re

from report_engine.models import ExportError, ExportErrorCode

NETWORK_KEYWORDS = ("network", "fetch")

_REDACTED = "[REDACTED]"

_SECRET_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"(?i)(authorization\s*[:=]\s*)(?:bearer\s+|basic\s+)?[^\s,;]+"),
        rf"\1{_REDACTED}",
    ),
    (re.compile(r"(?i)(x-auth-(?:key|email)\s*[:=]\s*)[^\s,;]+"), rf"\1{_REDACTED}"),
    (re.compile(r"(?i)\b(bearer\s+)[A-Za-z0-9\-._~+/]+=*"), rf"\1{_REDACTED}"),
    (re.compile(r"(?i)\b(\w*(?:token|key|secret|password))=([^&\s,;]+)"), rf"\1={_REDACTED}"),
)


def redact_secrets(text: str) -> str:
    """Mask bearer tokens, auth headers and credential query parameters."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def is_network_error(exc: BaseException) -> bool:
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    message = str(exc).lower()
    return any(keyword in message for keyword in NETWORK_KEYWORDS)


def classify_error(exc: BaseException) -> ExportError:
    """Map an unexpected failure to NETWORK_ERROR or GENERATION_FAILED.

    The exception message (credentials redacted) becomes ``details``.
    """
    details = redact_secrets(str(exc) or type(exc).__name__)
    if is_network_error(exc):
        return ExportError.from_code(ExportErrorCode.NETWORK_ERROR, details)
    return ExportError.from_code(ExportErrorCode.GENERATION_FAILED, details)
