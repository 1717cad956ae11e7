"""Error taxonomy & redaction for linear-cli.

Every failure path in the CLI ends up as one of the exceptions below and is
rendered in a single place (:func:`linearcli.cli.main`). Exit code is always 1.

Public API:
- CliError and subclasses (UsageError, ResolutionError, InputValidationError,
  MissingCredentialError)
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"lin_api_[A-Za-z0-9]{16,}"),  # personal API keys
    re.compile(r"lin_oauth_[A-Za-z0-9]{16,}"),  # OAuth access tokens
]

_REDACTION_PLACEHOLDER = "<redacted>"


class CliError(Exception):
    """Base class for errors reported to the user on stderr."""

    category = "generic"
    exit_code = 1

    def __init__(self, message: str, *, hint: str | None = None, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = list(details or [])


class UsageError(CliError):
    """Bad or missing arguments, detected before any network call."""

    category = "usage"


class ResolutionError(CliError):
    """A referenced entity (issue, label, status) could not be found."""

    category = "not_found"


class InputValidationError(CliError):
    """Malformed input shape (dates, numbers, unreadable files)."""

    category = "validation"


class MissingCredentialError(CliError):
    category = "auth"


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    details: dict[str, Any] | None = field(default=None)


def redact(text: str) -> str:
    """Replace API keys / tokens in arbitrary text with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - CliError subclasses carry their own category
    - messages mentioning the API key -> 'auth'
    - network-y keywords -> 'network'
    - errors raised by the API client -> 'api'
    - fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, CliError):
        return ErrorInfo(exc.category, redact(msg), name)
    if "api key" in low:
        return ErrorInfo("auth", redact(msg), name)
    if any(k in low for k in ("timed out", "timeout", "connection", "name resolution")):
        return ErrorInfo("network", redact(msg), name)
    if name == "LinearAPIError":
        status = getattr(exc, "status", None)
        return ErrorInfo("api", redact(msg), name, details={"status": status})
    return ErrorInfo("generic", redact(msg), name)


__all__ = [
    "CliError",
    "UsageError",
    "ResolutionError",
    "InputValidationError",
    "MissingCredentialError",
    "ErrorInfo",
    "classify_error",
    "redact",
]
