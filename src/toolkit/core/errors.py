"""
Structured error types for toolkit.

Instead of generic exceptions that lose context, every error raised by
toolkit code is a :class:`ToolkitError` carrying:

- **category:** what kind of error (auth, validation, messaging, ...)
- **retryable:** whether the operation can be retried automatically
- **context:** free-form metadata for logging
- **cause:** the underlying exception, for root cause analysis

Hierarchy::

    ToolkitError
    ├── ConfigError
    ├── AuthError
    │   ├── AuthenticationError      (bad / missing ID token)
    │   └── AuthorizationError       (project not allowed)
    ├── ValidationError
    │   └── CronError                (unparsable cron pattern)
    ├── DatabaseError
    ├── MessagingError               (FCM HTTP failures)
    └── BrowserError
        ├── BrowserUnavailableError  (sidecar unreachable)
        ├── BrowserPageError         (page failed to load, session intact)
        └── BrowserTimeoutError      (page wait exceeded)

Operation functions (``toolkit.ops``) translate these into
failed ``OperationResult``s (``timer.fail(code, message)``); the API maps codes to HTTP
status codes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"
    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    AUTH = "AUTH"
    MESSAGING = "MESSAGING"
    BROWSER = "BROWSER"
    INTERNAL = "INTERNAL"


class ToolkitError(Exception):
    """Base exception for all toolkit errors.

    Subclasses set ``default_category`` and ``default_retryable`` to
    provide sensible defaults for their domain.

    Example:
        >>> err = ToolkitError("boom", context={"schedule_id": 3})
        >>> err.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialise for structured logging."""
        d: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context:
            d["context"] = self.context
        if self.cause is not None:
            d["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return d

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ConfigError(ToolkitError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class AuthError(ToolkitError):
    default_category = ErrorCategory.AUTH


class AuthenticationError(AuthError):
    """The caller could not be identified (missing or invalid ID token)."""


class AuthorizationError(AuthError):
    """The caller is identified but not allowed (unknown Firebase project)."""


class ValidationError(ToolkitError):
    """Invalid input data. Never retryable."""

    default_category = ErrorCategory.VALIDATION


class CronError(ValidationError):
    """A cron pattern could not be parsed."""


class DatabaseError(ToolkitError):
    default_category = ErrorCategory.DATABASE


class MessagingError(ToolkitError):
    """FCM rejected or failed to accept a message.

    ``status_code`` is the HTTP status returned by FCM (``None`` for
    transport failures). 429 and 5xx responses are retryable.
    """

    default_category = ErrorCategory.MESSAGING

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs: Any) -> None:
        if "retryable" not in kwargs or kwargs["retryable"] is None:
            kwargs["retryable"] = status_code is None or status_code == 429 or status_code >= 500
        super().__init__(message, **kwargs)
        self.status_code = status_code


class BrowserError(ToolkitError):
    default_category = ErrorCategory.BROWSER


class BrowserUnavailableError(BrowserError):
    """The Selenium endpoint could not be reached or a session not created."""

    default_retryable = True


class BrowserTimeoutError(BrowserError):
    """Waiting for a page condition exceeded its timeout."""


class BrowserPageError(BrowserError):
    """The page failed to load (e.g. an unresolvable host); the session is still usable."""

    default_category = ErrorCategory.VALIDATION


def is_retryable(error: Exception) -> bool:
    """Return True when *error* is a retryable ToolkitError."""
    return isinstance(error, ToolkitError) and error.retryable


__all__ = [
    "ErrorCategory",
    "ToolkitError",
    "ConfigError",
    "AuthError",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "CronError",
    "DatabaseError",
    "MessagingError",
    "BrowserError",
    "BrowserUnavailableError",
    "BrowserTimeoutError",
    "BrowserPageError",
    "is_retryable",
]
