"""Error Hierarchy — structured HTTP errors and configuration errors.

Invariants:
    - WebError always carries an integer HTTP status and a client-safe message
    - str(WebError) renders "<status>: <message>" (log form); .message is the response body
    - ConfigurationError signals a programming mistake, never a request-time fault
    - RuleSetError is both: a 500 WebError and a ConfigurationError

Design Decisions:
    - Category derived from status instead of passed in: one source of truth
      for how the reporter classifies a failure
"""

from enum import Enum


class ErrorCategory(str, Enum):
    """High-level error categories for logging and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    CLIENT = "client"
    INTERNAL = "internal"


def category_for_status(status: int) -> ErrorCategory:
    """Map an HTTP status onto its error category."""
    if status == 400:
        return ErrorCategory.VALIDATION
    if status == 404:
        return ErrorCategory.RESOURCE_NOT_FOUND
    if status == 409:
        return ErrorCategory.CONFLICT
    if 400 <= status < 500:
        return ErrorCategory.CLIENT
    return ErrorCategory.INTERNAL


class WebError(Exception):
    """An error carrying the HTTP status the client should receive."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message

    @property
    def category(self) -> ErrorCategory:
        return category_for_status(self.status)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status!r}, {self.message!r})"


class ConfigurationError(Exception):
    """Registration or reporter API misused by the calling code."""


class RuleSetError(WebError, ConfigurationError):
    """Malformed rule set passed to the validator."""

    def __init__(self, message: str):
        super().__init__(500, message)


def error(status: int, message: str) -> WebError:
    """Construct a WebError; shorthand for handlers (`raise error(404, ...)`)."""
    return WebError(status, message)
