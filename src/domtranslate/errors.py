"""Exception hierarchy for the DOM translator."""

from __future__ import annotations


class DOMTranslateError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(DOMTranslateError):
    """Raised when credentials or settings are missing or invalid."""


class RemoteServiceError(DOMTranslateError):
    """Raised when the remote translation capability misbehaves."""


class DiscoveryError(RemoteServiceError):
    """Raised when the pipeline discovery call fails or returns an unusable payload."""


class MalformedResponseError(RemoteServiceError):
    """Raised when an inference response lacks the expected structure."""


class RetryExhaustedError(DOMTranslateError):
    """Raised when a translation request used up its failure budget."""

    def __init__(self, message: str, *, failures: int) -> None:
        super().__init__(message)
        self.failures = failures
