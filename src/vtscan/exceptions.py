"""Exception hierarchy for vtscan."""

from __future__ import annotations


class VTScanError(Exception):
    """Base exception for all vtscan errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(VTScanError):
    """Raised when required configuration is missing or invalid.

    Common causes: no API key stored or supplied, negative poll delay.
    """


class SampleError(VTScanError):
    """Raised when a sample file cannot be found or read."""


class VirusTotalAPIError(VTScanError):
    """Raised when the VirusTotal API refuses a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class RateLimitError(VirusTotalAPIError):
    """Raised on HTTP 204, which VirusTotal uses to signal the request quota is used up.

    The public API allows 4 requests of any kind per minute.
    """


class UnauthorizedError(VirusTotalAPIError):
    """Raised on HTTP 403: the API key is invalid or lacks privileges for the call."""
