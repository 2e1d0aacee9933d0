from __future__ import annotations


class ExporterError(RuntimeError):
    """Base class for failures that abort a thread export."""


class ResolutionError(ExporterError):
    """Raised when the thread id cannot be determined from the page context."""


class NetworkError(ExporterError):
    """Raised when a forum API request fails; no partial result is kept."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        page: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.page = page


class ConfigError(ExporterError):
    """Raised when exporter settings are invalid."""
