"""Exception types raised by the ReelScope services."""

from __future__ import annotations


class ReelScopeError(Exception):
    """Base class for all errors raised by the application."""


class ConfigurationError(ReelScopeError, ValueError):
    """A required credential or setting is missing."""

    def __init__(self, service: str, env_var: str):
        super().__init__(f"{service} API key is not configured")
        self.service = service
        self.env_var = env_var


class SchemaViolation(ReelScopeError):
    """An upstream payload did not match its declared shape."""

    def __init__(self, path: str, expected: str, message: str | None = None):
        detail = f"Unexpected payload at '{path}': expected {expected}"
        if message:
            detail = f"{detail} ({message})"
        super().__init__(detail)
        self.path = path
        self.expected = expected


class TransportError(ReelScopeError):
    """The upstream service could not be reached after all retries."""


class UpstreamHTTPError(TransportError):
    """The upstream service answered with a non-retryable HTTP status."""

    def __init__(self, status_code: int, url: str, body: str = ""):
        super().__init__(f"Upstream request to {url} failed with HTTP {status_code}")
        self.status_code = status_code
        self.url = url
        self.body = body
