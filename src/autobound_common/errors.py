from __future__ import annotations

from typing import Any

import requests

REDACT_TOKEN = "***redacted***"


class AutoboundMCPError(Exception):
    """Base class for failures raised by the tool adapters."""


class ConfigurationError(AutoboundMCPError):
    """A required secret is not configured; raised before any outbound call."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing {' or '.join(self.missing)} secret")


class ProviderError(AutoboundMCPError):
    """The upstream API answered with a non-2xx status."""

    def __init__(self, provider: str, message: str, *, status_code: int | None = None) -> None:
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider} API error: {message}")


def typed_error(code: str, message: str, *, details: dict | None = None, **extra: Any) -> dict:
    """
    Standard error envelope:
      {"error": {"code": code, "message": message, "details": {...}}, ...extra}
    """
    err: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        err["error"]["details"] = details
    if extra:
        err.update(extra)
    return err


def error_code(exc: BaseException) -> str:
    """Map an exception onto the envelope code used in telemetry."""
    if isinstance(exc, ConfigurationError):
        return "missing_secret"
    if isinstance(exc, ProviderError):
        return "upstream_error"
    if isinstance(exc, requests.RequestException):
        return "transport_error"
    # pydantic.ValidationError subclasses ValueError
    if isinstance(exc, ValueError):
        return "bad_request"
    return "internal"
