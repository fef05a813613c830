"""
Provider endpoints.

One parameterized request builder replaces per-provider HTTP code. Each
upstream API is described by an `EndpointConfig` record:

    base URL + HTTP method
    where each secret goes (header name or query parameter name)
    which JSON field carries the upstream error message

`ProviderEndpoint` combines a config with the injected `Credentials` and a
shared `HttpClient`, sends exactly one request per call and normalizes the
outcome into either a result envelope or a raised error.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Literal, Sequence

import requests

from autobound_config.settings import Credentials
from autobound_common.errors import ConfigurationError, ProviderError
from autobound_mcp.http_client import HttpClient


logger = logging.getLogger(__name__)

QueryParams = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class CredentialBinding:
    secret: str
    location: Literal["header", "query"]
    key: str


@dataclass(frozen=True)
class EndpointConfig:
    provider: str
    base_url: str
    method: str
    credentials: tuple[CredentialBinding, ...]
    error_field: str = "message"
    json_body: bool = False

    @property
    def query_keys(self) -> frozenset[str]:
        return frozenset(b.key for b in self.credentials if b.location == "query")


def normalized_result(data: Any) -> dict:
    return {"content": [{"type": "json", "json": data}]}


class ProviderEndpoint:
    """A single upstream API operation with credentials injected."""

    def __init__(self, config: EndpointConfig, credentials: Credentials, http_client: HttpClient | None = None) -> None:
        self.config = config
        self.credentials = credentials
        self.http = http_client or HttpClient()

    def build_request(self, path: str = "", params: QueryParams = (), body: Any | None = None) -> requests.Request:
        """Build the outbound request.

        Raises:
            ConfigurationError: if any secret the endpoint needs is missing.
        """
        cfg = self.config
        missing = self.credentials.missing(b.secret for b in cfg.credentials)
        if missing:
            raise ConfigurationError(missing)

        headers: dict[str, str] = {}
        query: list[tuple[str, str]] = []
        for b in cfg.credentials:
            value = self.credentials.get(b.secret)
            if b.location == "header":
                headers[b.key] = value
            else:
                query.append((b.key, value))
        query.extend(params)

        if cfg.json_body:
            headers["Content-Type"] = "application/json"
        return requests.Request(
            cfg.method,
            cfg.base_url + path,
            headers=headers,
            params=query,
            json=body if cfg.json_body else None,
        )

    async def call(self, path: str = "", params: QueryParams = (), body: Any | None = None) -> dict:
        """Send one request and return the normalized result.

        Raises:
            ConfigurationError: before any I/O, if a secret is missing.
            ProviderError: on a non-2xx upstream status.
            requests.RequestException: transport failures, unchanged.
        """
        request = self.build_request(path, params, body)
        resp = await asyncio.to_thread(self.http.send, request)

        if not 200 <= resp.status_code < 300:
            raise self._provider_error(resp)

        return normalized_result(resp.json())

    def _provider_error(self, resp: requests.Response) -> ProviderError:
        try:
            detail = resp.json()
        except ValueError:
            detail = {}
        if not isinstance(detail, dict):
            detail = {}

        message = detail.get(self.config.error_field) or resp.reason or str(resp.status_code)
        logger.info("%s responded %s: %s", self.config.provider, resp.status_code, message)
        return ProviderError(self.config.provider, str(message), status_code=resp.status_code)
