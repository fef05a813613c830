"""
Lightweight shared HTTP client.

Goals:
- Centralize transport timeouts and failure logging for the provider endpoints.
- Keep dependencies limited to `requests`.
- Send every request exactly once: no retry adapter is mounted.
"""

from __future__ import annotations

import logging
import re
import time

import requests
from requests import Response
from requests.adapters import HTTPAdapter

from autobound_config.settings import HttpSettings


logger = logging.getLogger(__name__)

_SECRET_QUERY = re.compile(r"(?i)\b(api_key|api_token|apikey|token)=[^&\s'\"]*")


def redact_url(text: str) -> str:
    """Mask credential query parameters in a URL (or a message quoting one)."""
    return _SECRET_QUERY.sub(r"\1=***", text)


class HttpClient:
    """A small wrapper around `requests.Session` with sane defaults."""

    def __init__(self, *, settings: HttpSettings | None = None, session: requests.Session | None = None) -> None:
        self.settings = settings or HttpSettings()
        self.session = session or requests.Session()
        self._configure_session(self.session, self.settings)

    @staticmethod
    def _configure_session(session: requests.Session, settings: HttpSettings) -> None:
        # replaces the python-requests default; per-request headers still win
        session.headers["User-Agent"] = settings.user_agent

        adapter = HTTPAdapter(max_retries=0, pool_connections=10, pool_maxsize=10)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

    def prepare(self, request: requests.Request) -> requests.PreparedRequest:
        return self.session.prepare_request(request)

    def send(self, request: requests.Request) -> Response:
        """Send a request once and return the response whatever its status.

        Transport failures are logged and re-raised unchanged.
        """
        prepared = self.prepare(request)
        t0 = time.perf_counter()
        try:
            env = self.session.merge_environment_settings(prepared.url, {}, None, None, None)
            resp = self.session.send(prepared, timeout=self.settings.timeout, **env)
        except requests.RequestException as e:
            ms = int((time.perf_counter() - t0) * 1000)
            logger.warning(
                "HTTP %s %s failed (ms=%s): %s",
                prepared.method,
                redact_url(prepared.url or ""),
                ms,
                redact_url(str(e)),
            )
            raise

        ms = int((time.perf_counter() - t0) * 1000)
        if resp.ok:
            logger.debug("HTTP %s %s -> %s (ms=%s)", prepared.method, redact_url(prepared.url or ""), resp.status_code, ms)
        else:
            logger.warning(
                "HTTP %s %s failed (status=%s, ms=%s)",
                prepared.method,
                redact_url(prepared.url or ""),
                resp.status_code,
                ms,
            )
        return resp
