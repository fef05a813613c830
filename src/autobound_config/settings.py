from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from dotenv import load_dotenv


AUTOBOUND_API_KEY = "AUTOBOUND_API_KEY"
PREDICTLEADS_API_KEY = "PREDICTLEADS_API_KEY"
PREDICTLEADS_API_TOKEN = "PREDICTLEADS_API_TOKEN"
YOUCOM_API_KEY = "YOUCOM_API_KEY"

SECRET_NAMES = (AUTOBOUND_API_KEY, PREDICTLEADS_API_KEY, PREDICTLEADS_API_TOKEN, YOUCOM_API_KEY)

DEFAULT_AUTOBOUND_URL = "https://api.autobound.ai/api/external/generate-insights/v1.4"
DEFAULT_PREDICTLEADS_URL = "https://predictleads.com/api/v3"
DEFAULT_YOUCOM_URL = "https://api.ydc-index.io/v1/search"


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _find_repo_root(start: Path) -> Optional[Path]:
    """Walk upward until we find pyproject.toml or .git."""
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return None


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """Best-effort repository root discovery.

    Order of precedence:
      1) AUTOBOUND_MCP_REPO_ROOT (explicit override)
      2) walk upward from current working directory
      3) walk upward from this module file's directory
    """
    explicit = os.getenv("AUTOBOUND_MCP_REPO_ROOT")
    if explicit:
        p = Path(explicit).expanduser().resolve()
        if not p.is_dir():
            raise RuntimeError(f"AUTOBOUND_MCP_REPO_ROOT does not exist or is not a directory: {p}")
        return p

    cwd = Path.cwd().resolve()
    root = _find_repo_root(cwd)
    if root:
        return root

    here_dir = Path(__file__).resolve().parent
    root = _find_repo_root(here_dir)
    if root:
        return root

    return cwd


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) AUTOBOUND_MCP_ENV_FILE (explicit path)
      2) repo-root/.env
      3) repo-root/config/.env
    """
    explicit = os.getenv("AUTOBOUND_MCP_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(repo_root() / ".env")
    candidates.append(repo_root() / "config" / ".env")

    for p in candidates:
        p = p.resolve()
        if p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def telemetry_dir() -> Path:
    """
    Default telemetry dir. Override with AUTOBOUND_MCP_TELEMETRY_DIR.
    """
    p = os.getenv("AUTOBOUND_MCP_TELEMETRY_DIR")
    if p:
        return Path(p).expanduser().resolve()
    return (repo_root() / "artifacts" / "telemetry").resolve()


def telemetry_enabled() -> bool:
    flag = os.getenv("AUTOBOUND_MCP_DISABLE_TELEMETRY", "0").strip().lower()
    return flag not in {"1", "true", "yes"}


@dataclass(frozen=True)
class Credentials:
    """Read-only secret lookup shared by every tool adapter.

    Built once at startup and passed into the adapters; a missing secret only
    fails the tool call that needs it.
    """

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, names: Iterable[str] = SECRET_NAMES) -> "Credentials":
        env = os.environ if environ is None else environ
        return cls({n: env[n] for n in names if env.get(n)})

    def get(self, name: str) -> str | None:
        v = self.values.get(name)
        if v is None or not str(v).strip():
            return None
        return str(v)

    def missing(self, names: Iterable[str]) -> list[str]:
        return [n for n in names if self.get(n) is None]

    def __repr__(self) -> str:
        present = sorted(n for n in self.values if self.get(n) is not None)
        return f"Credentials(present={present})"


@dataclass(frozen=True)
class ProviderUrls:
    autobound: str = DEFAULT_AUTOBOUND_URL
    predictleads: str = DEFAULT_PREDICTLEADS_URL
    youcom: str = DEFAULT_YOUCOM_URL

    @classmethod
    def from_env(cls) -> "ProviderUrls":
        return cls(
            autobound=os.getenv("AUTOBOUND_BASE_URL", DEFAULT_AUTOBOUND_URL),
            # path is appended verbatim, so no trailing slash
            predictleads=os.getenv("PREDICTLEADS_BASE_URL", DEFAULT_PREDICTLEADS_URL).rstrip("/"),
            youcom=os.getenv("YOUCOM_BASE_URL", DEFAULT_YOUCOM_URL),
        )


@dataclass(frozen=True)
class HttpSettings:
    connect_timeout: float = 3.05
    read_timeout: float = 30.0
    user_agent: str = "autobound-mcp/1.0"

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls) -> "HttpSettings":
        return cls(
            connect_timeout=_env_float("AUTOBOUND_MCP_HTTP_CONNECT_TIMEOUT", 3.05),
            read_timeout=_env_float("AUTOBOUND_MCP_HTTP_READ_TIMEOUT", 30.0),
            user_agent=os.getenv("AUTOBOUND_MCP_HTTP_USER_AGENT", "autobound-mcp/1.0"),
        )


@dataclass(frozen=True)
class ServerSettings:
    transport: str = "http"
    host: str = "127.0.0.1"
    port: int = 8787

    @classmethod
    def from_env(cls) -> "ServerSettings":
        transport = os.getenv("MCP_TRANSPORT", "http").strip().lower()
        if transport not in {"http", "stdio", "sse"}:
            raise RuntimeError(f"MCP_TRANSPORT must be one of http, stdio, sse (got {transport!r})")
        return cls(
            transport=transport,
            host=os.getenv("AUTOBOUND_MCP_HOST", "127.0.0.1"),
            port=_env_int("AUTOBOUND_MCP_PORT", 8787),
        )


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("AUTOBOUND_MCP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "AUTOBOUND_MCP_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # stdout belongs to the stdio transport
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
