from __future__ import annotations

import functools
import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from autobound_common.context import corr_scope, current_corr_id
from autobound_common.errors import error_code, typed_error
from autobound_common.telemetry import log_event


# ---------------------------------------------------------------------------
# Shared helpers for MCP tool handlers
# ---------------------------------------------------------------------------


_REDACTION_KEYS = {"authorization", "token", "access_token", "api_key", "apikey", "api_token"}


def sanitize_args_for_log(args: dict | None) -> dict:
    """Remove obvious secrets from args (telemetry layer also redacts)."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        out[str(k)] = "***redacted***" if str(k).lower() in _REDACTION_KEYS else v
    return out


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    client_id: str
    telemetry_file: str = "mcp-telemetry.jsonl"

    # correlation id behavior
    new_corr_id_per_call: bool = True


def instrument_async_tool(cfg: InstrumentConfig):
    """Decorator for async MCP tools.

    Writes one telemetry record per call. Failures are recorded and then
    re-raised so the protocol server reports them as tool errors.
    """

    def decorator(fn: Callable[..., Awaitable[Any]]):
        # resolved annotations: the MCP schema is generated from this signature
        fn_sig = inspect.signature(fn, eval_str=True)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any):
            inherited = None if cfg.new_corr_id_per_call else current_corr_id()
            bound = fn_sig.bind_partial(*args, **kwargs)
            args_for_log: dict[str, Any] = {
                "args": sanitize_args_for_log({k: v for k, v in bound.arguments.items() if v is not None})
            }

            with corr_scope(inherited) as corr_id:
                t0 = time.perf_counter()
                try:
                    return await fn(*args, **kwargs)
                except Exception as e:
                    args_for_log["error"] = typed_error(error_code(e), str(e), details={"type": type(e).__name__})["error"]
                    raise
                finally:
                    log_event(
                        cfg.kind,
                        cfg.name,
                        args_for_log,
                        ok="error" not in args_for_log,
                        ms=int((time.perf_counter() - t0) * 1000),
                        client_id=cfg.client_id,
                        corr_id=corr_id,
                        telemetry_file=cfg.telemetry_file,
                    )

        # Preserve signature for schema generation
        wrapper.__signature__ = fn_sig  # type: ignore[attr-defined]
        return wrapper

    return decorator
