from __future__ import annotations

import datetime as _dt
import json
import logging
from typing import Any

from autobound_config.settings import telemetry_dir, telemetry_enabled
from autobound_common.context import current_corr_id
from autobound_common.errors import REDACT_TOKEN


logger = logging.getLogger(__name__)

_SECRET_KEYS = {
    "authorization",
    "access_token",
    "token",
    "api_key",
    "apikey",
    "api_token",
    "x-api-key",
}

_PII_KEYS = {
    "email",
    "contactemail",
    "useremail",
    "contactlinkedinurl",
    "userlinkedinurl",
}


def _redact(obj: Any, keys: set[str]) -> Any:
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if isinstance(k, str) and k.strip().lower() in keys:
                out[k] = REDACT_TOKEN
            else:
                out[k] = _redact(v, keys)
        return out
    if isinstance(obj, list):
        return [_redact(x, keys) for x in obj]
    return obj


def redact(obj: Any) -> Any:
    """Strip secrets and contact identifiers from a telemetry payload."""
    return _redact(_redact(obj, _SECRET_KEYS), _PII_KEYS)


def log_event(
    kind: str,
    name: str,
    args: dict | None = None,
    ok: bool = True,
    ms: int = 0,
    *,
    client_id: str | None = None,
    corr_id: str | None = None,
    telemetry_file: str = "mcp-telemetry.jsonl",
) -> None:
    """
    Append JSONL telemetry for tools.
    """
    if not telemetry_enabled():
        return

    payload = {} if args is None else dict(args)

    rec = {
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"),
        "kind": kind,
        "name": name,
        "client_id": client_id,
        "corr_id": corr_id or current_corr_id(),
        "args": payload,
        "ok": bool(ok),
        "ms": int(ms),
    }

    d = telemetry_dir()
    try:
        d.mkdir(parents=True, exist_ok=True)
        with (d / telemetry_file).open("a", encoding="utf-8") as f:
            f.write(json.dumps(redact(rec), ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        # telemetry must never fail a tool call
        logger.warning("Could not write telemetry to %s: %s", d, e)
