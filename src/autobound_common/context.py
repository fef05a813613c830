"""Correlation id for the tool call currently running in this context."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_corr_id: ContextVar[str | None] = ContextVar("autobound_corr_id", default=None)


def current_corr_id() -> str | None:
    return _corr_id.get()


@contextmanager
def corr_scope(corr_id: str | None = None) -> Iterator[str]:
    """Bind `corr_id` (or a fresh one) for the duration of the block."""
    cid = corr_id or uuid.uuid4().hex
    token = _corr_id.set(cid)
    try:
        yield cid
    finally:
        _corr_id.reset(token)
