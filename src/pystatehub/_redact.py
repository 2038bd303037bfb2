"""Helpers for safe debug logging.

Actions and state snapshots routinely carry user data (credentials, tokens,
large blobs).  This module redacts sensitive fields and truncates long values
before they are emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pystatehub.config import DEFAULT_REDACT_KEYS


def redact_for_log(
    value: Any,
    *,
    redact_keys: frozenset[str] = DEFAULT_REDACT_KEYS,
    max_string: int = 512,
    _depth: int = 0,
) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    # Pydantic models (e.g. Action) are logged through their dumped form.
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return redact_for_log(dump(), redact_keys=redact_keys, max_string=max_string, _depth=_depth + 1)

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in redact_keys:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, redact_keys=redact_keys, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence):
        return [redact_for_log(v, redact_keys=redact_keys, max_string=max_string, _depth=_depth + 1) for v in value]

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
