"""
Log-safe rendering of response bodies, headers and form values.

Values are rendered as strings and shortened to a head and a tail. Raw bytes
are summarised by length; credential-bearing headers are masked.
No dependency on Node or Workflow so every layer can import it.
"""

import json
from typing import Any, Dict, Mapping

PLACEHOLDER = "<unrenderable>"
REDACTED = "<redacted>"

SENSITIVE_HEADERS = frozenset({
    "authorization",
    "cookie",
    "proxy-authorization",
    "set-cookie",
    "x-api-key",
})


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    marker = f"...<len={len(text)}>..."
    keep = max(0, limit - len(marker))
    head = keep - keep // 2
    tail = keep // 2
    return text[:head] + marker + (text[-tail:] if tail else "")


def _to_text(data: Any) -> str:
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    if isinstance(data, (dict, list, tuple)):
        return json.dumps(data, default=str)
    return str(data)


def redact_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of `headers` with credential-bearing values masked."""
    return {
        name: REDACTED if str(name).lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def log_safe_output(data: Any, max_string_len: int = 500) -> str:
    """
    Short, printable rendering of `data` for log events.

    Never raises; values that cannot be rendered give PLACEHOLDER.
    """
    if isinstance(data, (bytes, bytearray)):
        return f"<bytes len={len(data)}>"
    try:
        return _shorten(_to_text(data), max_string_len)
    except (TypeError, ValueError):
        return PLACEHOLDER
