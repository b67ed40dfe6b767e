"""Redaction for tool-call logs and frame dumps.

Typed text, cookie values and scripts never reach the log verbatim; URLs lose
their query string and userinfo; screenshot payloads are replaced by a
length placeholder.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

# Argument names whose values are summarised instead of logged.
_REDACTED_ARGS = {"text", "value", "script", "args"}
_URL_ARGS = {"url", "urls"}


def redact_url_brief(url: str) -> str:
    """Drop query and fragment; remove userinfo."""
    if not isinstance(url, str) or not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    netloc = parts.netloc.split("@", 1)[1] if "@" in parts.netloc else parts.netloc
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


def _redacted_summary(value: Any) -> str:
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple)):
        return f"<redacted list len={len(value)}>"
    return "<redacted>"


def redact_tool_arguments(tool: str, args: dict[str, Any]) -> dict[str, Any]:
    """Redact tool arguments for safe logging."""
    out: dict[str, Any] = {}
    for key, value in (args or {}).items():
        if key in _REDACTED_ARGS:
            out[key] = _redacted_summary(value)
        elif key == "url":
            out[key] = redact_url_brief(value)
        elif key == "urls" and isinstance(value, list):
            out[key] = [redact_url_brief(u) for u in value]
        else:
            out[key] = value
    return out


def redact_jsonrpc_for_dump(payload: dict[str, Any]) -> dict[str, Any]:
    """Redact a JSON-RPC message for file dumps."""
    msg = dict(payload)

    if msg.get("method") == "tools/call" and isinstance(msg.get("params"), dict):
        params = dict(msg["params"])
        name = params.get("name")
        args = params.get("arguments")
        if isinstance(name, str) and isinstance(args, dict):
            params["arguments"] = redact_tool_arguments(name, args)
        msg["params"] = params

    result = msg.get("result")
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        content = []
        for item in result["content"]:
            if isinstance(item, dict) and item.get("type") == "image" and isinstance(item.get("data"), str):
                item = {**item, "data": f"<omitted image base64 len={len(item['data'])}>"}
            content.append(item)
        msg["result"] = {**result, "content": content}
    return msg


__all__ = ["redact_jsonrpc_for_dump", "redact_tool_arguments", "redact_url_brief"]
