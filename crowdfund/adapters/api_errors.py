from __future__ import annotations

"""Translate fullnode HTTP responses into domain ledger errors."""

from typing import Any, Optional

from crowdfund.domain.errors import NetworkError, RemoteError


def ensure_ok(resp: Any, ctx: str) -> None:
    """Raise a typed error for non-2xx responses.

    4xx means the node or program rejected the request (``RemoteError``);
    5xx and anything else is treated as an unavailable node (``NetworkError``).
    """
    status = int(getattr(resp, "status_code", 0) or 0)
    if 200 <= status < 300:
        return
    payload = parse_error_payload(resp)
    if 400 <= status < 500:
        reason = first_string(payload) or f"HTTP {status}"
        raise RemoteError(reason, context=ctx, payload=payload)
    raise NetworkError(build_error_message(ctx, status, payload), context=ctx, payload=payload)


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of error payload without raising."""
    try:
        return resp.json()
    except Exception:
        snippet = getattr(resp, "text", "")
        if not snippet:
            return None
        return snippet[:400]


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("message", "detail", "vm_status", "error", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, (list, dict)):
                candidate = first_string(value)
                if candidate:
                    return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


__all__ = [
    "build_error_message",
    "ensure_ok",
    "first_string",
    "parse_error_payload",
]
