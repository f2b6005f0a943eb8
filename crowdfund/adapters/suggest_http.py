"""HTTP client for the campaign description suggestion proxy.

The proxy accepts ``{"title", "goal"}`` and answers ``{"description"}`` on
success or ``{"error"}`` otherwise.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from crowdfund.domain.errors import NetworkError
from crowdfund.domain.ports import SuggestionPort

from .api_errors import ensure_ok
from .http_client import HttpConfig, RetryingSession


class SuggestionHttpAdapter(SuggestionPort):
    """POST title and goal to the proxy and return its JSON object."""

    def __init__(
        self,
        url: str,
        *,
        request_timeout_s: float = 30.0,
        http: Optional[RetryingSession] = None,
    ) -> None:
        if not url or not url.strip():
            raise ValueError("SuggestionHttpAdapter requires a proxy URL")
        self.url = url.strip()
        # Generation is not idempotent, so transport failures are not retried.
        self.http = http or RetryingSession(HttpConfig(request_timeout_s=request_timeout_s, retries=0))

    def suggest(self, title: str, goal: str) -> Dict[str, Any]:
        resp = self.http.post(self.url, json_body={"title": title, "goal": goal})
        ensure_ok(resp, "suggest")
        try:
            data = resp.json()
        except Exception as exc:
            raise NetworkError("suggest: invalid JSON response", context="suggest") from exc
        if not isinstance(data, dict):
            raise NetworkError("suggest: expected object response", context="suggest", payload=data)
        return data


__all__ = ["SuggestionHttpAdapter"]
