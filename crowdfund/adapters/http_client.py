"""Shared HTTP transport utilities for the ledger and suggestion adapters.

This module provides a thin wrapper around ``requests.Session`` so adapter
implementations share timeout policy and retry behavior.

Dependencies:
    - ``requests`` for network I/O.
    - ``crowdfund.domain.errors.NetworkError`` for typed transport failures.

Call context:
    - Constructed by ``crowdfund/adapters/ledger_rest.py`` and
      ``crowdfund/adapters/suggest_http.py``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from requests import exceptions as req_exc

from crowdfund.domain.errors import NetworkError

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds applied to every request.
        retries: Number of retry attempts after the initial request.
        backoff_s: Delay before the first retry; grows linearly per attempt.
    """
    request_timeout_s: float = 10.0
    retries: int = 2
    backoff_s: float = 0.25


class RetryingSession:
    """Shared requests wrapper with bounded retries on transport failures.

    Only timeouts and connection errors are retried. Any HTTP response,
    including 4xx/5xx, is returned to the caller, which decides how to map it.
    """

    def __init__(
        self,
        cfg: HttpConfig,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create a retry-enabled session.

        Args:
            cfg: Shared timeout and retry settings.
            session: Optional pre-built session (tests inject stubs here).
            sleep: Delay function used between retries.
        """
        self.session = session if session is not None else requests.Session()
        self.cfg = cfg
        self._sleep = sleep

    @staticmethod
    def _headers(json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(self, url: str, *, timeout: Optional[float] = None) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Raises:
            NetworkError: If every attempt fails at the transport level.
        """
        return self._with_retries(
            f"GET {url}",
            lambda: self.session.get(
                url,
                headers=self._headers(),
                timeout=timeout or self.cfg.request_timeout_s,
            ),
        )

    def post(
        self,
        url: str,
        *,
        json_body: Any = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a JSON POST request with retries on transport failures.

        Raises:
            NetworkError: If every attempt fails at the transport level.
        """
        data = None if json_body is None else json.dumps(json_body)
        return self._with_retries(
            f"POST {url}",
            lambda: self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=timeout or self.cfg.request_timeout_s,
            ),
        )

    def _with_retries(self, context: str, send: Callable[[], requests.Response]) -> requests.Response:
        attempts = max(0, int(self.cfg.retries)) + 1
        last_err: Optional[NetworkError] = None
        for attempt in range(attempts):
            if attempt:
                self._sleep(self.cfg.backoff_s * attempt)
            try:
                return send()
            except (req_exc.Timeout, req_exc.ConnectionError) as exc:
                log.debug("%s failed (attempt %d/%d): %s", context, attempt + 1, attempts, exc)
                last_err = NetworkError(f"Timeout contacting {context.split(' ', 1)[-1]}", context=context)
            except req_exc.RequestException as exc:
                raise NetworkError(str(exc) or "Request failed", context=context) from exc
        raise last_err


__all__ = ["HttpConfig", "RetryingSession"]
