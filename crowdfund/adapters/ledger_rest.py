"""Aptos fullnode REST adapter for the crowdfunding program.

Implements ``LedgerPort``: view-function queries go to ``POST /view``,
entry-function payloads are handed to the wallet signer, and commit state is
read from ``GET /transactions/by_hash/{hash}``. The adapter shapes requests
and normalizes failures; it holds no business rules.

Dependencies:
    - ``RetryingSession`` (``requests``) for transport with bounded retries.
    - ``crowdfund.domain.errors`` for the error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from requests import exceptions as req_exc

from crowdfund.domain.entities import TransactionHandle, TransactionStatus
from crowdfund.domain.errors import LedgerError, NetworkError, NotConnected, RemoteError
from crowdfund.domain.naming import normalize_address
from crowdfund.domain.ports import LedgerPort, Signer
from crowdfund.domain.settings import LedgerSettings

from .api_errors import ensure_ok
from .http_client import HttpConfig, RetryingSession

log = logging.getLogger(__name__)


def encode_argument(value: Any) -> Any:
    """Encode a Python value the way the fullnode JSON API expects.

    u64 values travel as decimal strings and byte blobs as ``0x`` hex.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [encode_argument(item) for item in value]
    return str(value)


class LedgerRestAdapter(LedgerPort):
    """REST adapter exposing typed query/submit/status calls."""

    def __init__(
        self,
        settings: LedgerSettings,
        *,
        http: Optional[RetryingSession] = None,
    ) -> None:
        self.settings = settings
        self.http = http or RetryingSession(
            HttpConfig(
                request_timeout_s=settings.request_timeout_s,
                retries=settings.retries,
            )
        )

    # ---------- LedgerPort ----------

    def query(self, name: str, args: Sequence[Any]) -> List[Any]:
        """Call a view function and return its result tuple.

        Raises:
            NetworkError: Transport failure, timeout, 5xx or malformed body.
            RemoteError: The node or program rejected the call (4xx).
        """
        ctx = f"view[{name}]"
        body = self._payload(name, args)
        resp = self.http.post(self._url("/view"), json_body=body)
        ensure_ok(resp, ctx)
        data = self._json(resp, ctx)
        if not isinstance(data, list):
            raise NetworkError(f"{ctx}: expected list response", context=ctx, payload=data)
        return data

    def submit(
        self, entry_point: str, args: Sequence[Any], signer: Optional[Signer]
    ) -> TransactionHandle:
        """Sign and broadcast an entry-function call through the wallet.

        Raises:
            NotConnected: No signer was supplied.
            RemoteError: The wallet or program refused the transaction.
            NetworkError: The signer reported a transport failure.
        """
        if signer is None:
            raise NotConnected()
        payload = dict(self._payload(entry_point, args), type="entry_function_payload")
        ctx = f"submit[{entry_point}]"
        try:
            response = signer.sign_and_submit(payload)
        except LedgerError:
            raise
        except (req_exc.ConnectionError, req_exc.Timeout, TimeoutError, ConnectionError) as exc:
            raise NetworkError(str(exc) or exc.__class__.__name__, context=ctx) from exc
        except Exception as exc:
            raise RemoteError(str(exc) or exc.__class__.__name__, context=ctx) from exc

        tx_hash = self._extract_hash(response)
        if not tx_hash:
            raise RemoteError("Wallet returned no transaction hash.", context=ctx, payload=response)
        sender = normalize_address(getattr(signer, "address", None)) or None
        log.info("Submitted %s as %s", entry_point, tx_hash)
        return TransactionHandle(hash=tx_hash, sender=sender, function=payload["function"])

    def transaction_status(self, tx_hash: str) -> TransactionStatus:
        """Read the commit state of ``tx_hash``; unknown hashes are pending."""
        ctx = f"transaction[{tx_hash}]"
        resp = self.http.get(self._url(f"/transactions/by_hash/{tx_hash}"))
        if resp.status_code == 404:
            return TransactionStatus(hash=tx_hash, state="pending")
        ensure_ok(resp, ctx)
        data = self._json(resp, ctx)
        if not isinstance(data, dict):
            raise NetworkError(f"{ctx}: expected object response", context=ctx, payload=data)
        if data.get("type") == "pending_transaction":
            return TransactionStatus(hash=tx_hash, state="pending")
        vm_status = str(data.get("vm_status") or "")
        state = "success" if data.get("success") is True else "failed"
        return TransactionStatus(hash=tx_hash, state=state, vm_status=vm_status)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.settings.node_url.rstrip('/')}{path}"

    def _payload(self, name: str, args: Sequence[Any]) -> Dict[str, Any]:
        return {
            "function": f"{self.settings.function_prefix}::{name}",
            "type_arguments": [],
            "arguments": [encode_argument(arg) for arg in args],
        }

    @staticmethod
    def _extract_hash(response: Any) -> Optional[str]:
        if isinstance(response, str):
            return response.strip() or None
        if isinstance(response, Mapping):
            value = response.get("hash")
            if isinstance(value, str) and value.strip():
                return value.strip()
        value = getattr(response, "hash", None)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _json(resp: Any, ctx: str) -> Any:
        try:
            return resp.json()
        except Exception as exc:
            snippet = str(getattr(resp, "text", ""))[:400]
            raise NetworkError(f"{ctx}: invalid JSON response: {snippet}", context=ctx) from exc


__all__ = ["LedgerRestAdapter", "encode_argument"]
