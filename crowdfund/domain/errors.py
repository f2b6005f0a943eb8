"""Domain-level error types for ledger reads, writes, and input validation.

These errors cross layer boundaries without leaking transport details. Adapters
raise them, the repository turns read failures into typed defaults, and use
cases map write failures into ``UseCaseError`` codes.
"""

from __future__ import annotations

from typing import Any, Optional


class LedgerError(RuntimeError):
    """Base class for failures talking to the crowdfunding program."""

    kind = "ledger"

    def __init__(
        self,
        message: str,
        *,
        context: Optional[str] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context
        self.payload = payload


class NetworkError(LedgerError):
    """Transport failure, timeout, or an unavailable node."""

    kind = "network"


class RemoteError(LedgerError):
    """The program or wallet rejected the request with a readable reason."""

    kind = "remote"


class NotConnected(LedgerError):
    """A write was attempted without a signing capability."""

    kind = "not_connected"

    def __init__(self, message: str = "Wallet not connected.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidInput(LedgerError):
    """Caller-supplied value failed validation before reaching the ledger."""

    kind = "invalid_input"


__all__ = [
    "InvalidInput",
    "LedgerError",
    "NetworkError",
    "NotConnected",
    "RemoteError",
]
