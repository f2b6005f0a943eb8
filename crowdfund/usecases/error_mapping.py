"""Translate ledger errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from crowdfund.domain.errors import (
    InvalidInput,
    LedgerError,
    NetworkError,
    NotConnected,
    RemoteError,
)
from crowdfund.domain.ports import UseCaseError


def map_ledger_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Remote rejections keep the program's reason verbatim so the caller can
    show exactly what the chain or wallet reported.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, NotConnected):
        return UseCaseError("NOT_CONNECTED", exc.message or "Wallet not connected.")
    if isinstance(exc, InvalidInput):
        return UseCaseError("INVALID_INPUT", exc.message)
    if isinstance(exc, RemoteError):
        return UseCaseError("REMOTE_REJECTED", exc.message, meta=_meta(exc))
    if isinstance(exc, NetworkError):
        return UseCaseError(
            "NETWORK_ERROR",
            exc.message or "Request timed out. Check connection.",
            meta=_meta(exc),
        )
    if isinstance(exc, LedgerError):
        return UseCaseError("LEDGER_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _meta(exc: LedgerError) -> dict:
    meta = {}
    if exc.context:
        meta["context"] = exc.context
    if exc.payload is not None:
        meta["payload"] = exc.payload
    return meta


__all__ = ["map_ledger_error"]
