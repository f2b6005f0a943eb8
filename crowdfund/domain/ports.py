from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .entities import TransactionHandle, TransactionStatus

Address = str
EntryPoint = str


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# ---- Ports (Hexagonal boundaries) ----
class Signer(Protocol):
    """Wallet capability supplied by the host; never mutated by the core."""

    address: Address

    def sign_and_submit(self, payload: Mapping[str, Any]) -> Any: ...  # hash or {"hash": ...}


class LedgerPort(Protocol):
    """Read-only views and signed entry-function submissions against the program."""

    def query(self, name: str, args: Sequence[Any]) -> List[Any]: ...
    def submit(
        self, entry_point: EntryPoint, args: Sequence[Any], signer: Optional[Signer]
    ) -> TransactionHandle: ...
    def transaction_status(self, tx_hash: str) -> TransactionStatus: ...


class SuggestionPort(Protocol):
    """Text-generation proxy that drafts a campaign description."""

    def suggest(self, title: str, goal: str) -> Dict[str, Any]: ...  # {"description"} | {"error"}
