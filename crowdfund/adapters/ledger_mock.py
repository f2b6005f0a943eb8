from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple
from uuid import uuid4

from crowdfund.domain.entities import TransactionHandle, TransactionStatus
from crowdfund.domain.errors import NetworkError, NotConnected, RemoteError
from crowdfund.domain.metadata import encode_metadata
from crowdfund.domain.naming import normalize_address
from crowdfund.domain.ports import LedgerPort, Signer
from crowdfund.domain.time_utils import now_seconds

from .ledger_rest import encode_argument

Effect = Callable[[], None]


@dataclass
class _Pending:
    entry_point: str
    effect: Effect
    polls_left: int
    fail_with: Optional[str] = None


@dataclass
class LedgerMock(LedgerPort):
    """Offline substitute for ``LedgerRestAdapter`` that models the crowdfund module.

    Submissions are validated immediately (like wallet simulation) and take
    effect once ``transaction_status`` reports them committed, after
    ``confirm_polls`` pending polls.
    """

    clock: Callable[[], int] = now_seconds
    confirm_polls: int = 0

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self._campaigns: Dict[str, Dict[str, Any]] = {}
        self._registry: List[str] = []
        self._pledges: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._pending: Dict[str, _Pending] = {}
        self._done: Dict[str, TransactionStatus] = {}
        self._unreachable: Set[str] = set()
        self._fail_next_commit: Optional[str] = None
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    # ---------- LedgerPort ----------

    def query(self, name: str, args: Sequence[Any]) -> List[Any]:
        with self._lock:
            self.calls.append((name, tuple(args)))
            handler = getattr(self, f"_view_{name}", None)
            if handler is None:
                raise RemoteError(f"Function {name} not found")
            return handler(*args)

    def submit(
        self, entry_point: str, args: Sequence[Any], signer: Optional[Signer]
    ) -> TransactionHandle:
        if signer is None:
            raise NotConnected()
        sender = normalize_address(signer.address)
        with self._lock:
            self.calls.append((entry_point, tuple(args)))
            handler = getattr(self, f"_entry_{entry_point}", None)
            if handler is None:
                raise RemoteError(f"Entry function {entry_point} not found")
            effect = handler(sender, *args)
            payload = {
                "type": "entry_function_payload",
                "function": entry_point,
                "type_arguments": [],
                "arguments": [encode_argument(arg) for arg in args],
            }
            try:
                signer.sign_and_submit(payload)
            except Exception as exc:
                raise RemoteError(str(exc) or exc.__class__.__name__) from exc
            tx_hash = "0x" + uuid4().hex
            self._pending[tx_hash] = _Pending(
                entry_point=entry_point,
                effect=effect,
                polls_left=self.confirm_polls,
                fail_with=self._fail_next_commit,
            )
            self._fail_next_commit = None
        return TransactionHandle(hash=tx_hash, sender=sender, function=entry_point)

    def transaction_status(self, tx_hash: str) -> TransactionStatus:
        with self._lock:
            if tx_hash in self._done:
                return self._done[tx_hash]
            pending = self._pending.get(tx_hash)
            if pending is None:
                return TransactionStatus(hash=tx_hash, state="pending")
            if pending.polls_left > 0:
                pending.polls_left -= 1
                return TransactionStatus(hash=tx_hash, state="pending")
            del self._pending[tx_hash]
            if pending.fail_with:
                status = TransactionStatus(hash=tx_hash, state="failed", vm_status=pending.fail_with)
            else:
                pending.effect()
                status = TransactionStatus(
                    hash=tx_hash, state="success", vm_status="Executed successfully"
                )
            self._done[tx_hash] = status
            return status

    # ---------- Test helpers ----------

    def add_campaign(
        self,
        creator: str,
        *,
        goal: int,
        deadline: int,
        title: str = "",
        description: str = "",
        metadata: Optional[str] = None,
        total_raised: int = 0,
        funds_claimed: bool = False,
    ) -> str:
        """Seed a campaign directly, bypassing entry-point validation."""
        address = normalize_address(creator)
        with self._lock:
            self._campaigns[address] = {
                "creator": address,
                "goal": int(goal),
                "total_raised": int(total_raised),
                "deadline": int(deadline),
                "metadata": metadata if metadata is not None else encode_metadata(title, description),
                "funds_claimed": bool(funds_claimed),
                "total_refunded": 0,
                "escrow": 0 if funds_claimed else int(total_raised),
            }
            if address not in self._registry:
                self._registry.append(address)
        return address

    def add_pledge(self, campaign: str, backer: str, amount: int, *, refunded: bool = False) -> None:
        key = (normalize_address(campaign), normalize_address(backer))
        with self._lock:
            self._pledges[key] = {"amount": int(amount), "refunded": bool(refunded)}

    def make_unreachable(self, address: str) -> None:
        """Make reads of ``address`` fail with a transport error."""
        with self._lock:
            self._unreachable.add(normalize_address(address))

    def register_address(self, address: str) -> None:
        """Append an address to the registry without a campaign behind it."""
        with self._lock:
            self._registry.append(normalize_address(address))

    def fail_next_commit(self, vm_status: str) -> None:
        with self._lock:
            self._fail_next_commit = vm_status

    def campaign_state(self, address: str) -> Dict[str, Any]:
        with self._lock:
            return dict(self._campaigns[normalize_address(address)])

    def count_calls(self, name: str) -> int:
        with self._lock:
            return sum(1 for call, _ in self.calls if call == name)

    # ---------- views ----------

    def _campaign(self, address: Any) -> Dict[str, Any]:
        key = normalize_address(address)
        if key in self._unreachable:
            raise NetworkError(f"Timeout contacting node for {key}")
        campaign = self._campaigns.get(key)
        if campaign is None:
            raise RemoteError("E_CAMPAIGN_NOT_FOUND")
        return campaign

    def _is_active(self, campaign: Dict[str, Any]) -> bool:
        return self.clock() < campaign["deadline"] and not campaign["funds_claimed"]

    def _is_successful(self, campaign: Dict[str, Any]) -> bool:
        return campaign["total_raised"] >= campaign["goal"]

    def _view_get_campaign_info(self, address: Any) -> List[Any]:
        c = self._campaign(address)
        return [
            c["creator"],
            str(c["goal"]),
            str(c["total_raised"]),
            str(c["deadline"]),
            c["metadata"],
            c["funds_claimed"],
            str(c["total_refunded"]),
            str(c["escrow"]),
        ]

    def _view_get_backer_pledge(self, campaign: Any, backer: Any) -> List[Any]:
        self._campaign(campaign)
        pledge = self._pledges.get((normalize_address(campaign), normalize_address(backer)))
        if pledge is None:
            raise RemoteError("E_PLEDGE_NOT_FOUND")
        return [str(pledge["amount"]), pledge["refunded"]]

    def _view_get_all_campaigns(self, registry: Any) -> List[Any]:
        return [list(self._registry)]

    def _view_get_total_campaigns(self, registry: Any) -> List[Any]:
        return [str(len(self._registry))]

    def _view_get_campaigns_paginated(self, registry: Any, start: Any, limit: Any) -> List[Any]:
        begin = int(start)
        if begin >= len(self._registry):
            raise RemoteError("E_INVALID_INDEX")
        return [self._registry[begin:begin + int(limit)]]

    def _view_campaign_exists(self, address: Any) -> List[Any]:
        return [normalize_address(address) in self._campaigns]

    def _view_is_campaign_active(self, address: Any) -> List[Any]:
        return [self._is_active(self._campaign(address))]

    def _view_is_campaign_successful(self, address: Any) -> List[Any]:
        return [self._is_successful(self._campaign(address))]

    def _view_get_progress_percentage(self, address: Any) -> List[Any]:
        c = self._campaign(address)
        if c["goal"] <= 0:
            return ["0"]
        return [str(c["total_raised"] * 10000 // c["goal"])]

    # ---------- entry points ----------

    def _entry_create_campaign(
        self, sender: str, goal: Any, deadline: Any, metadata: Any, registry: Any
    ) -> Effect:
        if sender in self._campaigns:
            raise RemoteError("E_CAMPAIGN_ALREADY_EXISTS")
        if int(goal) <= 0:
            raise RemoteError("E_INVALID_GOAL")
        if int(deadline) <= self.clock():
            raise RemoteError("E_INVALID_DEADLINE")

        def apply() -> None:
            self._campaigns[sender] = {
                "creator": sender,
                "goal": int(goal),
                "total_raised": 0,
                "deadline": int(deadline),
                "metadata": str(metadata),
                "funds_claimed": False,
                "total_refunded": 0,
                "escrow": 0,
            }
            self._registry.append(sender)

        return apply

    def _entry_pledge(self, sender: str, campaign: Any, amount: Any) -> Effect:
        c = self._campaign(campaign)
        if not self._is_active(c):
            raise RemoteError("E_CAMPAIGN_ENDED")
        value = int(amount)
        if value <= 0:
            raise RemoteError("E_INVALID_AMOUNT")
        key = (normalize_address(campaign), sender)

        def apply() -> None:
            entry = self._pledges.setdefault(key, {"amount": 0, "refunded": False})
            entry["amount"] += value
            c["total_raised"] += value
            c["escrow"] += value

        return apply

    def _entry_claim_funds(self, sender: str) -> Effect:
        c = self._campaign(sender)
        if self._is_active(c) or not self._is_successful(c) or c["funds_claimed"]:
            raise RemoteError("E_CANNOT_CLAIM")

        def apply() -> None:
            c["funds_claimed"] = True
            c["escrow"] = 0

        return apply

    def _entry_get_refund(self, sender: str, campaign: Any) -> Effect:
        c = self._campaign(campaign)
        if self._is_active(c) or self._is_successful(c):
            raise RemoteError("E_REFUND_NOT_AVAILABLE")
        entry = self._pledges.get((normalize_address(campaign), sender))
        if not entry or entry["amount"] <= 0 or entry["refunded"]:
            raise RemoteError("E_NOTHING_TO_REFUND")

        def apply() -> None:
            entry["refunded"] = True
            c["total_refunded"] += entry["amount"]
            c["escrow"] -= entry["amount"]

        return apply


@dataclass
class SignerMock:
    """Wallet double that records payloads and answers with a fresh hash."""

    address: str
    reject_with: Optional[str] = None
    payloads: List[Dict[str, Any]] = field(default_factory=list)

    def sign_and_submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.payloads.append(dict(payload))
        if self.reject_with:
            raise RuntimeError(self.reject_with)
        return {"hash": "0x" + uuid4().hex}
