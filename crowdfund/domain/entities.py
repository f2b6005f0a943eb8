from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and view models."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar

if TYPE_CHECKING:  # pragma: no cover - type checking helper
    from .ports import Signer

T = TypeVar("T")


class CampaignStatus(str, Enum):
    """Lifecycle phase derived from a campaign snapshot and the clock."""

    ACTIVE = "active"
    SUCCESSFUL = "successful"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CampaignMetadata:
    """Client-side title and description stored as an opaque blob on chain."""

    title: str = ""
    """Campaign headline shown on cards and the detail page."""
    description: str = ""
    """Free-form pitch text; may be drafted by the suggestion service."""


@dataclass(frozen=True)
class CampaignRecord:
    """Snapshot of one campaign as reported by ``get_campaign_info``."""

    address: str
    """Normalized address the campaign was read from."""
    creator: str
    """Normalized account address of the campaign owner."""
    goal: int
    """Funding target in octas."""
    total_raised: int
    """Sum of all pledges in octas, including later refunds."""
    deadline_timestamp: int
    """Pledging closes at this instant, in seconds since the epoch."""
    metadata: CampaignMetadata
    """Parsed title and description."""
    funds_claimed: bool = False
    """True once the creator withdrew the escrow."""
    total_refunded: int = 0
    """Octas already returned to backers of a failed campaign."""
    escrow_balance: int = 0
    """Octas still held by the program for this campaign."""

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def description(self) -> str:
        return self.metadata.description


@dataclass(frozen=True)
class BackerPledge:
    """One backer's contribution to one campaign."""

    amount: int = 0
    refunded: bool = False


NO_PLEDGE = BackerPledge()


@dataclass(frozen=True)
class CampaignView:
    """Ephemeral, time-dependent projection of a record for one decision cycle."""

    status: CampaignStatus
    progress_percent: float
    """Raised over goal in percent; values above 100 are preserved."""
    progress_bar_percent: float
    """``progress_percent`` clamped to [0, 100] for bars."""
    can_pledge: bool
    can_claim: bool
    can_refund: bool
    seconds_remaining: int
    """Seconds until the deadline, never negative."""
    days_left: int
    """Whole days until the deadline, rounded up."""


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """Outcome of a ledger read that keeps "absent" and "failed" apart."""

    value: Optional[T] = None
    error_kind: Optional[str] = None
    message: str = ""

    @classmethod
    def ok(cls, value: Optional[T]) -> "ReadResult[T]":
        return cls(value=value)

    @classmethod
    def err(cls, kind: str, message: str) -> "ReadResult[T]":
        return cls(value=None, error_kind=kind, message=message)

    @property
    def is_ok(self) -> bool:
        return self.error_kind is None

    def value_or(self, default: T) -> T:
        if self.is_ok and self.value is not None:
            return self.value
        return default


@dataclass(frozen=True)
class TransactionHandle:
    """Proof that the wallet accepted and broadcast an entry-function call."""

    hash: str
    sender: Optional[str] = None
    function: str = ""


@dataclass(frozen=True)
class TransactionStatus:
    """Commit state of a submitted transaction."""

    hash: str
    state: str
    """One of ``pending``, ``success`` or ``failed``."""
    vm_status: str = ""

    @property
    def is_pending(self) -> bool:
        return self.state == "pending"

    @property
    def is_success(self) -> bool:
        return self.state == "success"


@dataclass(frozen=True)
class WalletSession:
    """Explicit identity and signing capability for one user action."""

    address: str
    signer: Optional["Signer"] = None

    @property
    def connected(self) -> bool:
        return self.signer is not None and bool(str(self.address or "").strip())


__all__ = [
    "BackerPledge",
    "CampaignMetadata",
    "CampaignRecord",
    "CampaignStatus",
    "CampaignView",
    "NO_PLEDGE",
    "ReadResult",
    "TransactionHandle",
    "TransactionStatus",
    "WalletSession",
]
