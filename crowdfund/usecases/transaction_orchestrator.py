from __future__ import annotations

"""Coordinator sequencing submit, confirmation and refresh for ledger writes."""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from crowdfund.domain.entities import (
    BackerPledge,
    CampaignRecord,
    TransactionHandle,
    TransactionStatus,
    WalletSession,
)
from crowdfund.domain.errors import InvalidInput, NetworkError, NotConnected, RemoteError
from crowdfund.domain.metadata import encode_metadata
from crowdfund.domain.naming import normalize_address
from crowdfund.domain.ports import LedgerPort, UseCaseError
from crowdfund.domain.settings import LedgerSettings
from crowdfund.domain.time_utils import deadline_from_days
from crowdfund.domain.units import parse_display_amount, to_raw

from .campaign_repository import CampaignRepository
from .error_mapping import map_ledger_error

log = logging.getLogger(__name__)


class OperationKind(str, Enum):
    CREATE = "create"
    PLEDGE = "pledge"
    CLAIM = "claim"
    REFUND = "refund"

    def __str__(self) -> str:
        return self.value


class OperationState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    REFRESHING = "refreshing"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


OperationKey = Tuple[str, OperationKind]


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a confirmed write plus the state read back afterwards."""

    kind: OperationKind
    campaign: str
    handle: TransactionHandle
    status: TransactionStatus
    record: Optional[CampaignRecord] = None
    """Campaign as read after confirmation; ``None`` if the refresh failed."""
    pledge: Optional[BackerPledge] = None
    """Caller's pledge after confirmation, for pledge and refund writes."""


@dataclass
class OrchestratorHooks:
    """Optional callbacks triggered on state transitions and outcomes."""

    on_state: Callable[[OperationKey, OperationState], None] = _noop
    on_error: Callable[[OperationKey, UseCaseError], None] = _noop
    on_refreshed: Callable[[WriteResult], None] = _noop

    def __post_init__(self) -> None:
        self.on_state = self.on_state or _noop
        self.on_error = self.on_error or _noop
        self.on_refreshed = self.on_refreshed or _noop


class TransactionOrchestrator:
    """Run one write at a time per (campaign, operation) through its lifecycle.

    ``Idle -> Submitting -> Confirmed -> Refreshing -> Idle`` on success and
    ``Submitting -> Failed -> Idle`` otherwise. Permissions are the caller's
    concern; the program rejects anything invalid and that reason is raised
    verbatim as a ``UseCaseError``.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        repository: CampaignRepository,
        settings: LedgerSettings,
        *,
        hooks: Optional[OrchestratorHooks] = None,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ledger = ledger
        self.repository = repository
        self.settings = settings
        self.hooks = hooks or OrchestratorHooks()
        self._sleep = sleep
        self._monotonic = monotonic
        self._guard = threading.Lock()
        self._locks: Dict[OperationKey, threading.Lock] = {}
        self._states: Dict[OperationKey, OperationState] = {}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def pledge(self, session: Optional[WalletSession], campaign: str, display_amount: Any) -> WriteResult:
        """Pledge ``display_amount`` APT to ``campaign``."""
        amount_raw = self._amount_raw(display_amount, field="Pledge amount")
        target = normalize_address(campaign)
        return self._run(
            OperationKind.PLEDGE,
            target,
            session,
            "pledge",
            [target, amount_raw],
            refresh_pledge=True,
        )

    def claim(self, session: Optional[WalletSession], campaign: str) -> WriteResult:
        """Withdraw the escrow of a successful campaign owned by the caller."""
        return self._run(
            OperationKind.CLAIM,
            normalize_address(campaign),
            session,
            "claim_funds",
            [],
            refresh_pledge=False,
        )

    def refund(self, session: Optional[WalletSession], campaign: str) -> WriteResult:
        """Reclaim the caller's pledge from a failed campaign."""
        target = normalize_address(campaign)
        return self._run(
            OperationKind.REFUND,
            target,
            session,
            "get_refund",
            [target],
            refresh_pledge=True,
        )

    def create_campaign(
        self,
        session: Optional[WalletSession],
        goal: Any,
        duration_days: Any,
        title: str,
        description: str = "",
        *,
        now: Any = None,
    ) -> WriteResult:
        """Create a campaign owned by the session's account.

        The campaign lives at the creator's address, which is also what gets
        refreshed afterwards.
        """
        goal_raw = self._amount_raw(goal, field="Goal")
        days = self._duration_days(duration_days)
        clean_title = (title or "").strip()
        if not clean_title:
            raise map_ledger_error(InvalidInput("Title is required."), default_code="INVALID_INPUT")
        deadline = deadline_from_days(days, now)
        creator = normalize_address(session.address) if session is not None else ""
        return self._run(
            OperationKind.CREATE,
            creator,
            session,
            "create_campaign",
            [
                goal_raw,
                deadline,
                encode_metadata(clean_title, description),
                normalize_address(self.settings.registry_address),
            ],
            refresh_pledge=False,
        )

    def state(self, campaign: str, kind: OperationKind) -> OperationState:
        key = (normalize_address(campaign), OperationKind(kind))
        with self._guard:
            return self._states.get(key, OperationState.IDLE)

    def in_flight(self) -> List[OperationKey]:
        with self._guard:
            return [key for key, state in self._states.items() if state is not OperationState.IDLE]

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------
    def wait_for_confirmation(self, handle: TransactionHandle) -> TransactionStatus:
        """Poll the commit state of ``handle`` with exponential backoff.

        Raises:
            RemoteError: The transaction committed but aborted.
            NetworkError: It did not commit within ``confirm_timeout_s``.
        """
        deadline = self._monotonic() + self.settings.confirm_timeout_s
        delay_ms = self.settings.confirm_poll_interval_ms
        while True:
            try:
                status = self.ledger.transaction_status(handle.hash)
            except NetworkError as exc:
                log.debug("Status poll for %s failed: %s", handle.hash, exc)
                status = TransactionStatus(hash=handle.hash, state="pending")
            if status.is_success:
                return status
            if not status.is_pending:
                raise RemoteError(
                    status.vm_status or "Transaction failed.",
                    context=f"transaction[{handle.hash}]",
                )
            if self._monotonic() >= deadline:
                raise NetworkError(
                    f"Timed out waiting for transaction {handle.hash}",
                    context=f"transaction[{handle.hash}]",
                )
            self._sleep(delay_ms / 1000.0)
            delay_ms = min(delay_ms * 2, self.settings.confirm_backoff_max_ms)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _run(
        self,
        kind: OperationKind,
        campaign: str,
        session: Optional[WalletSession],
        entry_point: str,
        args: List[Any],
        *,
        refresh_pledge: bool,
    ) -> WriteResult:
        key: OperationKey = (campaign, kind)
        if not self._claim(key):
            raise UseCaseError(
                "WRITE_IN_FLIGHT",
                f"A {kind} for this campaign is already in progress.",
            )
        try:
            self._set_state(key, OperationState.SUBMITTING)
            try:
                if session is None or not session.connected:
                    raise NotConnected()
                handle = self.ledger.submit(entry_point, args, session.signer)
                status = self.wait_for_confirmation(handle)
            except Exception as exc:
                err = map_ledger_error(exc, default_code="SUBMIT_FAILED")
                self._set_state(key, OperationState.FAILED)
                log.error("%s on %s failed: %s", kind, campaign or "<none>", err.message)
                self.hooks.on_error(key, err)
                raise err from exc

            self._set_state(key, OperationState.CONFIRMED)
            self._set_state(key, OperationState.REFRESHING)
            record = self.repository.get_campaign(campaign) if campaign else None
            pledge = (
                self.repository.get_pledge(campaign, session.address) if refresh_pledge else None
            )
            result = WriteResult(
                kind=kind,
                campaign=campaign,
                handle=handle,
                status=status,
                record=record,
                pledge=pledge,
            )
            self.hooks.on_refreshed(result)
            return result
        finally:
            self._set_state(key, OperationState.IDLE)
            self._release(key)

    def _claim(self, key: OperationKey) -> bool:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            return lock.acquire(blocking=False)

    def _release(self, key: OperationKey) -> None:
        # Claims only happen under the guard, so nobody waits on a released lock.
        with self._guard:
            lock = self._locks.pop(key, None)
            if lock is not None:
                lock.release()

    def _set_state(self, key: OperationKey, state: OperationState) -> None:
        with self._guard:
            if state is OperationState.IDLE:
                self._states.pop(key, None)
            else:
                self._states[key] = state
        log.debug("%s %s -> %s", key[1], key[0] or "<none>", state)
        self.hooks.on_state(key, state)

    @staticmethod
    def _amount_raw(value: Any, *, field: str) -> int:
        try:
            amount = parse_display_amount(value, field=field)
        except InvalidInput as exc:
            raise map_ledger_error(exc, default_code="INVALID_INPUT") from exc
        raw = to_raw(amount)
        if raw <= 0:
            raise UseCaseError("INVALID_INPUT", f"{field} is smaller than one octa.")
        return raw

    @staticmethod
    def _duration_days(value: Any) -> int:
        if isinstance(value, bool):
            raise UseCaseError("INVALID_INPUT", "Duration must be a whole number of days.")
        try:
            days = int(str(value).strip())
        except (TypeError, ValueError):
            raise UseCaseError("INVALID_INPUT", "Duration must be a whole number of days.") from None
        if days < 1:
            raise UseCaseError("INVALID_INPUT", "Duration must be at least one day.")
        return days


__all__ = [
    "OperationKind",
    "OperationState",
    "OrchestratorHooks",
    "TransactionOrchestrator",
    "WriteResult",
]
