from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..domain.entities import NO_PLEDGE, BackerPledge, CampaignRecord, CampaignView
from ..domain.naming import normalize_address, short_address
from ..domain.status import derive_view
from ..usecases.campaign_repository import CampaignRepository
from ..usecases.transaction_orchestrator import WriteResult
from .status_format import (
    apt_label,
    days_left_label,
    deadline_label,
    progress_label,
    status_label,
)

log = logging.getLogger(__name__)


@dataclass
class CampaignDetailVM:
    """Owns the detail-page state for one campaign address at a time.

    Every load is tagged with a generation token. A response is applied only
    if its token is still current and it belongs to the address on screen, so
    navigating away mid-fetch never paints the old campaign onto the new page.
    """

    repository: CampaignRepository
    on_update: Optional[Callable[[Dict[str, Any]], None]] = None

    address: Optional[str] = None
    record: Optional[CampaignRecord] = None
    pledge: BackerPledge = NO_PLEDGE
    view: Optional[CampaignView] = None
    dto: Dict[str, Any] = field(default_factory=dict)
    _generation: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def begin_load(self, address: str) -> int:
        """Switch to ``address`` and return the token its response must carry."""
        with self._lock:
            self._generation += 1
            target = normalize_address(address)
            if target != self.address:
                self.record = None
                self.pledge = NO_PLEDGE
                self.view = None
                self.dto = {}
            self.address = target
            return self._generation

    def apply(
        self,
        token: int,
        address: str,
        record: Optional[CampaignRecord],
        pledge: Optional[BackerPledge] = None,
        *,
        viewer: Optional[str] = None,
        now: Any = None,
    ) -> bool:
        """Apply a fetched snapshot; returns False if it was stale and dropped."""
        with self._lock:
            target = normalize_address(address)
            if token != self._generation or target != self.address:
                log.debug("Dropping stale campaign response for %s", target)
                return False
            self.record = record
            self.pledge = pledge or NO_PLEDGE
            self.view = derive_view(record, now, viewer, self.pledge) if record else None
            self.dto = self._build_dto(target, self.record, self.pledge, self.view)
            dto = dict(self.dto)
        if self.on_update:
            self.on_update(dto)
        return True

    def load(self, address: str, *, viewer: Optional[str] = None, now: Any = None) -> bool:
        token = self.begin_load(address)
        target = normalize_address(address)
        record = self.repository.get_campaign(target)
        pledge = self.repository.get_pledge(target, viewer) if viewer and record else NO_PLEDGE
        return self.apply(token, target, record, pledge, viewer=viewer, now=now)

    def refresh(self, *, viewer: Optional[str] = None, now: Any = None) -> bool:
        if not self.address:
            return False
        return self.load(self.address, viewer=viewer, now=now)

    def apply_write_result(
        self, result: WriteResult, *, viewer: Optional[str] = None, now: Any = None
    ) -> bool:
        """Adopt the state an orchestrated write read back, if it is for this page."""
        if result.record is None:
            return False
        with self._lock:
            token = self._generation
        pledge = result.pledge if result.pledge is not None else self.pledge
        return self.apply(token, result.campaign, result.record, pledge, viewer=viewer, now=now)

    # ------------------------------------------------------------------
    @staticmethod
    def _build_dto(
        address: str,
        record: Optional[CampaignRecord],
        pledge: BackerPledge,
        view: Optional[CampaignView],
    ) -> Dict[str, Any]:
        if record is None or view is None:
            return {"address": address, "short_address": short_address(address), "not_found": True}
        return {
            "address": address,
            "short_address": short_address(address),
            "not_found": False,
            "title": record.title or "Untitled campaign",
            "description": record.description,
            "creator": record.creator,
            "status": view.status.value,
            "status_label": status_label(view.status),
            "goal": apt_label(record.goal),
            "raised": apt_label(record.total_raised),
            "escrow": apt_label(record.escrow_balance),
            "progress_percent": view.progress_percent,
            "progress_label": progress_label(view.progress_percent),
            "progress_bar": view.progress_bar_percent,
            "deadline": deadline_label(record.deadline_timestamp),
            "days_left": days_left_label(view.days_left, view.status),
            "your_pledge": apt_label(pledge.amount),
            "pledge_refunded": pledge.refunded,
            "can_pledge": view.can_pledge,
            "can_claim": view.can_claim,
            "can_refund": view.can_refund,
        }
