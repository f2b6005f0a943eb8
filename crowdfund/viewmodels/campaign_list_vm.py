from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..domain.errors import InvalidInput
from ..domain.naming import normalize_address, short_address
from ..domain.ports import UseCaseError
from ..usecases.discovery_index import ALL, CampaignSummary, DiscoveryIndex, parse_status_filter
from .status_format import apt_label, days_left_label, progress_label, status_label

Row = Dict[str, Any]


@dataclass
class CampaignListVM:
    """Listing state for the campaign grid: filter, tracked addresses, rows."""

    index: DiscoveryIndex
    on_update: Optional[Callable[[List[Row]], None]] = None

    status_filter: str = ALL
    tracked: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    def set_filter(self, token: str) -> None:
        try:
            parsed = parse_status_filter(token)
        except InvalidInput as exc:
            raise UseCaseError("INVALID_INPUT", exc.message) from exc
        self.status_filter = parsed.value if parsed is not None else ALL

    def track(self, address: str) -> bool:
        """Add a searched address if it resolves to a campaign."""
        target = normalize_address(address)
        if not target or target in self.tracked:
            return False
        if self.index.find(target) is None:
            return False
        self.tracked.append(target)
        return True

    def load(self, *, include_registry: bool = True, viewer: Optional[str] = None, now: Any = None) -> List[Row]:
        """Rebuild rows from tracked addresses plus, optionally, the registry."""
        addresses = list(self.tracked)
        if include_registry:
            addresses.extend(self.index.repository.list_all())
        return self._publish(addresses, viewer, now)

    def load_page(self, start: int, limit: int, *, viewer: Optional[str] = None, now: Any = None) -> List[Row]:
        """Rows for one registry page; the filter applies after paging."""
        return self._publish(self.index.repository.list_paged(start, limit), viewer, now)

    def _publish(self, addresses: List[str], viewer: Optional[str], now: Any) -> List[Row]:
        summaries = self.index.summaries(addresses, self.status_filter, now, viewer)
        self.rows = [self.to_row(s) for s in summaries]
        if self.on_update:
            self.on_update(list(self.rows))
        return self.rows

    @staticmethod
    def to_row(summary: CampaignSummary) -> Row:
        record, view = summary.record, summary.view
        return {
            "address": summary.address,
            "short_address": short_address(summary.address),
            "title": record.title or "Untitled campaign",
            "status": view.status.value,
            "status_label": status_label(view.status),
            "raised": apt_label(record.total_raised),
            "goal": apt_label(record.goal),
            "progress_label": progress_label(view.progress_percent),
            "progress_bar": view.progress_bar_percent,
            "days_left": days_left_label(view.days_left, view.status),
        }
