"""Discovery use cases: enumerate, paginate and filter campaigns by status.

Listings fetch every candidate through the repository's bounded fan-out,
derive status with the shared deriver at a single ``now`` for the whole
listing, and keep registry order. Addresses whose record cannot be fetched
are dropped rather than failing the listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from crowdfund.domain.entities import CampaignRecord, CampaignStatus, CampaignView
from crowdfund.domain.errors import InvalidInput
from crowdfund.domain.naming import is_hex_address, normalize_address
from crowdfund.domain.status import derive_status, derive_view
from crowdfund.domain.time_utils import coerce_epoch, now_seconds

from .campaign_repository import CampaignRepository

ALL = "all"
StatusFilter = Union[str, CampaignStatus, None]


def parse_status_filter(value: StatusFilter) -> Optional[CampaignStatus]:
    """Return the status to keep, or ``None`` for the identity "all" filter.

    Raises:
        InvalidInput: For unknown filter tokens.
    """
    if value is None or isinstance(value, CampaignStatus):
        return value
    token = str(value).strip().lower()
    if not token or token == ALL:
        return None
    try:
        return CampaignStatus(token)
    except ValueError:
        raise InvalidInput(f"Unknown status filter: {value!r}") from None


@dataclass(frozen=True)
class CampaignSummary:
    """A fetched campaign with its view at the listing's instant."""

    address: str
    record: CampaignRecord
    view: CampaignView


class DiscoveryIndex:
    """Registry-wide listing and filtering over ``CampaignRepository``."""

    def __init__(
        self,
        repository: CampaignRepository,
        *,
        clock: Callable[[], int] = now_seconds,
    ) -> None:
        self.repository = repository
        self._clock = clock

    def filter_by_status(
        self,
        addresses: Iterable[str],
        status_filter: StatusFilter = ALL,
        now: Any = None,
    ) -> List[str]:
        """Addresses whose derived status matches, in input order."""
        return [s.address for s in self.summaries(addresses, status_filter, now)]

    def partition(self, addresses: Iterable[str], now: Any = None) -> Dict[CampaignStatus, List[str]]:
        """Split fetched campaigns into disjoint Active/Successful/Failed buckets."""
        buckets: Dict[CampaignStatus, List[str]] = {status: [] for status in CampaignStatus}
        moment = self._now(now)
        for address, record in self._fetched(addresses):
            buckets[derive_status(record, moment)].append(address)
        return buckets

    def summaries(
        self,
        addresses: Iterable[str],
        status_filter: StatusFilter = ALL,
        now: Any = None,
        viewer: Optional[str] = None,
    ) -> List[CampaignSummary]:
        wanted = parse_status_filter(status_filter)
        moment = self._now(now)
        rows: List[CampaignSummary] = []
        for address, record in self._fetched(addresses):
            view = derive_view(record, moment, viewer)
            if wanted is None or view.status is wanted:
                rows.append(CampaignSummary(address=address, record=record, view=view))
        return rows

    def registry(self, status_filter: StatusFilter = ALL, now: Any = None) -> List[str]:
        """Every registered campaign matching the filter."""
        return self.filter_by_status(self.repository.list_all(), status_filter, now)

    def page(
        self,
        start: int,
        limit: int,
        status_filter: StatusFilter = ALL,
        now: Any = None,
    ) -> List[str]:
        """One registry page, then filtered; pages may come back short."""
        return self.filter_by_status(self.repository.list_paged(start, limit), status_filter, now)

    def find(self, address: str) -> Optional[CampaignRecord]:
        """Look up a campaign by (creator) address; ``None`` if unknown or invalid."""
        if not is_hex_address(str(address or "").strip()):
            return None
        return self.repository.get_campaign(normalize_address(address))

    # ------------------------------------------------------------------
    def _now(self, now: Any) -> int:
        return self._clock() if now is None else coerce_epoch(now)

    def _fetched(self, addresses: Iterable[str]) -> List[tuple]:
        ordered = [normalize_address(a) for a in addresses]
        records = self.repository.get_many(ordered)
        fetched = []
        seen = set()
        for address in ordered:
            if address in seen:
                continue
            seen.add(address)
            record = records.get(address)
            if record is not None:
                fetched.append((address, record))
        return fetched


__all__ = ["ALL", "CampaignSummary", "DiscoveryIndex", "parse_status_filter"]
