"""Typed, fail-soft reads of campaign state from the ledger.

Every read swallows ledger failures after logging them and hands back a
typed default: ``None`` for a record, the zero pledge, an empty address list,
``False`` or ``0``. ``fetch_campaign`` additionally exposes the outcome as a
``ReadResult`` for callers that want to tell "absent" from "failed".

Call context:
    - ``DiscoveryIndex`` for listings, ``TransactionOrchestrator`` for
      post-write refreshes, and ``CampaignDetailVM`` for the detail page.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Sequence

from crowdfund.domain.entities import (
    NO_PLEDGE,
    BackerPledge,
    CampaignRecord,
    ReadResult,
)
from crowdfund.domain.errors import LedgerError
from crowdfund.domain.metadata import parse_metadata
from crowdfund.domain.naming import normalize_address
from crowdfund.domain.ports import LedgerPort
from crowdfund.domain.settings import LedgerSettings

log = logging.getLogger(__name__)

CAMPAIGN_INFO_FIELDS = 8


def _u64(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected integer, got bool")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValueError(f"expected unsigned integer, got {value!r}")
        number = int(text)
    if number < 0:
        raise ValueError(f"expected unsigned integer, got {value!r}")
    return number


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ValueError(f"expected bool, got {value!r}")


def record_from_tuple(address: str, raw: Sequence[Any]) -> CampaignRecord:
    """Build a record from the ``get_campaign_info`` result tuple.

    Raises:
        ValueError: If the tuple is short or a numeric/bool field is malformed.
    """
    if len(raw) < CAMPAIGN_INFO_FIELDS:
        raise ValueError(f"expected {CAMPAIGN_INFO_FIELDS} fields, got {len(raw)}")
    return CampaignRecord(
        address=normalize_address(address),
        creator=normalize_address(raw[0]),
        goal=_u64(raw[1]),
        total_raised=_u64(raw[2]),
        deadline_timestamp=_u64(raw[3]),
        metadata=parse_metadata(raw[4]),
        funds_claimed=_flag(raw[5]),
        total_refunded=_u64(raw[6]),
        escrow_balance=_u64(raw[7]),
    )


def pledge_from_tuple(raw: Sequence[Any]) -> BackerPledge:
    if len(raw) < 2:
        raise ValueError(f"expected 2 fields, got {len(raw)}")
    return BackerPledge(amount=_u64(raw[0]), refunded=_flag(raw[1]))


class CampaignRepository:
    """Normalize ledger view results into typed campaign records."""

    def __init__(self, ledger: LedgerPort, settings: LedgerSettings) -> None:
        self.ledger = ledger
        self.settings = settings

    # ------------------------------------------------------------------
    # Single campaign
    # ------------------------------------------------------------------
    def fetch_campaign(self, address: str) -> ReadResult[CampaignRecord]:
        target = normalize_address(address)
        result = self._read("get_campaign_info", [target])
        if not result.is_ok:
            return ReadResult.err(result.error_kind or "unknown", result.message)
        try:
            return ReadResult.ok(record_from_tuple(target, result.value or []))
        except ValueError as exc:
            log.warning("get_campaign_info[%s] returned malformed data: %s", target, exc)
            return ReadResult.err("malformed", str(exc))

    def get_campaign(self, address: str) -> Optional[CampaignRecord]:
        return self.fetch_campaign(address).value

    def get_pledge(self, campaign: str, backer: str) -> BackerPledge:
        """Return the backer's pledge, or the zero pledge when absent or failed."""
        if not str(backer or "").strip():
            return NO_PLEDGE
        result = self._read(
            "get_backer_pledge", [normalize_address(campaign), normalize_address(backer)]
        )
        if not result.is_ok:
            return NO_PLEDGE
        try:
            return pledge_from_tuple(result.value or [])
        except ValueError as exc:
            log.warning("get_backer_pledge returned malformed data: %s", exc)
            return NO_PLEDGE

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def list_all(self) -> List[str]:
        result = self._read("get_all_campaigns", [self._registry])
        return self._addresses(result)

    def total_count(self) -> int:
        result = self._read("get_total_campaigns", [self._registry])
        return self._first_u64(result, "get_total_campaigns")

    def list_paged(self, start: int, limit: int) -> List[str]:
        """Return a contiguous registry slice in registry order.

        Out-of-range ``start`` and non-positive ``limit`` yield ``[]``; the
        slice is clipped so it never runs past the registry size.
        """
        try:
            begin, size = int(start), int(limit)
        except (TypeError, ValueError):
            return []
        if begin < 0 or size <= 0:
            return []
        total = self.total_count()
        if begin >= total:
            return []
        count = min(size, total - begin)
        result = self._read("get_campaigns_paginated", [self._registry, begin, count])
        return self._addresses(result)[:count]

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------
    def fetch_many(self, addresses: Iterable[str]) -> Dict[str, ReadResult[CampaignRecord]]:
        """Fetch many records with at most ``max_concurrent_reads`` in flight."""
        unique: List[str] = []
        seen = set()
        for address in addresses:
            key = normalize_address(address)
            if key and key not in seen:
                seen.add(key)
                unique.append(key)
        if not unique:
            return {}
        workers = min(self.settings.max_concurrent_reads, len(unique))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self.fetch_campaign, unique))
        return dict(zip(unique, results))

    def get_many(self, addresses: Iterable[str]) -> Dict[str, Optional[CampaignRecord]]:
        return {key: result.value for key, result in self.fetch_many(addresses).items()}

    # ------------------------------------------------------------------
    # Ledger-side helpers
    # ------------------------------------------------------------------
    def campaign_exists(self, address: str) -> bool:
        return self._first_bool(self._read("campaign_exists", [normalize_address(address)]))

    def is_campaign_active(self, address: str) -> bool:
        return self._first_bool(self._read("is_campaign_active", [normalize_address(address)]))

    def is_campaign_successful(self, address: str) -> bool:
        return self._first_bool(self._read("is_campaign_successful", [normalize_address(address)]))

    def get_progress_bps(self, address: str) -> int:
        """Ledger-computed progress in basis points (5000 == 50.00%)."""
        result = self._read("get_progress_percentage", [normalize_address(address)])
        return self._first_u64(result, "get_progress_percentage")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _registry(self) -> str:
        return normalize_address(self.settings.registry_address)

    def _read(self, name: str, args: List[Any]) -> ReadResult[List[Any]]:
        try:
            return ReadResult.ok(list(self.ledger.query(name, args)))
        except LedgerError as exc:
            log.warning("%s%s failed (%s): %s", name, args, exc.kind, exc.message)
            return ReadResult.err(exc.kind, exc.message)
        except Exception as exc:
            log.exception("%s%s failed unexpectedly", name, args)
            return ReadResult.err("unexpected", str(exc) or exc.__class__.__name__)

    @staticmethod
    def _addresses(result: ReadResult[List[Any]]) -> List[str]:
        if not result.is_ok or not result.value:
            return []
        first = result.value[0]
        if not isinstance(first, (list, tuple)):
            log.warning("Registry view returned %r instead of an address list", first)
            return []
        return [normalize_address(item) for item in first if str(item or "").strip()]

    @staticmethod
    def _first_u64(result: ReadResult[List[Any]], name: str) -> int:
        if not result.is_ok or not result.value:
            return 0
        try:
            return _u64(result.value[0])
        except ValueError as exc:
            log.warning("%s returned malformed data: %s", name, exc)
            return 0

    @staticmethod
    def _first_bool(result: ReadResult[List[Any]]) -> bool:
        if not result.is_ok or not result.value:
            return False
        try:
            return _flag(result.value[0])
        except ValueError:
            return False


__all__ = ["CampaignRepository", "pledge_from_tuple", "record_from_tuple"]
