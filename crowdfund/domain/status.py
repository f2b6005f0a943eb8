from __future__ import annotations

"""Campaign lifecycle and permission derivation.

This is the single place that decides whether a campaign is active,
successful or failed, how far it is funded, and what a given viewer may do
with it. Everything here is pure and total: malformed numbers are read as
zero and no input combination raises.
"""

from typing import Any, Optional

from .entities import (
    NO_PLEDGE,
    BackerPledge,
    CampaignRecord,
    CampaignStatus,
    CampaignView,
)
from .naming import same_address
from .time_utils import coerce_epoch, days_until


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        try:
            return int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return 0


def status_of(
    *,
    deadline_timestamp: Any,
    goal: Any,
    total_raised: Any,
    funds_claimed: Any,
    now: Any,
) -> CampaignStatus:
    """Status from raw fields.

    A claimed campaign is never active, even before its deadline.
    """
    is_expired = coerce_epoch(now) >= _int(deadline_timestamp)
    if not is_expired and not bool(funds_claimed):
        return CampaignStatus.ACTIVE
    if _int(total_raised) >= _int(goal):
        return CampaignStatus.SUCCESSFUL
    return CampaignStatus.FAILED


def derive_status(record: CampaignRecord, now: Any = None) -> CampaignStatus:
    return status_of(
        deadline_timestamp=record.deadline_timestamp,
        goal=record.goal,
        total_raised=record.total_raised,
        funds_claimed=record.funds_claimed,
        now=now,
    )


def progress_percent(goal: Any, total_raised: Any) -> float:
    """Raised over goal in percent; a non-positive goal reports ``0``."""
    goal_value = _int(goal)
    if goal_value <= 0:
        return 0.0
    try:
        return max(0.0, _int(total_raised) / goal_value * 100.0)
    except OverflowError:
        return float("inf")


def progress_bar_percent(percent: Any) -> float:
    try:
        value = float(percent)
    except (TypeError, ValueError):
        return 0.0
    if value != value:  # NaN
        return 0.0
    return min(max(value, 0.0), 100.0)


def derive_view(
    record: CampaignRecord,
    now: Any = None,
    viewer: Optional[str] = None,
    pledge: Optional[BackerPledge] = None,
) -> CampaignView:
    """Project ``record`` into what ``viewer`` sees at ``now``.

    Claim and refund need disjoint statuses, so at most one of them is ever
    offered.
    """
    now_s = coerce_epoch(now)
    status = derive_status(record, now_s)
    backing = pledge if pledge is not None else NO_PLEDGE
    percent = progress_percent(record.goal, record.total_raised)

    can_claim = (
        viewer is not None
        and same_address(viewer, record.creator)
        and status is CampaignStatus.SUCCESSFUL
        and not bool(record.funds_claimed)
    )
    can_refund = (
        status is CampaignStatus.FAILED
        and _int(backing.amount) > 0
        and not bool(backing.refunded)
    )
    deadline = _int(record.deadline_timestamp)
    return CampaignView(
        status=status,
        progress_percent=percent,
        progress_bar_percent=progress_bar_percent(percent),
        can_pledge=status is CampaignStatus.ACTIVE,
        can_claim=can_claim,
        can_refund=can_refund,
        seconds_remaining=max(0, deadline - now_s),
        days_left=days_until(deadline, now_s),
    )


__all__ = [
    "derive_status",
    "derive_view",
    "progress_bar_percent",
    "progress_percent",
    "status_of",
]
