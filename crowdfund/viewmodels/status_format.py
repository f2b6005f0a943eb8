"""Display labeling helpers for view models.

Call context:
    ``CampaignDetailVM`` and ``CampaignListVM`` call these helpers to map
    domain values into consistent user-facing text.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from crowdfund.domain.entities import CampaignStatus
from crowdfund.domain.units import format_display


def status_label(status: Optional[CampaignStatus]) -> str:
    mapping = {
        CampaignStatus.ACTIVE: "Active",
        CampaignStatus.SUCCESSFUL: "Successful",
        CampaignStatus.FAILED: "Failed",
    }
    return mapping.get(status, "Unknown")


def apt_label(raw: Any, places: int = 2) -> str:
    """Format octas as ``"1.50 APT"``."""
    return f"{format_display(raw, places)} APT"


def progress_label(percent: Any) -> str:
    try:
        value = float(percent)
    except (TypeError, ValueError):
        value = 0.0
    if value != value or value == float("inf"):
        return "-"
    return f"{value:.1f}%"


def days_left_label(days: int, status: Optional[CampaignStatus] = None) -> str:
    if status is not None and status is not CampaignStatus.ACTIVE:
        return "Ended"
    if days <= 0:
        return "Ended"
    return "1 day left" if days == 1 else f"{days} days left"


def deadline_label(timestamp: Any) -> str:
    """UTC calendar date of an epoch deadline; empty when out of range."""
    try:
        moment = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return ""
    return moment.strftime("%Y-%m-%d")


__all__ = ["apt_label", "days_left_label", "deadline_label", "progress_label", "status_label"]
