from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from crowdfund.domain.ports import SuggestionPort, UseCaseError

log = logging.getLogger(__name__)

DEFAULT_GOAL = "100"


@dataclass
class SuggestDescription:
    """Ask the suggestion proxy for a campaign description draft.

    Any answer without a usable ``description`` is a soft failure: logged and
    reported as ``None`` so the form keeps whatever the user typed.
    """

    port: Optional[SuggestionPort]

    def __call__(self, title: str, goal: Any = "") -> Optional[str]:
        clean_title = (title or "").strip()
        if not clean_title:
            raise UseCaseError("INVALID_INPUT", "Please enter a campaign title first.")
        if self.port is None:
            log.info("Suggestion service not configured")
            return None
        goal_text = str(goal).strip() if goal is not None else ""
        try:
            data = self.port.suggest(clean_title, goal_text or DEFAULT_GOAL)
        except Exception as exc:
            log.warning("Description suggestion failed: %s", exc)
            return None

        description = data.get("description") if isinstance(data, dict) else None
        if isinstance(description, str) and description.strip():
            return description.strip()
        reason = data.get("error") if isinstance(data, dict) else None
        log.warning("Description suggestion unavailable: %s", reason or "no description returned")
        return None
