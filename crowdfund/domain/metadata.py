from __future__ import annotations

"""Codec for the opaque metadata blob stored alongside each campaign.

The program never inspects the blob. Clients write a JSON object with
``title`` and ``description``; anything else read back is untrusted and
degrades to empty fields instead of raising.
"""

import json
import logging
from typing import Any

from .entities import CampaignMetadata

log = logging.getLogger(__name__)

EMPTY_METADATA = CampaignMetadata()


def _maybe_hex_utf8(text: str) -> str:
    """Decode ``0x``-prefixed ``vector<u8>`` payloads into text."""
    if not text.startswith("0x"):
        return text
    body = text[2:]
    if len(body) % 2:
        return text
    try:
        return bytes.fromhex(body).decode("utf-8")
    except ValueError:
        return text


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def parse_metadata(blob: Any) -> CampaignMetadata:
    """Parse a metadata blob into title and description.

    Malformed or too deeply nested JSON, non-object payloads and non-string
    fields yield empty strings.
    """
    if isinstance(blob, CampaignMetadata):
        return blob
    if isinstance(blob, (bytes, bytearray)):
        try:
            blob = bytes(blob).decode("utf-8")
        except UnicodeDecodeError:
            return EMPTY_METADATA
    if isinstance(blob, dict):
        data: Any = blob
    elif isinstance(blob, str):
        text = _maybe_hex_utf8(blob.strip())
        if not text:
            return EMPTY_METADATA
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            log.debug("Metadata is not JSON; using empty fallback")
            return EMPTY_METADATA
    else:
        return EMPTY_METADATA

    if not isinstance(data, dict):
        return EMPTY_METADATA
    return CampaignMetadata(
        title=_text(data.get("title")).strip(),
        description=_text(data.get("description")).strip(),
    )


def encode_metadata(title: str, description: str) -> str:
    """Serialize title and description into the on-chain blob format."""
    return json.dumps(
        {"title": (title or "").strip(), "description": (description or "").strip()},
        ensure_ascii=False,
    )


__all__ = ["EMPTY_METADATA", "encode_metadata", "parse_metadata"]
