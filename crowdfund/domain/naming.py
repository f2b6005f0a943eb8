from __future__ import annotations

"""Account and campaign address normalization."""

import string
from typing import Any

_HEX_DIGITS = frozenset(string.hexdigits)
ADDRESS_HEX_LENGTH = 64


def is_hex_address(value: Any) -> bool:
    """Return True for ``0x``-prefixed hex strings of at most 32 bytes."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not text.lower().startswith("0x"):
        return False
    body = text[2:]
    return 0 < len(body) <= ADDRESS_HEX_LENGTH and all(ch in _HEX_DIGITS for ch in body)


def normalize_address(value: Any) -> str:
    """Return the canonical long form of an address.

    Hex addresses become ``0x`` plus 64 lower-case digits so short and long
    spellings compare equal. Other values are stripped and lower-cased.
    """
    if value is None:
        return ""
    text = str(value).strip()
    if is_hex_address(text):
        return "0x" + text[2:].lower().rjust(ADDRESS_HEX_LENGTH, "0")
    return text.lower()


def same_address(left: Any, right: Any) -> bool:
    """Compare two addresses after normalization; empty never matches."""
    a = normalize_address(left)
    return bool(a) and a == normalize_address(right)


def short_address(value: Any, head: int = 6, tail: int = 4) -> str:
    """Abbreviate an address for display, e.g. ``0x1234...abcd``."""
    text = str(value or "").strip()
    if len(text) <= head + tail + 3:
        return text
    return f"{text[:head]}...{text[-tail:]}"


__all__ = ["is_hex_address", "normalize_address", "same_address", "short_address"]
