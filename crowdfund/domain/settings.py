from __future__ import annotations

"""Typed runtime settings for the ledger, confirmation polling and proxies."""

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

DEFAULT_NODE_URL = "https://fullnode.testnet.aptoslabs.com/v1"
DEFAULT_MODULE_ADDRESS = "0x81810d53b183eca4645f5bc37fe2cfb3d53af83ed8a6af3b4df7b04f703c8050"
DEFAULT_MODULE_NAME = "crowdfund"

_ENV_PREFIX = "CROWDFUND_"


@dataclass(frozen=True)
class LedgerSettings:
    """Connection and pacing settings shared by adapters and use cases."""

    node_url: str = DEFAULT_NODE_URL
    module_address: str = DEFAULT_MODULE_ADDRESS
    module_name: str = DEFAULT_MODULE_NAME
    registry_address: str = DEFAULT_MODULE_ADDRESS
    request_timeout_s: float = 10.0
    retries: int = 2
    max_concurrent_reads: int = 8
    confirm_timeout_s: float = 60.0
    confirm_poll_interval_ms: int = 500
    confirm_backoff_max_ms: int = 4000
    suggest_url: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("node_url", "module_address", "module_name", "registry_address"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string.")
        if self.request_timeout_s <= 0 or self.confirm_timeout_s <= 0:
            raise ValueError("Timeouts must be positive.")
        if self.retries < 0:
            raise ValueError("retries cannot be negative.")
        if self.max_concurrent_reads < 1:
            raise ValueError("max_concurrent_reads must be at least 1.")
        if self.confirm_poll_interval_ms < 1 or self.confirm_backoff_max_ms < 1:
            raise ValueError("Confirmation poll intervals must be positive.")

    @property
    def function_prefix(self) -> str:
        return f"{self.module_address}::{self.module_name}"

    def with_overrides(self, **changes: Any) -> "LedgerSettings":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerSettings":
        """Build settings from loosely typed values, ignoring unknown keys.

        Raises:
            ValueError: If a value cannot be coerced or fails validation.
        """
        kwargs: Dict[str, Any] = {}
        for item in fields(cls):
            if item.name not in data:
                continue
            raw = data[item.name]
            kwargs[item.name] = _coerce(item.name, _default_of(item.name), raw)
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerSettings":
        """Read ``CROWDFUND_<FIELD>`` variables over the testnet defaults."""
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for item in fields(cls):
            value = env.get(_ENV_PREFIX + item.name.upper())
            if value is not None and value.strip():
                data[item.name] = value
        return cls.from_mapping(data)


def _default_of(name: str) -> Any:
    return getattr(LedgerSettings, name, None)


def _coerce(name: str, default: Any, value: Any) -> Any:
    if name == "suggest_url":
        text = str(value or "").strip()
        return text or None
    if isinstance(default, int):
        return _coerce_int(name, value)
    if isinstance(default, float):
        return _coerce_float(name, value)
    text = str(value if value is not None else "").strip()
    if name == "node_url":
        text = text.rstrip("/")
    return text


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer") from None


def _coerce_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number")
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number") from None


__all__ = ["LedgerSettings", "DEFAULT_NODE_URL", "DEFAULT_MODULE_ADDRESS", "DEFAULT_MODULE_NAME"]
