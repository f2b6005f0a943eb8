from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_VARS = ("CROWDFUND_LOG_LEVEL",)
DEBUG_VARS = ("CROWDFUND_DEBUG_LOGGING", "CROWDFUND_DEBUG")
_TRUTHY = frozenset({"1", "true", "yes", "on"})
# Third-party loggers kept quiet unless DEBUG is requested.
_CHATTY = ("urllib3",)


def parse_level(value: Union[int, str, None], fallback: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a level number."""
    if isinstance(value, int):
        return value
    token = (value or "").strip()
    if token.isdigit():
        return int(token)
    level = getattr(logging, token.upper(), None) if token else None
    return level if isinstance(level, int) else fallback


def resolve_env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when nothing is set."""
    env = os.environ if environ is None else environ
    explicit = next((env[name] for name in LEVEL_VARS if env.get(name)), None)
    if explicit is not None:
        return parse_level(explicit)
    if any((env.get(name) or "").strip().lower() in _TRUTHY for name in DEBUG_VARS):
        return logging.DEBUG
    return None


def configure_root(
    default_level: Union[int, str] = logging.INFO,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Set up root logging once and return the level in effect.

    Environment overrides:
      - CROWDFUND_LOG_LEVEL: explicit level name or number
      - CROWDFUND_DEBUG_LOGGING / CROWDFUND_DEBUG: truthy -> DEBUG
    """
    forced = resolve_env_level(environ)
    level = forced if forced is not None else parse_level(default_level)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    quiet = level if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY:
        logging.getLogger(name).setLevel(quiet)
    return level


def level_name(level: int) -> str:
    return logging.getLevelName(level)
