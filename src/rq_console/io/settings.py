"""Runtime settings resolved from the environment.

There are no config files; every knob is an RQ_* environment variable,
normalized once at startup into a frozen snapshot.

// [LAW:one-source-of-truth] load_settings() is the only reader of RQ_TIMEOUT / RQ_TICK_MS.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
MIN_TIMEOUT_SECONDS = 1.0
DEFAULT_TICK_MS = 250
MIN_TICK_MS = 20
MAX_TICK_MS = 2000


def _normalize_float(value: object, *, default: float) -> float:
    try:
        parsed = float(str(value).strip()) if value is not None else default
    except (TypeError, ValueError):
        parsed = default
    if parsed != parsed:  # NaN
        return default
    return parsed


def _normalize_int(value: object, *, default: int) -> int:
    try:
        parsed = int(str(value).strip()) if value is not None else default
    except (TypeError, ValueError):
        parsed = default
    return parsed


def _normalize_timeout(value: object) -> float:
    return max(MIN_TIMEOUT_SECONDS, _normalize_float(value, default=DEFAULT_TIMEOUT_SECONDS))


def _normalize_tick_ms(value: object) -> int:
    return min(MAX_TICK_MS, max(MIN_TICK_MS, _normalize_int(value, default=DEFAULT_TICK_MS)))


@dataclass(frozen=True)
class RuntimeSettings:
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    tick_ms: int = DEFAULT_TICK_MS

    @property
    def tick_seconds(self) -> float:
        return self.tick_ms / 1000.0


def load_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    settings = RuntimeSettings(
        timeout=_normalize_timeout(env.get("RQ_TIMEOUT")),
        tick_ms=_normalize_tick_ms(env.get("RQ_TICK_MS")),
    )
    logger.debug("runtime settings %s", settings)
    return settings
