"""Tick ↔ price conversion for concentrated-liquidity ranges.

``price_to_tick(tick_to_price(t)) == t`` except when float rounding puts
``tick_to_price(t)`` a hair below the exact tick boundary, in which case the
result is ``t - 1``. That boundary imprecision is accepted and not corrected.
"""

from __future__ import annotations

import math

from restake_validator.core.core_constants import TICK_BASE

_LOG_BASE = math.log(TICK_BASE)


def tick_to_price(tick: int) -> float:
    return TICK_BASE ** tick


def price_to_tick(price: float) -> int:
    if price <= 0:
        raise ValueError(f"price must be positive, got {price!r}")
    return math.floor(math.log(price) / _LOG_BASE)


__all__ = ["tick_to_price", "price_to_tick"]
