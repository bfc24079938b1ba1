"""Numeric helpers shared by the statistics engine and the distance tracker."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, not 2)."""

    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent(part: int, total: int) -> int:
    if total == 0:
        return 0
    return round_half_up(100 * part / total)


def is_non_negative_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


__all__ = ["is_non_negative_number", "percent", "round_half_up"]
