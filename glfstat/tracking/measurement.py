from __future__ import annotations

from enum import Enum
from typing import List

from glfstat.errors import ValidationError
from glfstat.utils.numbers import round_half_up

from .geo import Fix, haversine_m


class MeasurementState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


class DistanceMeasurement:
    """Accumulates walked path length over a sequence of fixes.

    ``idle -> tracking`` on :meth:`start`, ``tracking -> idle`` on
    :meth:`complete` or :meth:`reset`. The running total is the sum of legs
    between consecutive fixes, updated incrementally as fixes arrive.
    """

    def __init__(self) -> None:
        self.state = MeasurementState.IDLE
        self._fixes: List[Fix] = []
        self._distance_m = 0.0

    @property
    def fixes(self) -> List[Fix]:
        return list(self._fixes)

    @property
    def start_fix(self) -> Fix | None:
        return self._fixes[0] if self._fixes else None

    @property
    def distance_m(self) -> float:
        return self._distance_m

    @property
    def rounded_distance_m(self) -> int:
        return round_half_up(self._distance_m)

    def start(self, fix: Fix) -> None:
        if self.state is MeasurementState.TRACKING:
            raise ValidationError("measurement already tracking")
        self._fixes = [fix]
        self._distance_m = 0.0
        self.state = MeasurementState.TRACKING

    def add_fix(self, fix: Fix) -> float:
        if self.state is not MeasurementState.TRACKING:
            raise ValidationError("measurement is not tracking")
        self._distance_m += haversine_m(self._fixes[-1], fix)
        self._fixes.append(fix)
        return self._distance_m

    def complete(self) -> int:
        if self.state is not MeasurementState.TRACKING:
            raise ValidationError("measurement is not tracking")
        distance = self.rounded_distance_m
        self.reset()
        return distance

    def reset(self) -> None:
        self._fixes = []
        self._distance_m = 0.0
        self.state = MeasurementState.IDLE


__all__ = ["DistanceMeasurement", "MeasurementState"]
