"""One distance tracker per (round, hole), committing through the shot service.

Trackers exist only while a measurement on that hole is starting or
pending; lookups never create one.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from glfstat.config import get_settings
from glfstat.errors import MeasurementNotFound
from glfstat.rounds.models import Shot
from glfstat.rounds.service import RoundShotService, get_round_service

from .geo import Fix
from .sources import PushPositionSource
from .tracker import DistanceTracker, MeasurementKey, MeasurementSession

logger = logging.getLogger(__name__)

HoleKey = Tuple[str, str]


class MeasurementRegistry:
    def __init__(
        self,
        service: RoundShotService,
        *,
        fix_timeout_s: float,
        queue_size: int = 100,
    ) -> None:
        self._service = service
        self._fix_timeout_s = fix_timeout_s
        self._queue_size = queue_size
        self._trackers: Dict[HoleKey, DistanceTracker] = {}

    @property
    def fix_timeout_s(self) -> float:
        return self._fix_timeout_s

    def tracked_holes(self) -> List[HoleKey]:
        return list(self._trackers)

    def new_source(self) -> PushPositionSource:
        return PushPositionSource(maxsize=self._queue_size)

    def _create(self, round_id: str, hole_id: str) -> DistanceTracker:
        def _commit(measurement: MeasurementKey, distance: int) -> Shot:
            return self._service.update_shot_distance(
                round_id,
                hole_id,
                measurement.shot_number,
                measurement.player_id,
                distance,
            )

        return DistanceTracker(
            _commit,
            self.new_source,
            fix_timeout_s=self._fix_timeout_s,
        )

    def _find(
        self, round_id: str, hole_id: str, player_id: str, shot_number: int
    ) -> DistanceTracker:
        tracker = self._trackers.get((round_id, str(hole_id)))
        if tracker is None:
            raise MeasurementNotFound(player_id, shot_number)
        return tracker

    def _release(self, key: HoleKey) -> None:
        tracker = self._trackers.get(key)
        if tracker is not None and tracker.idle:
            del self._trackers[key]

    def pending(self, round_id: str, hole_id: str) -> List[MeasurementSession]:
        tracker = self._trackers.get((round_id, str(hole_id)))
        return tracker.pending() if tracker is not None else []

    async def start(
        self,
        round_id: str,
        hole_id: str,
        player_id: str,
        shot_number: int,
        first_fix: Optional[Fix] = None,
    ) -> MeasurementSession:
        key = (round_id, str(hole_id))
        tracker = self._trackers.get(key)
        if tracker is None:
            tracker = self._trackers[key] = self._create(round_id, str(hole_id))
        source = self.new_source()
        if first_fix is not None:
            source.report(first_fix)
        try:
            return await tracker.start(player_id, shot_number, source)
        finally:
            self._release(key)

    async def report(
        self, round_id: str, hole_id: str, player_id: str, shot_number: int, fix: Fix
    ) -> MeasurementSession:
        tracker = self._find(round_id, hole_id, player_id, shot_number)
        await tracker.report(player_id, shot_number, fix)
        return tracker.get(player_id, shot_number)

    async def complete(
        self, round_id: str, hole_id: str, player_id: str, shot_number: int
    ) -> Shot:
        tracker = self._find(round_id, hole_id, player_id, shot_number)
        try:
            return await tracker.complete(player_id, shot_number)
        finally:
            self._release((round_id, str(hole_id)))

    async def cancel(
        self, round_id: str, hole_id: str, player_id: str, shot_number: int
    ) -> None:
        tracker = self._find(round_id, hole_id, player_id, shot_number)
        try:
            await tracker.cancel(player_id, shot_number)
        finally:
            self._release((round_id, str(hole_id)))

    async def shutdown(self) -> None:
        trackers: List[DistanceTracker] = list(self._trackers.values())
        self._trackers.clear()
        for tracker in trackers:
            await tracker.shutdown()
        if trackers:
            logger.info("measurement trackers shut down", extra={"count": len(trackers)})


@lru_cache(maxsize=1)
def get_measurement_registry() -> MeasurementRegistry:
    settings = get_settings()
    return MeasurementRegistry(
        get_round_service(),
        fix_timeout_s=settings.gps_fix_timeout_s,
        queue_size=settings.gps_queue_size,
    )


__all__ = ["MeasurementRegistry", "get_measurement_registry"]
