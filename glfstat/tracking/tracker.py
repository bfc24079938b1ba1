"""Concurrent GPS distance measurements for shots awaiting a distance.

Each pending measurement is keyed by ``(player_id, shot_number)`` and owns
its source, its fix history and one background sampling task. Completing
or cancelling a session cancels that task and closes its source; other
sessions are untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, NamedTuple, Optional

from fastapi.concurrency import run_in_threadpool

from glfstat.config import DEFAULT_GPS_FIX_TIMEOUT_S
from glfstat.errors import MeasurementNotFound, SensorUnavailable, ValidationError
from glfstat.metrics.domain import MEASURED_DISTANCE_M, MEASUREMENTS_TOTAL

from .geo import Fix
from .measurement import DistanceMeasurement
from .sources import PositionSource, PushPositionSource

logger = logging.getLogger(__name__)


class MeasurementKey(NamedTuple):
    player_id: str
    shot_number: int


CommitDistance = Callable[[MeasurementKey, int], Any]
SourceFactory = Callable[[], PositionSource]


@dataclass
class MeasurementSession:
    key: MeasurementKey
    source: PositionSource
    stream: AsyncIterator[Fix]
    measurement: DistanceMeasurement = field(default_factory=DistanceMeasurement)
    task: Optional[asyncio.Task] = None

    @property
    def distance_m(self) -> int:
        return self.measurement.rounded_distance_m

    def to_dict(self) -> dict[str, Any]:
        start = self.measurement.start_fix
        return {
            "playerId": self.key.player_id,
            "shotNumber": self.key.shot_number,
            "state": self.measurement.state.value,
            "distance": self.distance_m,
            "fixes": len(self.measurement.fixes),
            "start": start.to_dict() if start else None,
        }


async def _next_fix(stream: AsyncIterator[Fix]) -> Fix | None:
    try:
        return await anext(stream)
    except StopAsyncIteration:
        return None


async def _settle_task(task: asyncio.Task | None) -> None:
    if task is None or task.done():
        return
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


class DistanceTracker:
    def __init__(
        self,
        commit: CommitDistance,
        source_factory: SourceFactory = PushPositionSource,
        *,
        fix_timeout_s: float = DEFAULT_GPS_FIX_TIMEOUT_S,
    ) -> None:
        self._commit = commit
        self._source_factory = source_factory
        self._fix_timeout_s = fix_timeout_s
        self._sessions: Dict[MeasurementKey, MeasurementSession] = {}
        self._starting: set[MeasurementKey] = set()

    @property
    def fix_timeout_s(self) -> float:
        return self._fix_timeout_s

    @property
    def idle(self) -> bool:
        return not self._sessions and not self._starting

    def pending(self) -> List[MeasurementSession]:
        return list(self._sessions.values())

    def get(self, player_id: str, shot_number: int) -> MeasurementSession:
        key = MeasurementKey(player_id, shot_number)
        session = self._sessions.get(key)
        if session is None:
            raise MeasurementNotFound(player_id, shot_number)
        return session

    def distance(self, player_id: str, shot_number: int) -> int:
        return self.get(player_id, shot_number).distance_m

    async def start(
        self,
        player_id: str,
        shot_number: int,
        source: PositionSource | None = None,
    ) -> MeasurementSession:
        """Capture the start fix and begin sampling in the background.

        Raises :class:`SensorUnavailable` when no fix arrives within the
        timeout; no session is left pending in that case.
        """

        key = MeasurementKey(player_id, shot_number)
        if key in self._sessions or key in self._starting:
            raise ValidationError(
                f"measurement already pending for player {player_id} shot {shot_number}"
            )

        self._starting.add(key)
        source = source or self._source_factory()
        stream = source.watch()
        first = asyncio.create_task(_next_fix(stream))
        try:
            done, _ = await asyncio.wait({first}, timeout=self._fix_timeout_s)
            if not done:
                await _settle_task(first)
                await self._close(stream, source)
                MEASUREMENTS_TOTAL.labels(outcome="sensor_unavailable").inc()
                raise SensorUnavailable(
                    f"no position fix within {self._fix_timeout_s:g}s"
                )
            fix = first.result()
            if fix is None:
                await self._close(stream, source)
                MEASUREMENTS_TOTAL.labels(outcome="sensor_unavailable").inc()
                raise SensorUnavailable("position source closed before the first fix")

            session = MeasurementSession(key=key, source=source, stream=stream)
            session.measurement.start(fix)
            self._sessions[key] = session
        except asyncio.CancelledError:
            await _settle_task(first)
            await self._close(stream, source)
            raise
        finally:
            self._starting.discard(key)

        session.task = asyncio.create_task(
            self._sample(session), name=f"measurement:{player_id}:{shot_number}"
        )
        session.task.add_done_callback(self._log_task_failure)
        logger.info(
            "measurement started",
            extra={"player_id": player_id, "shot_number": shot_number},
        )
        return session

    async def report(self, player_id: str, shot_number: int, fix: Fix) -> int:
        """Feed a client-reported fix and return the running distance."""

        session = self.get(player_id, shot_number)
        source = session.source
        if not isinstance(source, PushPositionSource):
            raise ValidationError("measurement source does not accept reported fixes")
        if not source.report(fix):
            raise ValidationError("position buffer is full or closed")
        try:
            await asyncio.wait_for(source.settled(), timeout=self._fix_timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "reported fix not consumed in time",
                extra={"player_id": player_id, "shot_number": shot_number},
            )
        return session.distance_m

    async def complete(self, player_id: str, shot_number: int) -> Any:
        """Stop sampling, commit the rounded walked distance, discard fixes."""

        session = self._pop(player_id, shot_number)
        await _settle_task(session.task)
        for fix in session.source.drain():
            session.measurement.add_fix(fix)
        await self._close(session.stream, session.source)

        distance = session.measurement.complete()
        try:
            # commit may block on the store lock and a file rewrite
            committed = await run_in_threadpool(self._commit, session.key, distance)
        except Exception:
            MEASUREMENTS_TOTAL.labels(outcome="commit_failed").inc()
            raise
        MEASUREMENTS_TOTAL.labels(outcome="completed").inc()
        MEASURED_DISTANCE_M.observe(distance)
        logger.info(
            "measurement completed",
            extra={
                "player_id": player_id,
                "shot_number": shot_number,
                "distance_m": distance,
            },
        )
        return committed

    async def cancel(self, player_id: str, shot_number: int) -> None:
        session = self._pop(player_id, shot_number)
        await self._discard(session)
        MEASUREMENTS_TOTAL.labels(outcome="cancelled").inc()

    async def shutdown(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await self._discard(session)

    def _pop(self, player_id: str, shot_number: int) -> MeasurementSession:
        session = self._sessions.pop(MeasurementKey(player_id, shot_number), None)
        if session is None:
            raise MeasurementNotFound(player_id, shot_number)
        return session

    async def _discard(self, session: MeasurementSession) -> None:
        await _settle_task(session.task)
        await self._close(session.stream, session.source)
        session.measurement.reset()

    async def _close(self, stream: AsyncIterator[Fix], source: PositionSource) -> None:
        source.close()
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()

    async def _sample(self, session: MeasurementSession) -> None:
        pending: asyncio.Task | None = None
        try:
            while True:
                if pending is None:
                    pending = asyncio.create_task(_next_fix(session.stream))
                done, _ = await asyncio.wait({pending}, timeout=self._fix_timeout_s)
                if not done:
                    # Keep waiting on the same read; the fix may still come.
                    logger.warning(
                        "no position fix within %.1fs",
                        self._fix_timeout_s,
                        extra={
                            "player_id": session.key.player_id,
                            "shot_number": session.key.shot_number,
                        },
                    )
                    continue
                task, pending = pending, None
                fix = task.result()
                if fix is None:
                    return
                session.measurement.add_fix(fix)
        finally:
            if (
                pending is not None
                and pending.done()
                and not pending.cancelled()
                and pending.exception() is None
            ):
                # A fix read just before cancellation still counts.
                fix = pending.result()
                if fix is not None:
                    session.measurement.add_fix(fix)
            await _settle_task(pending)

    @staticmethod
    def _log_task_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "measurement sampling failed: %s",
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )


__all__ = [
    "DistanceTracker",
    "MeasurementKey",
    "MeasurementSession",
]
