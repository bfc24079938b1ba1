"""Position sources feeding distance measurements.

A source is a subscription: :meth:`watch` yields fixes until the source is
closed, and :meth:`close` releases it. Each measurement session owns its own
source; nothing is shared between sessions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable, List, Protocol

from .geo import Fix

logger = logging.getLogger(__name__)

_CLOSED = object()


class PositionSource(Protocol):
    def watch(self) -> AsyncIterator[Fix]: ...

    def drain(self) -> List[Fix]: ...

    def close(self) -> None: ...


class PushPositionSource:
    """Fixes reported by the client device, buffered on a bounded queue."""

    def __init__(self, maxsize: int = 100) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def report(self, fix: Fix) -> bool:
        if self.closed:
            return False
        try:
            self._queue.put_nowait(fix)
        except asyncio.QueueFull:
            logger.warning("position buffer full, dropping fix")
            return False
        return True

    def drain(self) -> List[Fix]:
        """Take every fix still buffered without waiting."""

        fixes: List[Fix] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return fixes
            self._queue.task_done()
            if item is not _CLOSED:
                fixes.append(item)

    async def settled(self) -> None:
        """Wait until every reported fix has been consumed."""

        await self._queue.join()

    async def watch(self) -> AsyncIterator[Fix]:
        while True:
            item = await self._queue.get()
            try:
                if item is _CLOSED:
                    return
                yield item
            finally:
                self._queue.task_done()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass


class ReplayPositionSource:
    """Replays a fixed track, optionally pacing fixes by ``interval_s``."""

    def __init__(self, fixes: Iterable[Fix], interval_s: float = 0.0) -> None:
        self._fixes = list(fixes)
        self._interval_s = interval_s
        self.closed = False

    async def watch(self) -> AsyncIterator[Fix]:
        for fix in self._fixes:
            if self.closed:
                return
            if self._interval_s:
                await asyncio.sleep(self._interval_s)
            yield fix

    def drain(self) -> List[Fix]:
        return []

    def close(self) -> None:
        self.closed = True


__all__ = ["PositionSource", "PushPositionSource", "ReplayPositionSource"]
