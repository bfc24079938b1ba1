"""Canonical in-memory owner of players and rounds.

Every mutating call runs under one re-entrant lock and finishes with a
full-state snapshot write, so a mutation and its persistence flush are
never interleaved with another mutation. Reads copy entities under the
same lock and therefore never see a hole's shot list mid-append.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import date as date_type
from functools import lru_cache
from typing import Any, Dict, Iterator, List

from pydantic import ValidationError as PydanticValidationError

from glfstat.config import get_settings
from glfstat.errors import (
    PersistenceError,
    PlayerNotFound,
    RoundNotFound,
    ValidationError,
)
from glfstat.metrics.domain import PERSIST_FAILURES_TOTAL
from glfstat.rounds.models import (
    CourseType,
    Player,
    Round,
    RoundListItem,
    dump_entity,
    empty_holes,
)

from .snapshot import (
    JsonFileSnapshotStore,
    MemorySnapshotStore,
    Snapshot,
    SnapshotStore,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex[:10]


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing required field: {name}")
    return value.strip()


class DomainStore:
    def __init__(self, snapshots: SnapshotStore) -> None:
        self._snapshots = snapshots
        self._players: Dict[str, Player] = {}
        self._rounds: Dict[str, Round] = {}
        self._lock = threading.RLock()
        self.degraded = False

    # Lifecycle
    def load(self) -> None:
        """Replace in-memory state with the durable snapshot, if any."""

        with self._lock:
            self._players.clear()
            self._rounds.clear()
            try:
                snapshot = self._snapshots.load()
            except PersistenceError as exc:
                logger.warning("snapshot unreadable, starting empty: %s", exc)
                PERSIST_FAILURES_TOTAL.labels(operation="load").inc()
                self.degraded = True
                return
            if snapshot is None:
                return

            skipped = 0
            for player_id, data in snapshot.players:
                try:
                    self._players[player_id] = Player.model_validate(data)
                except PydanticValidationError:
                    skipped += 1
            for round_id, data in snapshot.rounds:
                try:
                    self._rounds[round_id] = Round.model_validate(data)
                except PydanticValidationError:
                    skipped += 1
            if skipped:
                logger.warning("skipped %d malformed snapshot entities", skipped)
                self.degraded = True
            logger.info(
                "loaded snapshot",
                extra={"players": len(self._players), "rounds": len(self._rounds)},
            )

    def persist(self) -> None:
        with self._lock:
            snapshot = Snapshot(
                players=[(pid, dump_entity(p)) for pid, p in self._players.items()],
                rounds=[(rid, dump_entity(r)) for rid, r in self._rounds.items()],
            )
            try:
                self._snapshots.save(snapshot)
            except PersistenceError as exc:
                logger.warning("snapshot write failed, continuing in memory: %s", exc)
                PERSIST_FAILURES_TOTAL.labels(operation="save").inc()
                self.degraded = True
                return
            self.degraded = False

    # Players
    def create_player(self, name: Any, color: Any) -> Player:
        player_name = _require_text(name, "name")
        player_color = _require_text(color, "color")
        with self._lock:
            player = Player(id=_new_id(), name=player_name, color=player_color)
            self._players[player.id] = player
            self.persist()
            logger.info("player created", extra={"player_id": player.id})
            return player.model_copy()

    def list_players(self) -> List[Player]:
        with self._lock:
            return [player.model_copy() for player in self._players.values()]

    def delete_player(self, player_id: str) -> None:
        # Rounds keep the id in their roster and shots; no cascade.
        with self._lock:
            if player_id not in self._players:
                raise PlayerNotFound(player_id)
            del self._players[player_id]
            self.persist()
            logger.info("player deleted", extra={"player_id": player_id})

    # Rounds
    def create_round(
        self, date: Any, course: Any, course_type: Any, player_ids: Any
    ) -> Round:
        round_date = _require_text(date, "date")
        try:
            date_type.fromisoformat(round_date)
        except ValueError:
            raise ValidationError(f"date must be an ISO-8601 date, got {round_date!r}")
        round_course = _require_text(course, "course")
        if course_type is None or course_type == "":
            raise ValidationError("Missing required field: courseType")
        try:
            kind = CourseType(course_type)
        except ValueError:
            raise ValidationError(
                'courseType must be either "championship" or "academic"'
            )
        if not isinstance(player_ids, list) or not player_ids:
            raise ValidationError("playerIds must be a non-empty array")
        if not all(isinstance(pid, str) for pid in player_ids):
            raise ValidationError("playerIds must contain player id strings")
        if len(set(player_ids)) != len(player_ids):
            raise ValidationError("playerIds must be unique")

        with self._lock:
            for player_id in player_ids:
                if player_id not in self._players:
                    raise ValidationError(f"Player with id {player_id} not found")
            round_obj = Round(
                id=_new_id(),
                date=round_date,
                course=round_course,
                course_type=kind,
                players=list(player_ids),
                holes=empty_holes(kind),
            )
            self._rounds[round_obj.id] = round_obj
            self.persist()
            logger.info(
                "round created",
                extra={"round_id": round_obj.id, "course_type": kind.value},
            )
            return round_obj.model_copy(deep=True)

    def get_round(self, round_id: str) -> Round:
        with self._lock:
            round_obj = self._rounds.get(round_id)
            if round_obj is None:
                raise RoundNotFound(round_id)
            return round_obj.model_copy(deep=True)

    def list_rounds(self) -> List[RoundListItem]:
        with self._lock:
            return [
                RoundListItem(id=r.id, date=r.date, course=r.course)
                for r in self._rounds.values()
            ]

    @contextmanager
    def mutate_round(self, round_id: str) -> Iterator[Round]:
        """Yield the live round for in-place mutation, then persist.

        Nothing is persisted when the block raises; callers validate
        before touching the round.
        """

        with self._lock:
            round_obj = self._rounds.get(round_id)
            if round_obj is None:
                raise RoundNotFound(round_id)
            yield round_obj
            self.persist()

    def clear_all(self) -> dict[str, int]:
        with self._lock:
            cleared = {"rounds": len(self._rounds), "players": len(self._players)}
            self._rounds.clear()
            self._players.clear()
            self.persist()
            logger.info("all data cleared", extra=cleared)
            return cleared


def build_snapshot_store() -> SnapshotStore:
    settings = get_settings()
    if settings.storage == "memory":
        return MemorySnapshotStore()
    return JsonFileSnapshotStore(settings.data_file)


@lru_cache(maxsize=1)
def get_domain_store() -> DomainStore:
    return DomainStore(build_snapshot_store())


__all__ = ["DomainStore", "build_snapshot_store", "get_domain_store"]
