from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional, Union

from glfstat.errors import (
    HoleNotFound,
    ShotNotFound,
    ValidationError,
)
from glfstat.metrics.domain import SHOTS_RECORDED_TOTAL
from glfstat.store.domain import DomainStore, get_domain_store
from glfstat.utils.numbers import is_non_negative_number

from .models import Club, Round, Shot, ShotError, ShotResult, Terrain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedShot:
    hole_id: str
    shot: Shot


@dataclass(frozen=True)
class DeletedShot:
    hole_id: str
    shot: Shot
    remaining_shots: int


def _hole(round_obj: Round, hole_id: str) -> List[Shot]:
    shots = round_obj.holes.get(str(hole_id))
    if shots is None:
        raise HoleNotFound(round_obj.id, str(hole_id), round_obj.course_type.hole_count)
    return shots


def _enum_value(enum_cls, value: Any, name: str, default=None):
    if value is None or value == "":
        if default is not None:
            return default
        raise ValidationError(f"Missing required field: {name}")
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}; got {value!r}")


def _shot_number(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("shotNumber must be a positive integer")
    return value


class RoundShotService:
    """Shot-level commands applied against rounds held by the domain store."""

    def __init__(self, store: DomainStore) -> None:
        self._store = store

    @property
    def store(self) -> DomainStore:
        return self._store

    def add_shot(
        self,
        round_id: str,
        hole_id: str,
        *,
        player_id: Any,
        club: Any,
        distance: Any,
        result: Any,
        location: Any = None,
        target_location: Any = None,
        error: Any = None,
        is_penalty: Any = False,
        shot_number: Any = None,
    ) -> RecordedShot:
        """Append a shot to a hole.

        Without an explicit ``shot_number`` the shot takes the number after
        the highest one the same player already has on the hole, which is
        1 + their shot count unless numbers were supplied out of order. Penalty
        shots are normalized to a zero-distance failed putter stroke.
        """

        with self._store.mutate_round(round_id) as round_obj:
            shots = _hole(round_obj, hole_id)

            if not isinstance(player_id, str) or not player_id:
                raise ValidationError("Missing required field: playerId")
            if player_id not in round_obj.players:
                raise ValidationError("Player is not part of this round")
            if is_penalty is not None and not isinstance(is_penalty, bool):
                raise ValidationError("isPenalty must be a boolean")

            if is_penalty:
                shot_club = Club.PUTTER
                shot_distance: Union[int, float] = 0
                shot_result = ShotResult.FAIL
                shot_error: Optional[ShotError] = ShotError.OTHER
            else:
                shot_club = _enum_value(Club, club, "club")
                if not is_non_negative_number(distance):
                    raise ValidationError("distance must be a non-negative number")
                shot_distance = distance
                shot_result = _enum_value(ShotResult, result, "result")
                shot_error = None
                if shot_result is ShotResult.FAIL:
                    if error is None or error == "":
                        raise ValidationError("Error field is required for failed shots")
                    shot_error = _enum_value(ShotError, error, "error")

            shot_location = _enum_value(Terrain, location, "location", Terrain.OTHER)
            shot_target = _enum_value(
                Terrain, target_location, "targetLocation", Terrain.OTHER
            )

            player_shots = [s for s in shots if s.player_id == player_id]
            if shot_number is None:
                number = max((s.shot_number for s in player_shots), default=0) + 1
            else:
                number = _shot_number(shot_number)
                if any(s.shot_number == number for s in player_shots):
                    raise ValidationError(
                        f"Shot {number} already recorded for player {player_id} "
                        f"on hole {hole_id}"
                    )

            shot = Shot(
                shot_number=number,
                player_id=player_id,
                club=shot_club,
                distance=shot_distance,
                result=shot_result,
                location=shot_location,
                target_location=shot_target,
                error=shot_error,
                is_penalty=bool(is_penalty),
            )
            shots.append(shot)

        SHOTS_RECORDED_TOTAL.labels(
            result=shot.result.value, penalty=str(shot.is_penalty).lower()
        ).inc()
        logger.info(
            "shot recorded",
            extra={
                "round_id": round_id,
                "hole_id": str(hole_id),
                "player_id": player_id,
                "shot_number": number,
            },
        )
        return RecordedShot(hole_id=str(hole_id), shot=shot.model_copy())

    def delete_last_shot(self, round_id: str, hole_id: str) -> DeletedShot:
        """Undo the most recent append on the hole, whoever played it."""

        with self._store.mutate_round(round_id) as round_obj:
            shots = _hole(round_obj, hole_id)
            if not shots:
                raise ShotNotFound("No shots to delete")
            deleted = shots.pop()
            remaining = len(shots)

        logger.info(
            "last shot deleted",
            extra={"round_id": round_id, "hole_id": str(hole_id)},
        )
        return DeletedShot(hole_id=str(hole_id), shot=deleted, remaining_shots=remaining)

    def update_shot_distance(
        self,
        round_id: str,
        hole_id: str,
        shot_number: Any,
        player_id: Any,
        distance: Any,
    ) -> Shot:
        """Overwrite only the distance of the shot keyed by (shot_number, player_id)."""

        if not is_non_negative_number(distance):
            raise ValidationError("distance must be a non-negative number")

        with self._store.mutate_round(round_id) as round_obj:
            shots = _hole(round_obj, hole_id)
            shot = next(
                (
                    s
                    for s in shots
                    if s.shot_number == shot_number and s.player_id == player_id
                ),
                None,
            )
            if shot is None:
                raise ShotNotFound("Shot not found")
            shot.distance = distance
            return shot.model_copy()

    def last_shot_for_player(self, round_id: str, hole_id: str, player_id: str) -> Shot:
        round_obj = self._store.get_round(round_id)
        shots = _hole(round_obj, hole_id)
        for shot in reversed(shots):
            if shot.player_id == player_id:
                return shot
        raise ShotNotFound(f"No shots for player {player_id} on hole {hole_id}")

    def require_hole(self, round_id: str, hole_id: str) -> None:
        _hole(self._store.get_round(round_id), hole_id)

    def find_shot(
        self, round_id: str, hole_id: str, shot_number: int, player_id: str
    ) -> Shot:
        round_obj = self._store.get_round(round_id)
        for shot in _hole(round_obj, hole_id):
            if shot.shot_number == shot_number and shot.player_id == player_id:
                return shot
        raise ShotNotFound("Shot not found")

    def get_round(self, round_id: str) -> Round:
        return self._store.get_round(round_id)


@lru_cache(maxsize=1)
def get_round_service() -> RoundShotService:
    return RoundShotService(get_domain_store())


__all__ = [
    "DeletedShot",
    "RecordedShot",
    "RoundShotService",
    "get_round_service",
]
