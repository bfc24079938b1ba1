"""Pure aggregations over a loaded round.

Percentages are rounded independently, so ``successPercent`` and
``failPercent`` may sum to 99 or 101.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from glfstat.utils.numbers import percent, round_half_up

from .models import Round, Shot, ShotResult, Terrain


class RoundStats(BaseModel):
    total_shots: int = Field(default=0, serialization_alias="totalShots")
    success_percent: int = Field(default=0, serialization_alias="successPercent")
    fail_percent: int = Field(default=0, serialization_alias="failPercent")

    model_config = ConfigDict(populate_by_name=True)


class ClubStats(BaseModel):
    club: str
    shots: int
    avg_distance: int = Field(serialization_alias="avgDistance")
    success_percent: int = Field(serialization_alias="successPercent")

    model_config = ConfigDict(populate_by_name=True)


class LocationStats(BaseModel):
    location: str
    shots: int
    avg_distance: int = Field(serialization_alias="avgDistance")
    success_percent: int = Field(serialization_alias="successPercent")

    model_config = ConfigDict(populate_by_name=True)


def _successes(shots: Iterable[Shot]) -> int:
    return sum(1 for shot in shots if shot.result == ShotResult.SUCCESS)


def _group(round_obj: Round, key: Callable[[Shot], str]) -> Dict[str, List[Shot]]:
    # dict keeps first-encounter order, walking holes 1..N in append order
    groups: Dict[str, List[Shot]] = {}
    for shot in round_obj.iter_shots():
        groups.setdefault(key(shot), []).append(shot)
    return groups


def _avg_distance(shots: List[Shot]) -> int:
    if not shots:
        return 0
    return round_half_up(sum(shot.distance for shot in shots) / len(shots))


def compute_round_stats(round_obj: Round) -> RoundStats:
    shots = list(round_obj.iter_shots())
    total = len(shots)
    success = _successes(shots)
    return RoundStats(
        total_shots=total,
        success_percent=percent(success, total),
        fail_percent=percent(total - success, total),
    )


def compute_club_stats(round_obj: Round) -> List[ClubStats]:
    return [
        ClubStats(
            club=club,
            shots=len(shots),
            avg_distance=_avg_distance(shots),
            success_percent=percent(_successes(shots), len(shots)),
        )
        for club, shots in _group(round_obj, lambda s: s.club.value).items()
    ]


def compute_location_stats(round_obj: Round) -> List[LocationStats]:
    return [
        LocationStats(
            location=location,
            shots=len(shots),
            avg_distance=_avg_distance(shots),
            success_percent=percent(_successes(shots), len(shots)),
        )
        for location, shots in _group(
            round_obj, lambda s: (s.location or Terrain.OTHER).value
        ).items()
    ]


__all__ = [
    "ClubStats",
    "LocationStats",
    "RoundStats",
    "compute_club_stats",
    "compute_location_stats",
    "compute_round_stats",
]
