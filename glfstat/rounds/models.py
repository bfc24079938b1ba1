from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
)


class CourseType(str, Enum):
    CHAMPIONSHIP = "championship"
    ACADEMIC = "academic"

    @property
    def hole_count(self) -> int:
        return HOLE_COUNTS[self]


HOLE_COUNTS: Dict[CourseType, int] = {
    CourseType.CHAMPIONSHIP: 18,
    CourseType.ACADEMIC: 9,
}


class Club(str, Enum):
    DRIVER = "DR"
    WOOD_3 = "3W"
    WOOD_5 = "5W"
    HYBRID = "HY"
    IRON_3 = "3I"
    IRON_4 = "4I"
    IRON_5 = "5I"
    IRON_6 = "6I"
    IRON_7 = "7I"
    IRON_8 = "8I"
    IRON_9 = "9I"
    PITCHING_WEDGE = "PW"
    SAND_WEDGE = "SW"
    LOB_WEDGE = "LW"
    PUTTER = "PT"


class ShotResult(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


class Terrain(str, Enum):
    TEE = "tee"
    FAIRWAY = "fairway"
    ROUGH = "rough"
    WOODS = "woods"
    LAKE = "lake"
    PRE_GREEN = "pre_green"
    GREEN = "green"
    HOLE = "hole"
    OTHER = "other"


class ShotError(str, Enum):
    SLICE = "slice"
    HOOK = "hook"
    PUSH = "push"
    PULL = "pull"
    TOP = "top"
    FAT = "fat"
    THIN = "thin"
    SHANK = "shank"
    SHORT = "short"
    LONG = "long"
    OTHER = "other"


class Player(BaseModel):
    id: str
    name: str
    color: str


class Shot(BaseModel):
    shot_number: int = Field(
        ge=1,
        validation_alias=AliasChoices("shot_number", "shotNumber"),
        serialization_alias="shotNumber",
    )
    player_id: str = Field(
        validation_alias=AliasChoices("player_id", "playerId"),
        serialization_alias="playerId",
    )
    club: Club
    distance: Union[NonNegativeInt, NonNegativeFloat]
    result: ShotResult
    location: Terrain = Terrain.OTHER
    target_location: Terrain = Field(
        default=Terrain.OTHER,
        validation_alias=AliasChoices("target_location", "targetLocation"),
        serialization_alias="targetLocation",
    )
    error: Optional[ShotError] = None
    is_penalty: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_penalty", "isPenalty"),
        serialization_alias="isPenalty",
    )

    model_config = ConfigDict(populate_by_name=True)


class Round(BaseModel):
    id: str
    date: str
    course: str
    course_type: CourseType = Field(
        validation_alias=AliasChoices("course_type", "courseType"),
        serialization_alias="courseType",
    )
    players: List[str]
    holes: Dict[str, List[Shot]]

    model_config = ConfigDict(populate_by_name=True)

    def hole_ids(self) -> List[str]:
        return [str(number) for number in range(1, self.course_type.hole_count + 1)]

    def iter_shots(self) -> Iterator[Shot]:
        for hole_id in self.hole_ids():
            yield from self.holes.get(hole_id, [])


class RoundListItem(BaseModel):
    id: str
    date: str
    course: str


def empty_holes(course_type: CourseType) -> Dict[str, List[Shot]]:
    return {str(number): [] for number in range(1, course_type.hole_count + 1)}


def dump_entity(model: BaseModel) -> dict:
    """Wire/snapshot form: camelCase keys, enum values, no null fields."""

    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "Club",
    "CourseType",
    "HOLE_COUNTS",
    "Player",
    "Round",
    "RoundListItem",
    "Shot",
    "ShotError",
    "ShotResult",
    "Terrain",
    "dump_entity",
    "empty_holes",
]
