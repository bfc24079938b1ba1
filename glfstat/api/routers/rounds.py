from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from glfstat.errors import (
    HoleNotFound,
    RoundNotFound,
    ShotNotFound,
    ValidationError,
)
from glfstat.rounds.models import Round, RoundListItem, Shot
from glfstat.rounds.service import RoundShotService, get_round_service
from glfstat.store.domain import DomainStore, get_domain_store

router = APIRouter(prefix="/api/rounds", tags=["rounds"])

logger = logging.getLogger(__name__)


class CreateRoundRequest(BaseModel):
    date: Any = None
    course: Any = None
    course_type: Any = Field(
        default=None,
        validation_alias=AliasChoices("course_type", "courseType"),
    )
    player_ids: Any = Field(
        default=None,
        validation_alias=AliasChoices("player_ids", "playerIds"),
    )

    model_config = ConfigDict(populate_by_name=True)


class AddShotRequest(BaseModel):
    shot_number: Any = Field(
        default=None,
        validation_alias=AliasChoices("shot_number", "shotNumber"),
    )
    player_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("player_id", "playerId"),
    )
    club: Any = None
    distance: Any = None
    result: Any = None
    location: Any = None
    target_location: Any = Field(
        default=None,
        validation_alias=AliasChoices("target_location", "targetLocation"),
    )
    error: Any = None
    is_penalty: Any = Field(
        default=False,
        validation_alias=AliasChoices("is_penalty", "isPenalty"),
    )

    model_config = ConfigDict(populate_by_name=True)


class UpdateDistanceRequest(BaseModel):
    distance: Any = None
    player_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("player_id", "playerId"),
    )

    model_config = ConfigDict(populate_by_name=True)


class ShotCreatedOut(BaseModel):
    hole_id: str = Field(serialization_alias="holeId")
    shot: Shot


class ShotOut(BaseModel):
    message: str | None = None
    shot: Shot


class ShotDeletedOut(BaseModel):
    message: str
    deleted_shot: Shot = Field(serialization_alias="deletedShot")
    remaining_shots: int = Field(serialization_alias="remainingShots")


def _hole_error(exc: HoleNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "",
    response_model=Round,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_round(
    payload: CreateRoundRequest,
    store: DomainStore = Depends(get_domain_store),
) -> Round:
    try:
        return store.create_round(
            payload.date, payload.course, payload.course_type, payload.player_ids
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=list[RoundListItem])
def list_rounds(store: DomainStore = Depends(get_domain_store)) -> list[RoundListItem]:
    return store.list_rounds()


@router.get("/{round_id}", response_model=Round, response_model_exclude_none=True)
def get_round(
    round_id: str,
    store: DomainStore = Depends(get_domain_store),
) -> Round:
    try:
        return store.get_round(round_id)
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )


@router.post(
    "/{round_id}/holes/{hole_id}/shots",
    response_model=ShotCreatedOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def add_shot(
    round_id: str,
    hole_id: str,
    payload: AddShotRequest,
    service: RoundShotService = Depends(get_round_service),
) -> ShotCreatedOut:
    try:
        recorded = service.add_shot(
            round_id,
            hole_id,
            player_id=payload.player_id,
            club=payload.club,
            distance=payload.distance,
            result=payload.result,
            location=payload.location,
            target_location=payload.target_location,
            error=payload.error,
            is_penalty=payload.is_penalty,
            shot_number=payload.shot_number,
        )
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )
    except HoleNotFound as exc:
        raise _hole_error(exc)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ShotCreatedOut(hole_id=recorded.hole_id, shot=recorded.shot)


@router.delete(
    "/{round_id}/holes/{hole_id}/shots/last",
    response_model=ShotDeletedOut,
    response_model_exclude_none=True,
)
def delete_last_shot(
    round_id: str,
    hole_id: str,
    service: RoundShotService = Depends(get_round_service),
) -> ShotDeletedOut:
    try:
        deleted = service.delete_last_shot(round_id, hole_id)
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )
    except HoleNotFound as exc:
        raise _hole_error(exc)
    except ShotNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return ShotDeletedOut(
        message="Last shot deleted successfully",
        deleted_shot=deleted.shot,
        remaining_shots=deleted.remaining_shots,
    )


@router.get(
    "/{round_id}/holes/{hole_id}/shots/last",
    response_model=ShotOut,
    response_model_exclude_none=True,
)
def last_shot_for_player(
    round_id: str,
    hole_id: str,
    player_id: str = Query(..., alias="playerId"),
    service: RoundShotService = Depends(get_round_service),
) -> ShotOut:
    try:
        shot = service.last_shot_for_player(round_id, hole_id, player_id)
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )
    except HoleNotFound as exc:
        raise _hole_error(exc)
    except ShotNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return ShotOut(shot=shot)


@router.put(
    "/{round_id}/holes/{hole_id}/shots/{shot_number}",
    response_model=ShotOut,
    response_model_exclude_none=True,
)
def update_shot_distance(
    round_id: str,
    hole_id: str,
    shot_number: str,
    payload: UpdateDistanceRequest,
    service: RoundShotService = Depends(get_round_service),
) -> ShotOut:
    try:
        number = int(shot_number)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Shot not found"
        )
    try:
        shot = service.update_shot_distance(
            round_id, hole_id, number, payload.player_id, payload.distance
        )
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )
    except HoleNotFound as exc:
        raise _hole_error(exc)
    except ShotNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Shot not found"
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    logger.info(
        "shot distance updated",
        extra={"round_id": round_id, "hole_id": hole_id, "shot_number": number},
    )
    return ShotOut(message="Shot updated successfully", shot=shot)
