"""Client-driven GPS distance measurements for recorded shots.

The device starts a session for a shot that is awaiting its distance,
reports fixes while the player walks to the ball, then completes the
session to commit the rounded walked distance onto the shot.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from glfstat.errors import (
    HoleNotFound,
    MeasurementNotFound,
    RoundNotFound,
    SensorUnavailable,
    ShotNotFound,
    ValidationError,
)
from glfstat.rounds.models import Shot
from glfstat.rounds.service import RoundShotService, get_round_service
from glfstat.tracking.geo import Fix
from glfstat.tracking.registry import MeasurementRegistry, get_measurement_registry

router = APIRouter(
    prefix="/api/rounds/{round_id}/holes/{hole_id}/measurements",
    tags=["measurements"],
)

logger = logging.getLogger(__name__)


class FixIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = Field(default=None, ge=0)
    timestamp: Optional[float] = None

    model_config = ConfigDict(extra="ignore")


class StartMeasurementRequest(BaseModel):
    player_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("player_id", "playerId"),
    )
    shot_number: Any = Field(
        default=None,
        validation_alias=AliasChoices("shot_number", "shotNumber"),
    )
    fix: Any = None

    model_config = ConfigDict(populate_by_name=True)


class ShotOut(BaseModel):
    shot: Shot


def _parse_fix(raw: Any) -> Fix:
    try:
        parsed = FixIn.model_validate(raw)
    except PydanticValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fix requires numeric lat (-90..90) and lng (-180..180)",
        )
    return Fix(
        lat=parsed.lat,
        lng=parsed.lng,
        timestamp=parsed.timestamp,
        accuracy=parsed.accuracy,
    )


def _shot_number(raw: Any, *, missing_status: int) -> int:
    if isinstance(raw, bool):
        raise HTTPException(status_code=missing_status, detail="Invalid shotNumber")
    try:
        number = int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=missing_status, detail="Invalid shotNumber")
    if number < 1 or (isinstance(raw, float) and raw != number):
        raise HTTPException(status_code=missing_status, detail="Invalid shotNumber")
    return number


def _not_found(exc: Exception) -> HTTPException:
    if isinstance(exc, RoundNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )
    if isinstance(exc, HoleNotFound):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


async def _require_hole(service: RoundShotService, round_id: str, hole_id: str) -> None:
    try:
        await run_in_threadpool(service.require_hole, round_id, hole_id)
    except (RoundNotFound, HoleNotFound) as exc:
        raise _not_found(exc)


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_measurement(
    round_id: str,
    hole_id: str,
    payload: StartMeasurementRequest,
    service: RoundShotService = Depends(get_round_service),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> Dict[str, Any]:
    if not isinstance(payload.player_id, str) or not payload.player_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required field: playerId",
        )
    shot_number = _shot_number(
        payload.shot_number, missing_status=status.HTTP_400_BAD_REQUEST
    )
    fix = _parse_fix(payload.fix) if payload.fix is not None else None

    try:
        await run_in_threadpool(
            service.find_shot, round_id, hole_id, shot_number, payload.player_id
        )
    except (RoundNotFound, HoleNotFound, ShotNotFound) as exc:
        raise _not_found(exc)

    try:
        session = await registry.start(
            round_id, hole_id, payload.player_id, shot_number, fix
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except SensorUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        )
    return session.to_dict()


@router.get("")
async def list_measurements(
    round_id: str,
    hole_id: str,
    service: RoundShotService = Depends(get_round_service),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> List[Dict[str, Any]]:
    await _require_hole(service, round_id, hole_id)
    return [session.to_dict() for session in registry.pending(round_id, hole_id)]


@router.post("/{player_id}/{shot_number}/fixes")
async def report_fix(
    round_id: str,
    hole_id: str,
    player_id: str,
    shot_number: str,
    payload: Dict[str, Any] = Body(...),
    service: RoundShotService = Depends(get_round_service),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> Dict[str, Any]:
    number = _shot_number(shot_number, missing_status=status.HTTP_404_NOT_FOUND)
    fix = _parse_fix(payload)
    await _require_hole(service, round_id, hole_id)
    try:
        session = await registry.report(round_id, hole_id, player_id, number, fix)
    except MeasurementNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return session.to_dict()


@router.post(
    "/{player_id}/{shot_number}/complete",
    response_model=ShotOut,
    response_model_exclude_none=True,
)
async def complete_measurement(
    round_id: str,
    hole_id: str,
    player_id: str,
    shot_number: str,
    service: RoundShotService = Depends(get_round_service),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> ShotOut:
    number = _shot_number(shot_number, missing_status=status.HTTP_404_NOT_FOUND)
    await _require_hole(service, round_id, hole_id)
    try:
        shot = await registry.complete(round_id, hole_id, player_id, number)
    except (MeasurementNotFound, RoundNotFound, HoleNotFound, ShotNotFound) as exc:
        raise _not_found(exc)
    return ShotOut(shot=shot)


@router.delete("/{player_id}/{shot_number}")
async def cancel_measurement(
    round_id: str,
    hole_id: str,
    player_id: str,
    shot_number: str,
    service: RoundShotService = Depends(get_round_service),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> Dict[str, str]:
    number = _shot_number(shot_number, missing_status=status.HTTP_404_NOT_FOUND)
    await _require_hole(service, round_id, hole_id)
    try:
        await registry.cancel(round_id, hole_id, player_id, number)
    except MeasurementNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    logger.info(
        "measurement cancelled",
        extra={"round_id": round_id, "hole_id": hole_id, "player_id": player_id},
    )
    return {"message": "Measurement cancelled"}
