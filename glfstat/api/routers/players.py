from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from glfstat.errors import PlayerNotFound, ValidationError
from glfstat.rounds.models import Player
from glfstat.store.domain import DomainStore, get_domain_store

router = APIRouter(prefix="/api/players", tags=["players"])


class CreatePlayerRequest(BaseModel):
    name: Any = None
    color: Any = None


@router.post("", response_model=Player, status_code=status.HTTP_201_CREATED)
def create_player(
    payload: CreatePlayerRequest,
    store: DomainStore = Depends(get_domain_store),
) -> Player:
    try:
        return store.create_player(payload.name, payload.color)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=list[Player])
def list_players(store: DomainStore = Depends(get_domain_store)) -> list[Player]:
    return store.list_players()


@router.delete("/{player_id}")
def delete_player(
    player_id: str,
    store: DomainStore = Depends(get_domain_store),
) -> dict[str, str]:
    try:
        store.delete_player(player_id)
    except PlayerNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Player not found"
        )
    return {"message": "Player deleted successfully"}
