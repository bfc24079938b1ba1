from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from glfstat.errors import RoundNotFound
from glfstat.rounds.models import Round
from glfstat.rounds.stats import (
    ClubStats,
    LocationStats,
    RoundStats,
    compute_club_stats,
    compute_location_stats,
    compute_round_stats,
)
from glfstat.store.domain import DomainStore, get_domain_store

router = APIRouter(prefix="/api/rounds", tags=["stats"])


def _load_round(round_id: str, store: DomainStore) -> Round:
    try:
        return store.get_round(round_id)
    except RoundNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Round not found"
        )


@router.get("/{round_id}/stats", response_model=RoundStats)
def round_stats(
    round_id: str,
    store: DomainStore = Depends(get_domain_store),
) -> RoundStats:
    return compute_round_stats(_load_round(round_id, store))


@router.get("/{round_id}/stats/clubs", response_model=list[ClubStats])
def club_stats(
    round_id: str,
    store: DomainStore = Depends(get_domain_store),
) -> list[ClubStats]:
    return compute_club_stats(_load_round(round_id, store))


@router.get("/{round_id}/stats/locations", response_model=list[LocationStats])
def location_stats(
    round_id: str,
    store: DomainStore = Depends(get_domain_store),
) -> list[LocationStats]:
    return compute_location_stats(_load_round(round_id, store))
