from .models import Club, CourseType, Player, Round, Shot, ShotError, ShotResult, Terrain
from .stats import compute_club_stats, compute_location_stats, compute_round_stats

__all__ = [
    "Club",
    "CourseType",
    "Player",
    "Round",
    "Shot",
    "ShotError",
    "ShotResult",
    "Terrain",
    "compute_club_stats",
    "compute_location_stats",
    "compute_round_stats",
]
