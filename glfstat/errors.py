"""Domain exceptions shared by the store, services and routers."""

from __future__ import annotations


class GlfStatError(Exception):
    """Base class for all glfstat domain errors."""


class ValidationError(GlfStatError, ValueError):
    """Malformed or missing input."""


class NotFound(GlfStatError, LookupError):
    """An id did not resolve."""


class PlayerNotFound(NotFound):
    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class RoundNotFound(NotFound):
    def __init__(self, round_id: str):
        self.round_id = round_id
        super().__init__(f"Round {round_id} not found")


class HoleNotFound(NotFound):
    def __init__(self, round_id: str, hole_id: str, hole_count: int):
        self.round_id = round_id
        self.hole_id = hole_id
        super().__init__(f"Invalid holeId {hole_id!r}. Must be 1-{hole_count}")


class ShotNotFound(NotFound):
    pass


class MeasurementNotFound(NotFound):
    def __init__(self, player_id: str, shot_number: int):
        self.player_id = player_id
        self.shot_number = shot_number
        super().__init__(
            f"No pending measurement for player {player_id} shot {shot_number}"
        )


class SensorUnavailable(GlfStatError):
    """No position fix could be obtained within the configured timeout."""


class PersistenceError(GlfStatError):
    """The durable snapshot store could not be read or written."""


__all__ = [
    "GlfStatError",
    "ValidationError",
    "NotFound",
    "PlayerNotFound",
    "RoundNotFound",
    "HoleNotFound",
    "ShotNotFound",
    "MeasurementNotFound",
    "SensorUnavailable",
    "PersistenceError",
]
