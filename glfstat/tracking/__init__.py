from .geo import EARTH_RADIUS_M, Fix, haversine_m, path_length_m
from .measurement import DistanceMeasurement, MeasurementState
from .sources import PositionSource, PushPositionSource, ReplayPositionSource
from .tracker import DistanceTracker, MeasurementKey, MeasurementSession

__all__ = [
    "EARTH_RADIUS_M",
    "Fix",
    "haversine_m",
    "path_length_m",
    "DistanceMeasurement",
    "MeasurementState",
    "PositionSource",
    "PushPositionSource",
    "ReplayPositionSource",
    "DistanceTracker",
    "MeasurementKey",
    "MeasurementSession",
]
