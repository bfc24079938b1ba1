from __future__ import annotations

from prometheus_client import Counter, Histogram

from . import REGISTRY

SHOTS_RECORDED_TOTAL = Counter(
    "glfstat_shots_recorded_total",
    "Shots appended to rounds",
    ["result", "penalty"],
    registry=REGISTRY,
)

PERSIST_FAILURES_TOTAL = Counter(
    "glfstat_persist_failures_total",
    "Snapshot load/save attempts that failed",
    ["operation"],
    registry=REGISTRY,
)

MEASUREMENTS_TOTAL = Counter(
    "glfstat_measurements_total",
    "GPS distance measurements by outcome",
    ["outcome"],
    registry=REGISTRY,
)

MEASURED_DISTANCE_M = Histogram(
    "glfstat_measured_distance_m",
    "Committed GPS-measured shot distances (metres)",
    buckets=(0.0, 5.0, 25.0, 50.0, 100.0, 150.0, 200.0, 250.0, 300.0),
    registry=REGISTRY,
)
