from __future__ import annotations

import math

import pytest

from glfstat.tracking.geo import EARTH_RADIUS_M, Fix, haversine_m, path_length_m
from glfstat.utils.numbers import is_non_negative_number, percent, round_half_up


def test_haversine_zero_for_same_point() -> None:
    fix = Fix(lat=59.33, lng=18.06)
    assert haversine_m(fix, fix) == 0.0


def test_haversine_is_symmetric() -> None:
    a = Fix(lat=59.3293, lng=18.0686)
    b = Fix(lat=59.3326, lng=18.0649)
    assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))


def test_haversine_one_degree_of_longitude_on_equator() -> None:
    expected = EARTH_RADIUS_M * math.pi / 180
    assert haversine_m(Fix(0.0, 0.0), Fix(0.0, 1.0)) == pytest.approx(expected)


def test_haversine_known_city_distance() -> None:
    stockholm = Fix(lat=59.3293, lng=18.0686)
    gothenburg = Fix(lat=57.7089, lng=11.9746)
    assert haversine_m(stockholm, gothenburg) == pytest.approx(397_000, rel=0.01)


def test_path_length_sums_legs() -> None:
    fixes = [Fix(0.0, 0.0), Fix(0.0, 0.001), Fix(0.0, 0.002)]
    leg = haversine_m(fixes[0], fixes[1])
    assert path_length_m(fixes) == pytest.approx(2 * leg)
    assert path_length_m(fixes[:1]) == 0.0
    assert path_length_m([]) == 0.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (111.195, 111), (0.0, 0)],
)
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_percent_handles_zero_total() -> None:
    assert percent(0, 0) == 0
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67


@pytest.mark.parametrize(
    ("value", "ok"),
    [
        (0, True),
        (12.5, True),
        (-1, False),
        (True, False),
        ("10", False),
        (math.inf, False),
        (math.nan, False),
    ],
)
def test_is_non_negative_number(value, ok: bool) -> None:
    assert is_non_negative_number(value) is ok
