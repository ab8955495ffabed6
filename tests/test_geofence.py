import math
import random

import pytest

from routing.geofence import EARTH_RADIUS_M, distance_from_block, haversine_meters, is_valid_coordinate
from rides.models import Location


def random_coordinate():
    return (random.uniform(-90, 90), random.uniform(-180, 180))


def test_haversine_is_symmetric_and_zero_on_itself():
    """
    For any two points the distance does not depend on direction,
    and a point is 0 m from itself.
    """
    random.seed(7)
    for _ in range(200):
        a = random_coordinate()
        b = random_coordinate()

        assert haversine_meters(a, b) == pytest.approx(haversine_meters(b, a))
        assert haversine_meters(a, a) == 0.0


def test_one_degree_of_latitude():
    expected = EARTH_RADIUS_M * math.pi / 180
    assert haversine_meters((0.0, 0.0), (1.0, 0.0)) == pytest.approx(expected)


def test_campus_blocks_are_about_1_7km_apart():
    cuet = (22.4633, 91.9714)
    pahartoli = (22.4725, 91.9845)

    distance = haversine_meters(cuet, pahartoli)
    assert 1600 < distance < 1800


def test_antipodal_points_do_not_blow_up():
    distance = haversine_meters((0.0, 0.0), (0.0, 180.0))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_M)


def test_distance_from_block_uses_location_coordinate():
    block = Location("loc_2", "Pahartoli", 22.4725, 91.9845, "block_pahartoli")

    assert distance_from_block((22.4725, 91.9845), block) == 0.0
    assert distance_from_block((22.4730, 91.9845), block) == pytest.approx(55.6, abs=0.5)


@pytest.mark.parametrize(
    "lat, lon, expected",
    [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (90.0001, 0, False),
        (0, -180.5, False),
        (float("nan"), 0, False),
        ("22.4", "91.9", True),
        ("north", 0, False),
        (None, 0, False),
    ],
)
def test_is_valid_coordinate(lat, lon, expected):
    assert is_valid_coordinate(lat, lon) is expected
