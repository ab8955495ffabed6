import pytest
import random

from pullers.models import Puller
from pullers.policy import PullerPolicy, puller_policy_from_env
from pullers.selection import filter_eligible_pullers, rank_nearby_pullers
from routing.geofence import haversine_meters


@pytest.fixture
def mock_pickup_location():
    # CUET campus block
    return (22.4633, 91.9714)


def test_nearby_excludes_offline_and_unlocated_pullers(mock_pickup_location):
    """
    Randomly scattered pullers, some offline and some that never reported a
    location. Only online, located pullers may come back, at most `limit`
    of them, nearest first.
    """
    random.seed(42)
    base_lat, base_lon = mock_pickup_location

    pullers = []
    for i in range(60):
        offset_lat = (random.random() - 0.5) * 0.04
        offset_lon = (random.random() - 0.5) * 0.04

        if i % 7 == 0:
            puller = Puller.new(f"puller_{i}", f"+88017000000{i:02d}", is_online=True)
        else:
            puller = Puller.new(
                f"puller_{i}",
                f"+88017000000{i:02d}",
                lat=base_lat + offset_lat,
                lon=base_lon + offset_lon,
                is_online=(i % 5 != 0),
            )
        pullers.append(puller)

    nearby = rank_nearby_pullers(mock_pickup_location, pullers, limit=8)

    # 1. Limit respected
    assert len(nearby) == 8

    # 2. Nobody offline or without a location
    for candidate in nearby:
        assert candidate.puller.is_online
        assert candidate.puller.location is not None

    # 3. Non-decreasing distance
    distances = [candidate.distance_m for candidate in nearby]
    assert distances == sorted(distances)

    # 4. They really are the closest eligible ones
    eligible = filter_eligible_pullers(pullers)
    closest = sorted(haversine_meters(mock_pickup_location, p.location) for p in eligible)[:8]
    assert distances == pytest.approx(closest)


def test_nearby_sorting(mock_pickup_location):
    base_lat, base_lon = mock_pickup_location

    pullers = [
        Puller.new("puller_far", "+8801700000001", base_lat + 0.015, base_lon + 0.015, is_online=True),
        Puller.new("puller_closest", "+8801700000002", base_lat + 0.001, base_lon + 0.001, is_online=True),
        Puller.new("puller_close", "+8801700000003", base_lat + 0.01, base_lon + 0.01, is_online=True),
    ]

    nearby = rank_nearby_pullers(mock_pickup_location, pullers)

    assert [candidate.puller.name for candidate in nearby] == ["puller_closest", "puller_close", "puller_far"]
    assert nearby[0].rounded_distance_m < nearby[1].rounded_distance_m < nearby[2].rounded_distance_m


def test_ties_keep_input_order(mock_pickup_location):
    lat, lon = mock_pickup_location
    pullers = [
        Puller.new("first", "+8801700000001", lat, lon, is_online=True),
        Puller.new("second", "+8801700000002", lat, lon, is_online=True),
        Puller.new("third", "+8801700000003", lat, lon, is_online=True),
    ]

    nearby = rank_nearby_pullers(mock_pickup_location, pullers)

    assert [candidate.puller.name for candidate in nearby] == ["first", "second", "third"]


def test_default_limit_comes_from_policy(mock_pickup_location):
    lat, lon = mock_pickup_location
    pullers = [
        Puller.new(f"p{i}", f"+88017000000{i:02d}", lat + i * 0.001, lon, is_online=True)
        for i in range(12)
    ]

    assert len(rank_nearby_pullers(mock_pickup_location, pullers)) == 5
    assert len(rank_nearby_pullers(mock_pickup_location, pullers, policy=PullerPolicy(nearby_limit=3))) == 3


def test_no_eligible_pullers_returns_empty(mock_pickup_location):
    lat, lon = mock_pickup_location
    pullers = [
        Puller.new("offline", "+8801700000001", lat, lon, is_online=False),
        Puller.new("no_location", "+8801700000002", is_online=True),
    ]

    assert rank_nearby_pullers(mock_pickup_location, pullers) == []
    assert rank_nearby_pullers(mock_pickup_location, []) == []


def test_non_positive_limit_returns_empty(mock_pickup_location):
    lat, lon = mock_pickup_location
    pullers = [Puller.new("p", "+8801700000001", lat, lon, is_online=True)]

    assert rank_nearby_pullers(mock_pickup_location, pullers, limit=0) == []


def test_nearby_limit_from_env(monkeypatch):
    monkeypatch.setenv("AERAS_NEARBY_LIMIT", "2")

    assert puller_policy_from_env().nearby_limit == 2

    monkeypatch.setenv("AERAS_NEARBY_LIMIT", "0")
    with pytest.raises(ValueError):
        puller_policy_from_env()
