import pytest

from rides.models import PointsStatus
from rides.points import calculate_points, classify_dropoff, round_half_up
from rides.policy import RewardPolicy, default_reward_policy, reward_policy_from_env


@pytest.mark.parametrize(
    "distance, expected",
    [
        (0, 10.0),
        (5, 9.5),
        (45, 5.5),
        (75, 2.5),
        (99, 0.1),
        (100, 0.0),
        (150, 0.0),
        (10_000, 0.0),
    ],
)
def test_calculate_points(distance, expected):
    assert calculate_points(distance) == expected


def test_points_stay_in_range_and_never_increase_with_distance():
    previous = None
    for tenth_of_meter in range(0, 1500):
        points = calculate_points(tenth_of_meter / 10)

        assert 0.0 <= points <= 10.0
        if previous is not None:
            assert points <= previous
        previous = points


def test_rounding_is_half_up():
    # 10 - 0.05 = 9.95 -> 10.0, where banker's rounding of the float gives 9.9
    assert calculate_points(0.5) == 10.0
    assert round_half_up(2.25, 1) == 2.3
    assert round_half_up(29.5, 0) == 30.0


def test_classify_full_reward():
    outcome = classify_dropoff(0)

    assert outcome.points == 10.0
    assert outcome.points_status == PointsStatus.REWARDED
    assert outcome.rewarded
    assert outcome.description == "Ride completed - 10.0 points"


def test_classify_boundary_50m_is_still_full_reward():
    outcome = classify_dropoff(50)

    assert outcome.points == 5.0
    assert "reduced" not in outcome.description


def test_classify_reduced_reward():
    outcome = classify_dropoff(75)

    assert outcome.points == 2.5
    assert outcome.points_status == PointsStatus.REWARDED
    assert outcome.description == "Ride completed (reduced points) - 2.5 points"


def test_classify_100m_is_rewarded_with_zero():
    outcome = classify_dropoff(100)

    assert outcome.points == 0.0
    assert outcome.points_status == PointsStatus.REWARDED


def test_classify_far_dropoff_goes_to_review():
    outcome = classify_dropoff(150)

    assert outcome.points == 0.0
    assert outcome.points_status == PointsStatus.UNDER_REVIEW
    assert not outcome.rewarded


def test_custom_policy_changes_formula():
    generous = RewardPolicy(base_points=20, meters_per_point=20, full_reward_radius_m=100, reduced_reward_radius_m=200)

    assert calculate_points(40, generous) == 18.0
    assert classify_dropoff(150, generous).points_status == PointsStatus.REWARDED


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_points": -1},
        {"meters_per_point": 0},
        {"full_reward_radius_m": -5},
        {"full_reward_radius_m": 80, "reduced_reward_radius_m": 60},
    ],
)
def test_policy_validation(kwargs):
    with pytest.raises(ValueError):
        RewardPolicy(**kwargs).validate()


def test_policy_from_env(monkeypatch):
    monkeypatch.setenv("AERAS_BASE_POINTS", "12")
    monkeypatch.setenv("AERAS_REDUCED_REWARD_RADIUS_M", "120")

    policy = reward_policy_from_env()

    assert policy.base_points == 12.0
    assert policy.reduced_reward_radius_m == 120.0
    assert policy.meters_per_point == default_reward_policy().meters_per_point
