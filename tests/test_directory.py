import pytest

from dispatch import PullerDirectory, RideEvent
from dispatch.exceptions import InvalidValue, MissingField, NotFound
from pullers.policy import PullerPolicy
from rides.models import RideStatus
from conftest import CUET, NOAPARA, PAHARTOLI


@pytest.fixture
def directory(repository):
    return PullerDirectory(repository)


def complete_ride_for(dispatcher, clock, puller_ref, destination="loc_2"):
    ride = dispatcher.create_ride("user_1", "loc_1", destination)
    clock.advance(minutes=1)
    dispatcher.transition_ride(ride.id, RideEvent.ACCEPT, puller_ref)
    dispatcher.transition_ride(ride.id, RideEvent.CONFIRM_PICKUP, puller_ref)
    clock.advance(minutes=5)
    return dispatcher.transition_ride(
        ride.id, RideEvent.COMPLETE, puller_ref, {"latitude": PAHARTOLI[0], "longitude": PAHARTOLI[1]}
    )


def test_register_starts_offline_and_empty(directory, repository):
    puller = directory.register("Jamal Hossain", "+8801745678901")

    assert puller.is_online is False
    assert puller.location is None
    assert puller.points == 0.0
    assert puller.total_rides == 0
    assert repository.get_puller(puller.id) == puller


@pytest.mark.parametrize("name, phone", [("", "+8801745678901"), ("Jamal", ""), (None, None)])
def test_register_requires_name_and_phone(directory, name, phone):
    with pytest.raises(MissingField):
        directory.register(name, phone)


def test_location_report_moves_only_the_coordinate(directory, repository):
    repository.increment_puller("puller_h", points=4.5, rides=2)

    moved = directory.report_location("+8801734567890", "22.4580", "91.9920")

    assert moved.location == NOAPARA
    assert moved.is_online is False
    assert moved.points == 4.5
    assert moved.total_rides == 2
    assert repository.get_puller("puller_h") == moved


@pytest.mark.parametrize(
    "lat, lon, error",
    [
        (None, 91.99, MissingField),
        (22.45, None, MissingField),
        (91.0, 91.99, InvalidValue),
        ("east", 91.99, InvalidValue),
        (True, 91.99, InvalidValue),
    ],
)
def test_bad_location_reports(directory, repository, lat, lon, error):
    before = repository.get_puller("puller_k")

    with pytest.raises(error):
        directory.report_location("puller_k", lat, lon)

    assert repository.get_puller("puller_k") == before


def test_location_report_for_unknown_puller(directory):
    with pytest.raises(NotFound):
        directory.report_location("nobody", 22.45, 91.99)


def test_toggle_online(directory, repository):
    assert directory.set_online("Hasan Mia", True).is_online is True
    assert repository.get_puller("puller_h").is_online is True

    assert directory.set_online("puller_h", False).is_online is False

    with pytest.raises(InvalidValue):
        directory.set_online("puller_h", "yes")


def test_list_pullers_sorted_by_name(directory):
    directory.register("Abul Kashem", "+8801756789012")

    assert [p.name for p in directory.list_pullers()] == ["Abul Kashem", "Hasan Mia", "Karim Uddin", "Rashid Ali"]
    assert [p.name for p in directory.list_pullers(online_only=True)] == ["Karim Uddin", "Rashid Ali"]


def test_nearby_from_cuet(dispatcher):
    nearby = dispatcher.nearby_pullers(CUET)

    assert [candidate.puller.id for candidate in nearby] == ["puller_k", "puller_r"]
    assert nearby[0].rounded_distance_m == 0
    assert 1600 < nearby[1].distance_m < 1800


def test_offline_puller_appears_once_located_and_online(dispatcher):
    dispatcher.directory.report_location("puller_h", *CUET)
    assert "puller_h" not in [c.puller.id for c in dispatcher.nearby_pullers(CUET)]

    dispatcher.directory.set_online("puller_h", True)
    assert "puller_h" in [c.puller.id for c in dispatcher.nearby_pullers(CUET)]


def test_nearby_limit_and_bad_pickup(dispatcher):
    assert len(dispatcher.nearby_pullers(CUET, limit=1)) == 1

    with pytest.raises(InvalidValue):
        dispatcher.nearby_pullers((123.0, 91.97))

    with pytest.raises(MissingField):
        dispatcher.nearby_pullers(None)


def test_profile_lists_newest_first_and_is_capped(dispatcher, repository, clock):
    dispatcher.directory.policy = PullerPolicy(recent_history_limit=3, recent_rides_limit=4)

    completed = [complete_ride_for(dispatcher, clock, "puller_k") for _ in range(6)]

    profile = dispatcher.directory.profile("+8801712345678")

    assert profile.puller.id == "puller_k"
    assert profile.puller.points == 60.0
    assert profile.puller.total_rides == 6

    assert [entry.ride_id for entry in profile.points_history] == [ride.id for ride in reversed(completed)][:3]
    assert [ride.id for ride in profile.recent_rides] == [ride.id for ride in reversed(completed)][:4]


def test_profile_for_unknown_puller(directory):
    with pytest.raises(NotFound):
        directory.profile("nobody")


def test_dispatcher_read_views(dispatcher, clock):
    first = dispatcher.create_ride("user_1", "loc_1", "loc_2")
    clock.advance(seconds=10)
    second = dispatcher.create_ride("user_2", "loc_3", "loc_4")
    clock.advance(seconds=10)
    taken = dispatcher.create_ride("user_3", "loc_1", "loc_3")
    dispatcher.transition_ride(taken.id, RideEvent.ACCEPT, "puller_r")

    assert [ride.id for ride in dispatcher.active_requests()] == [second.id, first.id]
    assert [ride.id for ride in dispatcher.rides_for_puller("Rashid Ali")] == [taken.id]
    assert dispatcher.get_ride(taken.id).status == RideStatus.ACCEPTED
    assert [loc.name for loc in dispatcher.list_locations()] == ["CUET Campus", "Noapara", "Pahartoli", "Raojan"]

    with pytest.raises(NotFound):
        dispatcher.get_ride("ride_404")
