import pytest
from datetime import datetime, timedelta, timezone

from dispatch import RideDispatcher
from pullers.models import Puller
from rides.models import Location, Rider
from rides.repository import InMemoryRideRepository

CUET = (22.4633, 91.9714)
PAHARTOLI = (22.4725, 91.9845)
NOAPARA = (22.4580, 91.9920)
RAOJAN = (22.4520, 91.9650)


class FakeClock:
    """Frozen time that only moves when a test says so."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds, minutes=minutes)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository():
    repo = InMemoryRideRepository()

    repo.add_location(Location("loc_1", "CUET Campus", *CUET, block_id="block_cuet"))
    repo.add_location(Location("loc_2", "Pahartoli", *PAHARTOLI, block_id="block_pahartoli"))
    repo.add_location(Location("loc_3", "Noapara", *NOAPARA, block_id="block_noapara"))
    repo.add_location(Location("loc_4", "Raojan", *RAOJAN, block_id="block_raojan"))

    repo.add_rider(Rider.new("Abdul Rahman", 65, "senior", privilege_verified=True, rider_id="user_1"))
    repo.add_rider(Rider.new("Fatima Begum", 72, "senior", privilege_verified=True, rider_id="user_2"))
    repo.add_rider(Rider.new("Ahmed Hassan", 25, "special_needs", privilege_verified=True, rider_id="user_3"))

    repo.add_puller(Puller.new("Karim Uddin", "+8801712345678", *CUET, is_online=True, puller_id="puller_k"))
    repo.add_puller(Puller.new("Rashid Ali", "+8801723456789", *PAHARTOLI, is_online=True, puller_id="puller_r"))
    repo.add_puller(Puller.new("Hasan Mia", "+8801734567890", puller_id="puller_h"))

    return repo


@pytest.fixture
def dispatcher(repository, clock):
    return RideDispatcher(repository, clock=clock)
