"""
Purpose: Domain models for the Rides capability.
What it does:
- Defines core data structures:
- Location (id, name, block coordinate, block_id)
- Rider (id, name, age, category, privilege flag)
- Ride (rider/puller refs, pickup/destination refs, status, captured coords, points outcome, timestamps)
- PointsHistory (append-only ledger entry)

Defines enums/constants:
- RideStatus = pending | accepted | pickup_confirmed | in_progress | completed | cancelled | rejected
- PointsStatus = pending | rewarded | under_review
- LedgerKind = earned | adjusted | redeemed | expired
- RiderCategory = senior | special_needs

Rule: No repository access, no transition logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
import uuid

LatLon = Tuple[float, float]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


class RideStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PICKUP_CONFIRMED = "pickup_confirmed"
    # reserved: counted by stats, no transition leads here yet
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {RideStatus.COMPLETED, RideStatus.CANCELLED, RideStatus.REJECTED}
)

# a puller is on the ride but it has not finished
ACTIVE_STATUSES = frozenset(
    {RideStatus.ACCEPTED, RideStatus.PICKUP_CONFIRMED, RideStatus.IN_PROGRESS}
)


class PointsStatus(str, Enum):
    PENDING = "pending"
    REWARDED = "rewarded"
    UNDER_REVIEW = "under_review"


class LedgerKind(str, Enum):
    EARNED = "earned"
    ADJUSTED = "adjusted"
    REDEEMED = "redeemed"
    EXPIRED = "expired"


class RiderCategory(str, Enum):
    SENIOR = "senior"
    SPECIAL_NEEDS = "special_needs"


@dataclass(frozen=True)
class Location:
    """
    A named destination block with its canonical coordinate.
    Reference data: seeded once, never changed by ride requests.
    """
    id: str
    name: str
    latitude: float
    longitude: float
    block_id: str

    @property
    def coordinates(self) -> LatLon:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Rider:
    id: str
    name: str
    age: int
    category: RiderCategory
    privilege_verified: bool = False
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(
        cls,
        name: str,
        age: int,
        category: str | RiderCategory,
        privilege_verified: bool = False,
        rider_id: Optional[str] = None,
    ) -> Rider:
        if isinstance(category, str):
            category = RiderCategory(category)

        return cls(
            id=rider_id or new_id("user"),
            name=name,
            age=age,
            category=category,
            privilege_verified=privilege_verified,
        )


@dataclass(frozen=True)
class Ride:
    """
    A single ride request and everything that happened to it.

    pickup_* is captured from the pickup Location at creation and dropoff_*
    from the puller's report at completion; neither is re-derived later.
    """
    id: str
    rider_id: str
    pickup_location_id: str
    destination_location_id: str
    pickup_latitude: float
    pickup_longitude: float

    status: RideStatus = RideStatus.PENDING
    points_status: PointsStatus = PointsStatus.PENDING
    puller_id: Optional[str] = None

    dropoff_latitude: Optional[float] = None
    dropoff_longitude: Optional[float] = None
    distance_from_block: Optional[float] = None
    points_awarded: Optional[float] = None

    created_at: datetime = field(default_factory=utcnow)
    accepted_at: Optional[datetime] = None
    pickup_confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @staticmethod # Factory method to create a pending Ride from its resolved endpoints
    def new(rider: Rider, pickup: Location, destination: Location, created_at: Optional[datetime] = None) -> Ride:
        return Ride(
            id=new_id("ride"),
            rider_id=rider.id,
            pickup_location_id=pickup.id,
            destination_location_id=destination.id,
            pickup_latitude=pickup.latitude,
            pickup_longitude=pickup.longitude,
            created_at=created_at or utcnow(),
        )

    @property
    def pickup_coordinates(self) -> LatLon:
        return (self.pickup_latitude, self.pickup_longitude)


@dataclass(frozen=True)
class PointsHistory:
    """
    One append-only ledger line. `points` is the signed delta.
    """
    id: str
    puller_id: str
    ride_id: str
    points: float
    kind: LedgerKind
    description: str
    created_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def new(puller_id: str, ride_id: str, points: float, kind: LedgerKind, description: str,
            created_at: Optional[datetime] = None) -> PointsHistory:
        return PointsHistory(
            id=new_id("ph"),
            puller_id=puller_id,
            ride_id=ride_id,
            points=points,
            kind=kind,
            description=description,
            created_at=created_at or utcnow(),
        )
