"""
Purpose: Dashboard statistics (read side only).
What it does:
Recomputes every metric from the full ride / puller / rider collections on
each call. Nothing is cached and nothing is written back. Every reducer
returns zero or an empty list for empty input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pullers.models import Puller
from rides.models import ACTIVE_STATUSES, Location, PointsStatus, Ride, RideStatus
from rides.points import round_half_up

TOP_DESTINATIONS = 5
LEADERBOARD_SIZE = 10

# cancelled, rejected and in-flight rides do not count as demand
REQUESTED_STATUSES = frozenset({RideStatus.COMPLETED, RideStatus.PENDING})


@dataclass(frozen=True)
class DestinationCount:
    location_id: str
    location_name: str
    count: int


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    name: str
    points: float
    total_rides: int


@dataclass(frozen=True)
class StatsSnapshot:
    # overview
    total_riders: int = 0
    total_pullers: int = 0
    active_users_on_blocks: int = 0
    online_pullers: int = 0
    active_rides: int = 0
    pending_requests: int = 0
    total_rides: int = 0
    completed_rides: int = 0

    # analytics
    most_requested_destinations: List[DestinationCount] = field(default_factory=list)
    avg_wait_time_seconds: float = 0
    avg_completion_time_minutes: float = 0.0
    puller_leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    pending_reviews: int = 0

    def to_dict(self) -> dict:
        return {
            "overview": {
                "total_riders": self.total_riders,
                "total_pullers": self.total_pullers,
                "active_users_on_blocks": self.active_users_on_blocks,
                "online_pullers": self.online_pullers,
                "active_rides": self.active_rides,
                "pending_requests": self.pending_requests,
                "total_rides": self.total_rides,
                "completed_rides": self.completed_rides,
            },
            "analytics": {
                "most_requested_destinations": [
                    {"location_id": d.location_id, "location_name": d.location_name, "count": d.count}
                    for d in self.most_requested_destinations
                ],
                "avg_wait_time": self.avg_wait_time_seconds,
                "avg_completion_time": self.avg_completion_time_minutes,
                "puller_leaderboard": [
                    {"id": e.id, "name": e.name, "points": e.points, "total_rides": e.total_rides}
                    for e in self.puller_leaderboard
                ],
                "pending_reviews": self.pending_reviews,
            },
        }


# --- counts ---

def count_with_status(rides: Sequence[Ride], *statuses: RideStatus) -> int:
    wanted = set(statuses)
    return sum(1 for ride in rides if ride.status in wanted)


def count_active_rides(rides: Sequence[Ride]) -> int:
    return sum(1 for ride in rides if ride.status in ACTIVE_STATUSES)


def count_active_riders(rides: Sequence[Ride]) -> int:
    """Distinct riders holding at least one non-terminal ride."""
    return len({ride.rider_id for ride in rides if not ride.status.is_terminal})


def count_online_pullers(pullers: Sequence[Puller]) -> int:
    return sum(1 for puller in pullers if puller.is_online)


def count_pending_reviews(rides: Sequence[Ride]) -> int:
    return sum(1 for ride in rides if ride.points_status == PointsStatus.UNDER_REVIEW)


# --- rankings ---

def most_requested_destinations(
    rides: Sequence[Ride],
    locations: Dict[str, Location],
    top: int = TOP_DESTINATIONS,
) -> List[DestinationCount]:
    """
    Completed and pending ride counts per destination, highest first.
    Destinations tied on count keep the order in which they were first requested.
    """
    counts: Dict[str, int] = {}
    for ride in rides:
        if ride.status not in REQUESTED_STATUSES:
            continue
        counts[ride.destination_location_id] = counts.get(ride.destination_location_id, 0) + 1

    ranked = [
        DestinationCount(
            location_id=location_id,
            location_name=locations[location_id].name if location_id in locations else "Unknown",
            count=count,
        )
        for location_id, count in counts.items()
    ]
    ranked.sort(key=lambda entry: entry.count, reverse=True)
    return ranked[:top]


def puller_leaderboard(pullers: Sequence[Puller], size: int = LEADERBOARD_SIZE) -> List[LeaderboardEntry]:
    ranked = sorted(pullers, key=lambda puller: puller.points, reverse=True)
    return [
        LeaderboardEntry(id=p.id, name=p.name, points=p.points, total_rides=p.total_rides)
        for p in ranked[:size]
    ]


# --- timings ---

def _mean_elapsed_seconds(rides: Sequence[Ride], attr: str) -> Optional[float]:
    spans = []
    for ride in rides:
        end: Optional[datetime] = getattr(ride, attr)
        if end is None or ride.created_at is None:
            continue
        spans.append((end - ride.created_at).total_seconds())

    if not spans:
        return None
    return sum(spans) / len(spans)


def average_wait_time_seconds(rides: Sequence[Ride]) -> float:
    """Mean request-to-acceptance time, whole seconds."""
    mean = _mean_elapsed_seconds(rides, "accepted_at")
    if mean is None:
        return 0
    return round_half_up(mean, 0)


def average_completion_time_minutes(rides: Sequence[Ride]) -> float:
    """Mean request-to-completion time in minutes, 1 decimal."""
    mean = _mean_elapsed_seconds(rides, "completed_at")
    if mean is None:
        return 0.0
    return round_half_up(mean / 60, 1)


def compute_stats(
    rides: Sequence[Ride],
    pullers: Sequence[Puller],
    locations: Sequence[Location] = (),
    total_riders: int = 0,
) -> StatsSnapshot:
    location_index = {location.id: location for location in locations}

    return StatsSnapshot(
        total_riders=total_riders,
        total_pullers=len(pullers),
        active_users_on_blocks=count_active_riders(rides),
        online_pullers=count_online_pullers(pullers),
        active_rides=count_active_rides(rides),
        pending_requests=count_with_status(rides, RideStatus.PENDING),
        total_rides=len(rides),
        completed_rides=count_with_status(rides, RideStatus.COMPLETED),
        most_requested_destinations=most_requested_destinations(rides, location_index),
        avg_wait_time_seconds=average_wait_time_seconds(rides),
        avg_completion_time_minutes=average_completion_time_minutes(rides),
        puller_leaderboard=puller_leaderboard(pullers),
        pending_reviews=count_pending_reviews(rides),
    )
