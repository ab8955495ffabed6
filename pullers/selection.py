"""
Purpose: Business rules and distance math for choosing the closest pullers.
What it does:
Accepts a pickup point and a pool of pullers, filters out ineligible pullers,
and ranks the remaining ones by great-circle distance to the pickup.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from routing.geofence import haversine_meters
from .models import Puller
from .policy import PullerPolicy, default_puller_policy

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class NearbyPuller:
    """
    A ranked candidate: the puller plus how far they are from the pickup.
    """
    puller: Puller
    distance_m: float

    @property
    def rounded_distance_m(self) -> int:
        return int(self.distance_m + 0.5)


def filter_eligible_pullers(pullers: Sequence[Puller]) -> List[Puller]:
    """
    Returns only pullers who are online and have reported where they are.
    Everyone else is dropped, not pushed to the back.
    """
    eligible = []

    for puller in pullers:
        if not puller.is_online:
            continue

        if puller.location is None:
            continue

        eligible.append(puller)

    return eligible


def rank_nearby_pullers(
    pickup_location: LatLon,
    pullers: Sequence[Puller],
    limit: Optional[int] = None,
    policy: Optional[PullerPolicy] = None,
    distance_fn: Callable[[LatLon, LatLon], float] = haversine_meters,
) -> List[NearbyPuller]:
    """
    Given a pickup location, filter out ineligible pullers and return the
    `limit` closest ones, nearest first.

    sorted() is stable, so equal distances keep the input order.
    """
    policy = policy or default_puller_policy()
    if limit is None:
        limit = policy.nearby_limit

    if limit <= 0:
        return []

    eligible = filter_eligible_pullers(pullers)
    if not eligible:
        return []

    ranked = [
        NearbyPuller(puller=puller, distance_m=distance_fn(pickup_location, puller.location))
        for puller in eligible
    ]
    ranked.sort(key=lambda candidate: candidate.distance_m)

    return ranked[:limit]
