"""
Purpose: Repository-backed puller directory.
What it does:
Registration, location reports, online toggling, listing and profile pages
for pullers, plus the nearby lookup that feeds a new ride request.
Ranking rules live in pullers.selection; this class only fetches and stores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pullers.models import Puller
from pullers.policy import PullerPolicy, default_puller_policy
from pullers.selection import NearbyPuller, rank_nearby_pullers
from rides.models import PointsHistory, Ride
from rides.repository import RideRepository
from .exceptions import MissingField
from .resolver import PullerRef, ReferenceResolver
from .state_machines.puller_state import handle_location_report, handle_status_toggle

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class PullerProfile:
    puller: Puller
    points_history: List[PointsHistory]
    recent_rides: List[Ride]


class PullerDirectory:
    def __init__(
        self,
        repository: RideRepository,
        resolver: Optional[ReferenceResolver] = None,
        policy: Optional[PullerPolicy] = None,
    ):
        self.repository = repository
        self.resolver = resolver or ReferenceResolver(repository)
        self.policy = policy or default_puller_policy()

    def register(self, name: str, phone: str) -> Puller:
        """
        New pullers start offline with no location, 0 points and 0 rides.
        """
        if not name or not phone:
            raise MissingField("Name and phone are required")

        puller = self.repository.add_puller(Puller.new(name=name, phone=phone))
        logger.info("Registered puller %s (%s)", puller.id, puller.name)
        return puller

    def report_location(self, ref: PullerRef, latitude, longitude) -> Puller:
        # read and write in one unit so a concurrent points increment is not overwritten
        with self.repository.atomic():
            puller = self.resolver.require_puller(ref)
            moved = handle_location_report(puller, latitude, longitude)
            return self.repository.update_puller(moved)

    def set_online(self, ref: PullerRef, is_online: bool) -> Puller:
        with self.repository.atomic():
            puller = self.resolver.require_puller(ref)
            toggled = handle_status_toggle(puller, is_online)
            updated = self.repository.update_puller(toggled)
        logger.info("Puller %s is now %s", updated.id, "online" if is_online else "offline")
        return updated

    def list_pullers(self, online_only: bool = False) -> List[Puller]:
        if online_only:
            pullers = self.repository.find_pullers(lambda puller: puller.is_online)
        else:
            pullers = self.repository.list_pullers()
        return sorted(pullers, key=lambda puller: puller.name)

    def nearby(self, pickup: LatLon, limit: Optional[int] = None) -> List[NearbyPuller]:
        """
        Up to `limit` online, located pullers, nearest first.
        """
        candidates = self.repository.find_pullers(
            lambda puller: puller.is_online and puller.location is not None
        )
        return rank_nearby_pullers(pickup, candidates, limit=limit, policy=self.policy)

    def profile(self, ref: PullerRef) -> PullerProfile:
        puller = self.resolver.require_puller(ref)

        history = self.repository.points_history(puller.id)
        history = sorted(history, key=lambda entry: entry.created_at, reverse=True)

        rides = self.repository.find_rides(lambda ride: ride.puller_id == puller.id)
        rides = sorted(rides, key=lambda ride: ride.created_at, reverse=True)

        return PullerProfile(
            puller=puller,
            points_history=history[: self.policy.recent_history_limit],
            recent_rides=rides[: self.policy.recent_rides_limit],
        )
