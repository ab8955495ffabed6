"""
Purpose: Orchestrator for the ride lifecycle (the "glue").
What it does:
Resolves references, serializes work per ride, runs the pure transitions from
state_machines.ride_state and commits the resulting ride, puller increments
and ledger lines to the repository as one unit.

Entry points:
- create_ride(rider, pickup, destination)
- nearby_pullers(pickup, limit)
- transition_ride(ride_id, event, actor, payload)
- adjust_points(ride_id, new_points)
- compute_stats()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional, Tuple

from analytics.aggregator import StatsSnapshot, compute_stats
from pullers.policy import PullerPolicy
from pullers.selection import NearbyPuller
from rides.models import LedgerKind, PointsHistory, Ride, RideStatus
from rides.policy import RewardPolicy, default_reward_policy
from rides.repository import RideRepository
from routing.geofence import haversine_meters, is_valid_coordinate
from .directory import PullerDirectory
from .exceptions import InvalidTransition, InvalidValue, MissingField, NotFound, RideAlreadyTaken
from .locks import RideLockManager
from .resolver import LocationRef, PullerRef, ReferenceResolver, RiderRef
from .state_machines import ride_state
from .state_machines.ride_state import RideEvent

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RideDispatcher:
    """
    Coordinates rides between riders and pullers.

    Every mutation of a ride runs under that ride's lock and inside one
    repository unit of work, so it either fully applies or leaves nothing behind.
    """
    def __init__(
        self,
        repository: RideRepository,
        lock_manager: Optional[RideLockManager] = None,
        resolver: Optional[ReferenceResolver] = None,
        reward_policy: Optional[RewardPolicy] = None,
        puller_policy: Optional[PullerPolicy] = None,
        clock: Callable[[], datetime] = _utcnow,
        distance_fn: Callable[[LatLon, LatLon], float] = haversine_meters,
    ):
        self.repository = repository
        self.lock_manager = lock_manager or RideLockManager()
        self.resolver = resolver or ReferenceResolver(repository)
        self.reward_policy = reward_policy or default_reward_policy()
        self.directory = PullerDirectory(repository, resolver=self.resolver, policy=puller_policy)
        self.clock = clock
        self.distance_fn = distance_fn

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create_ride(self, rider_ref: RiderRef, pickup_ref: LocationRef, destination_ref: LocationRef) -> Ride:
        if rider_ref is None or pickup_ref is None or destination_ref is None:
            raise MissingField("rider, pickup and destination are required")

        rider = self.resolver.require_rider(rider_ref)
        pickup = self.resolver.require_location(pickup_ref)
        destination = self.resolver.require_location(destination_ref)

        ride = self.repository.add_ride(Ride.new(rider, pickup, destination, created_at=self.clock()))
        logger.info(
            "Ride %s requested by %s: %s -> %s", ride.id, rider.id, pickup.name, destination.name
        )
        return ride

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def nearby_pullers(self, pickup: LatLon, limit: Optional[int] = None) -> List[NearbyPuller]:
        if pickup is None:
            raise MissingField("pickup coordinate required")
        lat, lon = pickup
        if not is_valid_coordinate(lat, lon):
            raise InvalidValue(f"Pickup coordinate out of range: {pickup!r}")
        return self.directory.nearby((float(lat), float(lon)), limit=limit)

    def get_ride(self, ride_id: str) -> Ride:
        ride = self.repository.get_ride(ride_id)
        if ride is None:
            raise NotFound(f"Ride not found: {ride_id!r}")
        return ride

    def active_requests(self) -> List[Ride]:
        """Pending rides, newest first."""
        pending = self.repository.find_rides(lambda ride: ride.status == RideStatus.PENDING)
        return sorted(pending, key=lambda ride: ride.created_at, reverse=True)

    def rides_for_puller(self, puller_ref: PullerRef, limit: int = 10) -> List[Ride]:
        puller = self.resolver.require_puller(puller_ref)
        rides = self.repository.find_rides(lambda ride: ride.puller_id == puller.id)
        rides.sort(key=lambda ride: ride.created_at, reverse=True)
        return rides[:limit]

    def list_locations(self):
        return sorted(self.repository.list_locations(), key=lambda location: location.name)

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    def transition_ride(
        self,
        ride_id: str,
        event: str,
        actor_ref: Optional[PullerRef] = None,
        payload: Optional[Mapping] = None,
    ) -> Ride:
        """
        Apply one lifecycle event. payload carries event-specific fields
        (`latitude`/`longitude` for complete).
        """
        payload = payload or {}
        event = getattr(event, "value", event)
        if event not in RideEvent.ALL:
            raise InvalidTransition(f"Unknown ride event: {event!r}")

        with self.lock_manager.lock(f"ride:{ride_id}"):
            with self.repository.atomic():
                ride = self.get_ride(ride_id)

                if event == RideEvent.ACCEPT:
                    updated = self._accept(ride, actor_ref)
                elif event == RideEvent.REJECT:
                    updated = self.repository.update_ride(ride_state.reject_ride(ride))
                elif event == RideEvent.CONFIRM_PICKUP:
                    actor = self.resolver.resolve_puller(actor_ref)
                    confirmed = ride_state.confirm_pickup(ride, actor, self.clock())
                    updated = self.repository.update_ride(confirmed)
                elif event == RideEvent.COMPLETE:
                    updated = self._complete(ride, actor_ref, payload)
                else:
                    updated = self.repository.update_ride(ride_state.cancel_ride(ride))

        logger.info("Ride %s: %s -> %s", ride.id, ride.status.value, updated.status.value)
        return updated

    def _accept(self, ride: Ride, actor_ref: Optional[PullerRef]) -> Ride:
        if actor_ref is None:
            raise MissingField("Puller ID required")

        # accept_ride would refuse this too; checked here only to raise the
        # RideAlreadyTaken subtype for a lost race
        if ride.status != RideStatus.PENDING and ride.puller_id is not None:
            raise RideAlreadyTaken(f"Ride {ride.id} was already accepted")

        puller = self.resolver.require_puller(actor_ref)
        accepted = ride_state.accept_ride(ride, puller, self.clock())
        return self.repository.update_ride(accepted)

    def _complete(self, ride: Ride, actor_ref: Optional[PullerRef], payload: Mapping) -> Ride:
        actor = self.resolver.resolve_puller(actor_ref)
        destination = self.repository.get_location(ride.destination_location_id)

        result = ride_state.complete_ride(
            ride,
            actor,
            payload.get("latitude"),
            payload.get("longitude"),
            destination,
            self.clock(),
            policy=self.reward_policy,
            distance_fn=self.distance_fn,
        )
        completed = self.repository.update_ride(result.ride)

        if result.outcome.rewarded:
            self.repository.increment_puller(ride.puller_id, points=result.outcome.points, rides=1)
            self.repository.append_points_history(
                PointsHistory.new(
                    puller_id=ride.puller_id,
                    ride_id=ride.id,
                    points=result.outcome.points,
                    kind=LedgerKind.EARNED,
                    description=result.outcome.description,
                    created_at=completed.completed_at,
                )
            )
        else:
            logger.warning(
                "Ride %s dropped off %.1f m from block, held for review",
                ride.id, completed.distance_from_block,
            )

        return completed

    # ------------------------------------------------------------------
    # admin
    # ------------------------------------------------------------------

    def adjust_points(self, ride_id: str, new_points) -> Ride:
        """
        Set a ride's award to `new_points`. The difference is applied to the
        bound puller (if any) and recorded as an `adjusted` ledger line.
        """
        with self.lock_manager.lock(f"ride:{ride_id}"):
            with self.repository.atomic():
                ride = self.get_ride(ride_id)
                adjusted, old_points, new_value = ride_state.adjust_ride_points(ride, new_points)
                updated = self.repository.update_ride(adjusted)

                if ride.puller_id is not None:
                    delta = new_value - old_points
                    self.repository.increment_puller(ride.puller_id, points=delta)
                    self.repository.append_points_history(
                        PointsHistory.new(
                            puller_id=ride.puller_id,
                            ride_id=ride.id,
                            points=delta,
                            kind=LedgerKind.ADJUSTED,
                            description=f"Admin adjusted points: {old_points:g} → {new_value:g}",
                            created_at=self.clock(),
                        )
                    )

        logger.info("Ride %s points adjusted %s -> %s", ride_id, old_points, new_value)
        return updated

    # ------------------------------------------------------------------
    # stats
    # ------------------------------------------------------------------

    def compute_stats(self) -> StatsSnapshot:
        return compute_stats(
            rides=self.repository.list_rides(),
            pullers=self.repository.list_pullers(),
            locations=self.repository.list_locations(),
            total_riders=len(self.repository.list_riders()),
        )
