"""
Ride lifecycle transitions.

    pending -> accepted -> pickup_confirmed -> completed
    pending -> rejected
    any non-terminal -> cancelled

Each function takes the current Ride and returns the next one (Ride is
frozen, so the input is never touched). Nothing here reads or writes
storage; the dispatcher resolves references, calls these, then commits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime
from numbers import Real
from typing import Callable, Optional, Tuple

from pullers.models import Puller
from rides.models import Location, PointsStatus, Ride, RideStatus, ACTIVE_STATUSES
from rides.points import DropoffOutcome, classify_dropoff
from rides.policy import RewardPolicy
from routing.geofence import haversine_meters, is_valid_coordinate
from ..exceptions import InvalidTransition, InvalidValue, MissingField, NotFound, Unauthorized

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]

COMPLETABLE_STATUSES = ACTIVE_STATUSES


class RideEvent:
    ACCEPT = "accept"
    REJECT = "reject"
    CONFIRM_PICKUP = "confirm_pickup"
    COMPLETE = "complete"
    CANCEL = "cancel"

    ALL = (ACCEPT, REJECT, CONFIRM_PICKUP, COMPLETE, CANCEL)


@dataclass(frozen=True)
class CompletionResult:
    ride: Ride
    outcome: DropoffOutcome


def _require_status(ride: Ride, allowed, event: str) -> None:
    if ride.status not in allowed:
        raise InvalidTransition(f"Cannot {event} ride {ride.id} from {ride.status.value}")


def _require_non_terminal(ride: Ride, event: str) -> None:
    if ride.status.is_terminal:
        raise InvalidTransition(f"Cannot {event} ride {ride.id}: already {ride.status.value}")


def authorize_puller(ride: Ride, actor: Optional[Puller], event: str) -> None:
    """
    Only the puller bound to the ride may drive it forward.

    A bound ride with a missing/unknown/different actor is Unauthorized
    whatever its status. A ride nobody accepted has no one to authorize,
    so moving it forward is an InvalidTransition.
    """
    if ride.puller_id is None:
        raise InvalidTransition(f"Cannot {event} ride {ride.id}: no puller has accepted it")

    if actor is None or actor.id != ride.puller_id:
        raise Unauthorized(f"Puller is not assigned to ride {ride.id}")


def accept_ride(ride: Ride, puller: Puller, now: datetime) -> Ride:
    """
    Bind the puller and stamp acceptance. Pending rides only.
    """
    _require_status(ride, {RideStatus.PENDING}, RideEvent.ACCEPT)

    return replace(
        ride,
        status=RideStatus.ACCEPTED,
        puller_id=puller.id,
        accepted_at=now,
    )


def reject_ride(ride: Ride) -> Ride:
    """
    Rejection is meant for pending rides but is not restricted to them;
    only terminal rides refuse it.
    """
    _require_non_terminal(ride, RideEvent.REJECT)
    if ride.status != RideStatus.PENDING:
        logger.warning("Rejecting ride %s from non-pending status %s", ride.id, ride.status.value)

    return replace(ride, status=RideStatus.REJECTED)


def confirm_pickup(ride: Ride, actor: Optional[Puller], now: datetime) -> Ride:
    authorize_puller(ride, actor, RideEvent.CONFIRM_PICKUP)
    _require_status(ride, {RideStatus.ACCEPTED}, RideEvent.CONFIRM_PICKUP)

    return replace(
        ride,
        status=RideStatus.PICKUP_CONFIRMED,
        pickup_confirmed_at=now,
    )


def parse_dropoff(latitude, longitude) -> LatLon:
    if latitude is None or longitude is None:
        raise MissingField("Drop-off location required")

    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidValue("Drop-off coordinates must be numbers")

    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidValue("Drop-off coordinates must be numbers")

    if not is_valid_coordinate(lat, lon):
        raise InvalidValue(f"Drop-off coordinate out of range: ({lat}, {lon})")

    return (lat, lon)


def complete_ride(
    ride: Ride,
    actor: Optional[Puller],
    latitude,
    longitude,
    destination: Optional[Location],
    now: datetime,
    policy: Optional[RewardPolicy] = None,
    distance_fn: Callable[[LatLon, LatLon], float] = haversine_meters,
) -> CompletionResult:
    """
    Score the drop-off against the destination block and close the ride.

    Checks run in order: authorization, status, drop-off coordinate,
    destination. The returned outcome tells the caller whether points
    (and a ledger line) are due.
    """
    authorize_puller(ride, actor, RideEvent.COMPLETE)
    _require_status(ride, COMPLETABLE_STATUSES, RideEvent.COMPLETE)

    dropoff = parse_dropoff(latitude, longitude)

    if destination is None:
        raise NotFound(f"Destination location not found for ride {ride.id}")

    distance_m = distance_fn(dropoff, destination.coordinates)
    outcome = classify_dropoff(distance_m, policy)

    completed = replace(
        ride,
        status=RideStatus.COMPLETED,
        completed_at=now,
        dropoff_latitude=dropoff[0],
        dropoff_longitude=dropoff[1],
        distance_from_block=distance_m,
        points_awarded=outcome.points,
        points_status=outcome.points_status,
    )
    return CompletionResult(ride=completed, outcome=outcome)


def cancel_ride(ride: Ride) -> Ride:
    _require_non_terminal(ride, RideEvent.CANCEL)
    return replace(ride, status=RideStatus.CANCELLED)


def parse_points(value) -> float:
    """
    Admin-entered point values: finite, non-negative, real. bool is not a number here.
    """
    if value is None:
        raise MissingField("Points value required")

    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidValue(f"Points must be numeric, got {value!r}")

    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise InvalidValue(f"Points must be a finite non-negative number, got {value!r}")

    return value


def adjust_ride_points(ride: Ride, new_points) -> Tuple[Ride, float, float]:
    """
    Returns (updated ride, old points, new points). Status is left alone;
    only points_awarded and points_status change.

    A ride with a puller on it is only scored once it is completed, so
    adjusting it earlier is an InvalidTransition. Rides nobody accepted
    carry no payout and may be adjusted in any status.
    """
    new_value = parse_points(new_points)

    if ride.puller_id is not None and ride.status != RideStatus.COMPLETED:
        raise InvalidTransition(
            f"Cannot adjust points on ride {ride.id} before it is completed (status {ride.status.value})"
        )

    old_value = ride.points_awarded or 0.0

    adjusted = replace(
        ride,
        points_awarded=new_value,
        points_status=PointsStatus.REWARDED,
    )
    return adjusted, old_value, new_value
