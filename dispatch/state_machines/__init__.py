from .ride_state import (
    RideEvent,
    accept_ride,
    adjust_ride_points,
    cancel_ride,
    complete_ride,
    confirm_pickup,
    reject_ride,
)
from .puller_state import handle_location_report, handle_status_toggle

__all__ = [
    "RideEvent",
    "accept_ride",
    "adjust_ride_points",
    "cancel_ride",
    "complete_ride",
    "confirm_pickup",
    "reject_ride",
    "handle_location_report",
    "handle_status_toggle",
]
